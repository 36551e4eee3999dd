"""Output alias resolution.

Callers may filter and sort on the aliases they declared in
``QueryConfig.fields``. The resolver maps such an alias back to the
underlying column text so the emitted SQL refers to something MySQL can
evaluate in WHERE and ORDER BY.
"""

import re
from typing import Optional, Tuple

from querycraft.operations.query import QueryConfig

# Leading field token: `quoted`, `a`.`b`, name or table.name
_FIELD_TOKEN = r"`[^`]+`(?:\.`[^`]+`)?|[A-Za-z_][\w$]*(?:\.[A-Za-z_][\w$]*)?"

_SYMBOLIC_OPERATORS = r"<=>|<>|!=|<=|>=|=|<|>"
_WORD_OPERATORS = r"NOT\s+LIKE|LIKE|NOT\s+IN|IN|IS\s+NOT\s+NULL|IS\s+NULL|BETWEEN"

_CONDITION_PATTERN = re.compile(
    rf"^(?P<lead>\s*)(?P<field>{_FIELD_TOKEN})"
    rf"(?=\s*(?:{_SYMBOLIC_OPERATORS})|\s+(?:{_WORD_OPERATORS})\b)",
    re.IGNORECASE,
)

_DIRECTION_SUFFIX = re.compile(r"^(?P<term>.*?)\s+(?P<direction>ASC|DESC)\s*$", re.IGNORECASE | re.DOTALL)


def resolve(name: str, config: QueryConfig) -> str:
    """Map an output alias to its column text.

    Only plain string field specs resolve; raw expressions and subqueries
    are not substituted. Unknown names pass through unchanged.
    """
    target = config.fields.get(name.strip("`"))
    if isinstance(target, str):
        return target
    return name


def resolve_condition(fragment: str, config: QueryConfig) -> str:
    """Resolve the leading field token of a condition.

    ``full_name LIKE ?`` becomes ``CONCAT(first, ' ', last) LIKE ?`` when
    ``full_name`` is a declared alias. Only the token before a recognized
    operator is replaced; fragments without one pass through unchanged.
    """
    match = _CONDITION_PATTERN.match(fragment)
    if match is None:
        return fragment
    resolved = resolve(match.group("field"), config)
    if resolved == match.group("field"):
        return fragment
    return fragment[:match.start("field")] + resolved + fragment[match.end("field"):]


def resolve_order_term(term: str, config: QueryConfig) -> Tuple[str, Optional[str]]:
    """Split an ORDER BY entry into a resolved term and its inline direction.

    Returns:
        ``(resolved_term, "ASC" | "DESC" | None)``
    """
    match = _DIRECTION_SUFFIX.match(term)
    if match is None:
        return resolve(term.strip(), config), None
    return resolve(match.group("term").strip(), config), match.group("direction").upper()
