"""Positional placeholder rewriting.

Compiled statements use ``?`` placeholders. SQLAlchemy's :func:`text`
construct binds by name, so each ``?`` outside a quoted region becomes
``:p0``, ``:p1``, ... and literal ``:name`` sequences are escaped so they
are not mistaken for binds. The driver paramstyle (and ``%`` escaping for
``pyformat`` drivers) is then handled by SQLAlchemy.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

from querycraft.common.exceptions import ErrorCode, validation_error
from querycraft.constants.validation import PLACEHOLDER_QUOTES



def bind_positional(sql: str, values: Sequence[Any] = ()) -> Tuple[str, Dict[str, Any]]:
    """Rewrite ``?`` placeholders to named binds.

    Args:
        sql: Statement with positional ``?`` placeholders
        values: One value per placeholder, in textual order

    Returns:
        ``(statement, params)`` ready for ``conn.execute(text(statement), params)``

    Raises:
        QueryCraftError: PLACEHOLDER_MISMATCH when the number of
            placeholders differs from ``len(values)``
    """
    out: List[str] = []
    params: Dict[str, Any] = {}
    quote = None
    index = 0
    position = 0
    length = len(sql)

    while position < length:
        char = sql[position]

        if quote is not None:
            if char == "\\" and quote != "`" and position + 1 < length:
                out.append(sql[position:position + 2])
                position += 2
                continue
            if char == quote:
                quote = None
        elif char in PLACEHOLDER_QUOTES:
            quote = char
        elif char == "?":
            if index >= len(values):
                raise _mismatch(sql, len(values))
            name = f"p{index}"
            params[name] = values[index]
            out.append(f":{name}")
            index += 1
            position += 1
            continue

        if char == ":" and position + 1 < length and (sql[position + 1].isalnum() or sql[position + 1] == "_"):
            out.append("\\:")
        else:
            out.append(char)
        position += 1

    if index != len(values):
        raise _mismatch(sql, len(values), index)

    return "".join(out), params


def _mismatch(sql: str, supplied: int, found: Optional[int] = None):
    if found is None:
        message = f"Statement has more placeholders than the {supplied} values supplied"
    else:
        message = f"Statement has {found} placeholders but {supplied} values were supplied"
    return validation_error(
        message,
        field="values",
        error_code=ErrorCode.PLACEHOLDER_MISMATCH,
        details={"query": sql[:500]},
    )
