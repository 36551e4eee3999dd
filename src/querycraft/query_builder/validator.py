"""Injection pattern validation for caller-supplied SQL fragments.

Fragments (WHERE and HAVING conditions, JOIN ON text, raw field
expressions, generated column expressions and CHECK conditions) cannot be
parameterized, so they are matched against a denylist of statement
separators, comments and dangerous keywords before they are compiled.
The denylist is defense-in-depth; bind values through ``?`` placeholders.
"""

from typing import Union

from querycraft.common.exceptions import ErrorCode, dangerous_pattern_error, validation_error
from querycraft.constants.validation import (
    COMPILED_DANGEROUS_PATTERNS,
    DDL_TOKEN_PATTERN,
    FOREIGN_KEY_REFERENCE_PATTERN,
    PLACEHOLDER_QUOTES,
    FragmentKind,
)


def validate_fragment(fragment: str, kind: Union[FragmentKind, str]) -> str:
    """Reject a fragment that matches any denylisted pattern.

    Args:
        fragment: Raw SQL text supplied by the caller
        kind: Clause the fragment belongs to; its label names the clause
            in the error message

    Returns:
        The fragment, unchanged

    Raises:
        QueryCraftError: DANGEROUS_PATTERN, e.g.
            ``Invalid WHERE clause: potentially dangerous pattern detected``
    """
    label = FragmentKind(kind).value
    for pattern in COMPILED_DANGEROUS_PATTERNS:
        if pattern.search(fragment):
            raise dangerous_pattern_error(label, fragment, pattern.pattern)
    return fragment


def validate_ddl_token(value: str, option: str) -> str:
    """Engine, charset and collation names are interpolated into DDL as-is."""
    if not DDL_TOKEN_PATTERN.match(value):
        raise validation_error(
            f"Invalid {option}: only letters, digits and underscores are allowed",
            field=option,
            value=value,
            error_code=ErrorCode.INVALID_IDENTIFIER,
        )
    return value


def validate_foreign_key_reference(reference: str) -> str:
    if not FOREIGN_KEY_REFERENCE_PATTERN.match(reference):
        raise validation_error(
            "Invalid foreign key reference format",
            field="reference",
            value=reference,
            error_code=ErrorCode.INVALID_IDENTIFIER,
        )
    return reference


def count_placeholders(fragment: str) -> int:
    """Count ``?`` placeholders outside quoted strings and identifiers.

    Follows the quoting rules of :func:`querycraft.engines.binding.bind_positional`
    so the compiler and the binder agree on which ``?`` takes a value.
    """
    count = 0
    quote = None
    position = 0
    length = len(fragment)

    while position < length:
        char = fragment[position]
        if quote is not None:
            if char == "\\" and quote != "`":
                position += 2
                continue
            if char == quote:
                quote = None
        elif char in PLACEHOLDER_QUOTES:
            quote = char
        elif char == "?":
            count += 1
        position += 1

    return count
