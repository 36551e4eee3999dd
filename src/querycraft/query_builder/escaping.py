"""Identifier and literal escaping for the MySQL dialect.

These are the only places where caller text is turned into SQL tokens
without a bind parameter. Identifiers are quoted by SQLAlchemy's MySQL
identifier preparer; literals are escaped by PyMySQL's converters.
"""

from typing import Any

from pymysql.converters import escape_item
from sqlalchemy.dialects import mysql

from querycraft.constants.sql import DEFAULT_CHARSET
from querycraft.constants.validation import EXPRESSION_MARKERS

_preparer = mysql.dialect().identifier_preparer


def escape_identifier(identifier: str) -> str:
    """Backtick-quote an identifier, one segment per dot.

    ``users.name`` becomes ```users`.`name```; a ``*`` segment is left
    bare so ``u.*`` stays a wildcard. Embedded backticks are doubled.
    """
    return ".".join(
        segment if segment == "*" else _preparer.quote_identifier(segment)
        for segment in identifier.split(".")
    )


def escape_literal(value: Any) -> str:
    """Render a scalar as a MySQL literal (``'text'``, ``42``, ``NULL``)."""
    return escape_item(value, DEFAULT_CHARSET)


def is_expression(value: str) -> bool:
    """True if ``value`` is already composed SQL (call, quoted name or literal)."""
    return any(marker in value for marker in EXPRESSION_MARKERS)


def format_column(value: str) -> str:
    """Emit expressions verbatim and escape everything else."""
    if is_expression(value):
        return value
    return escape_identifier(value)
