"""Query builder module for MySQL statement generation.

Builders translate configs into SQL text and bind values; they do NOT
execute anything. That is the job of :mod:`querycraft.engines`.

Architecture:
    - escaping.py: identifier and literal escaping primitives
    - validator.py: injection denylist for free-form fragments
    - aliases.py: output alias -> column resolution
    - compiler.py: SELECT compiler (row and count modes)
    - ddl.py: CREATE TABLE compiler
    - dml.py: INSERT / batch INSERT / UPDATE / DELETE builders
    - json_sql.py: JSON_OBJECT / JSON_ARRAY renderers

Design Principles:
    1. **SQL Generation Only**: Builders only generate SQL strings
    2. **Bind, don't interpolate**: values travel as ``?`` placeholders
    3. **Security First**: fragments are validated, names are escaped
    4. **Stateless**: compilation is a pure function of its input

Example:
    >>> from querycraft.query_builder import QueryCompiler
    >>> from querycraft.operations import QueryConfig
    >>> compiled = QueryCompiler().compile(
    ...     QueryConfig(table="users", fields={"id": "id"}, distinct=True),
    ...     mode="count",
    ... )
    >>> compiled.sql
    'SELECT COUNT(DISTINCT `id`) AS count FROM `users` LIMIT 1'
"""

from querycraft.query_builder.aliases import resolve, resolve_condition, resolve_order_term
from querycraft.query_builder.compiler import QueryCompiler
from querycraft.query_builder.ddl import DDLCompiler
from querycraft.query_builder.dml import (
    build_batch_insert,
    build_delete,
    build_insert,
    build_update,
)
from querycraft.query_builder.escaping import escape_identifier, escape_literal
from querycraft.query_builder.json_sql import json_array_sql, json_object_sql
from querycraft.query_builder.validator import validate_fragment

__all__ = [
    "QueryCompiler",
    "DDLCompiler",
    "build_insert",
    "build_batch_insert",
    "build_update",
    "build_delete",
    "json_object_sql",
    "json_array_sql",
    "escape_identifier",
    "escape_literal",
    "validate_fragment",
    "resolve",
    "resolve_condition",
    "resolve_order_term",
]
