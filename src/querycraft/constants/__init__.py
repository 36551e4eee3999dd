"""Constants module for QueryCraft.

This module contains all constant values and enumerations used throughout
QueryCraft. As Layer 0 in the architecture, this module has no
dependencies on other QueryCraft modules.

Organization:
    - sql: Statement types, compile modes, DDL vocabulary, failure prefixes
    - validation: Injection denylist and DDL token shapes
"""

# SQL/Query constants
from querycraft.constants.sql import (
    CURRENT_TIMESTAMP,
    DEFAULT_CHARSET,
    DEFAULT_ENGINE,
    GENERIC_DATABASE_ERROR,
    TEXT_COLUMN_TYPES,
    VALUE_LIST_COLUMN_TYPES,
    ColumnType,
    CompileMode,
    FailureMessage,
    GeneratedColumnType,
    IndexType,
    JoinType,
    QueryType,
    ReferentialAction,
    RowFormat,
    SortDirection,
)

# Validation constants
from querycraft.constants.validation import (
    DANGEROUS_PATTERNS,
    FragmentKind,
)

__all__ = [
    # SQL
    "QueryType",
    "CompileMode",
    "JoinType",
    "SortDirection",
    "ColumnType",
    "IndexType",
    "ReferentialAction",
    "RowFormat",
    "GeneratedColumnType",
    "FailureMessage",
    "TEXT_COLUMN_TYPES",
    "VALUE_LIST_COLUMN_TYPES",
    "CURRENT_TIMESTAMP",
    "DEFAULT_ENGINE",
    "DEFAULT_CHARSET",
    "GENERIC_DATABASE_ERROR",
    # Validation
    "FragmentKind",
    "DANGEROUS_PATTERNS",
]
