from querycraft.__version__ import __version__

# Data model
from querycraft.operations import (
    BatchInsertResult,
    CheckConstraint,
    ColumnOptions,
    ColumnSpec,
    CompiledQuery,
    CompiledStatement,
    CreateTableConfig,
    DataPage,
    ForeignKey,
    GeneratedColumn,
    IndexDefinition,
    JoinClause,
    OrderByItem,
    QueryConfig,
    QueryResult,
    RawExpression,
    TableOptions,
)
from querycraft.constants.sql import CompileMode, ColumnType, JoinType, SortDirection

# Builders
from querycraft.query_builder import (
    DDLCompiler,
    QueryCompiler,
    build_batch_insert,
    build_delete,
    build_insert,
    build_update,
    json_array_sql,
    json_object_sql,
    validate_fragment,
)

# Execution
from querycraft.engines import SQLEngine, Transaction
from querycraft.orm import Database, create_database_from_env

# Logging
from querycraft.logging import (
    QueryLogger,
    QueryLoggerConfig,
    close_query_logger,
    create_query_logger,
    get_query_logger,
    initialise_query_logger,
    setup_logging,
)

from querycraft.common.exceptions import QueryCraftError, ErrorCode
from querycraft.settings import get_settings


__all__ = [
    "__version__",

    "QueryConfig",
    "RawExpression",
    "JoinClause",
    "OrderByItem",
    "CreateTableConfig",
    "ColumnSpec",
    "ColumnOptions",
    "GeneratedColumn",
    "IndexDefinition",
    "ForeignKey",
    "CheckConstraint",
    "TableOptions",
    "CompiledQuery",
    "CompiledStatement",
    "QueryResult",
    "DataPage",
    "BatchInsertResult",
    "CompileMode",
    "ColumnType",
    "JoinType",
    "SortDirection",

    "QueryCompiler",
    "DDLCompiler",
    "build_insert",
    "build_batch_insert",
    "build_update",
    "build_delete",
    "json_object_sql",
    "json_array_sql",
    "validate_fragment",

    "SQLEngine",
    "Transaction",
    "Database",
    "create_database_from_env",

    "QueryLogger",
    "QueryLoggerConfig",
    "get_query_logger",
    "initialise_query_logger",
    "close_query_logger",
    "create_query_logger",
    "setup_logging",

    # Exceptions (public API)
    "QueryCraftError",
    "ErrorCode",

    "get_settings",
]
