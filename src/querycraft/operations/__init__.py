"""Data model for QueryCraft.

Configs are pure data describing WHAT statement to build. They are turned
into SQL by :mod:`querycraft.query_builder` and run by
:mod:`querycraft.engines`. Result models describe what comes back.
"""

from querycraft.operations.ddl import (
    CheckConstraint,
    ColumnOptions,
    ColumnSpec,
    CreateTableConfig,
    ForeignKey,
    GeneratedColumn,
    IndexDefinition,
    TableOptions,
)
from querycraft.operations.query import (
    JoinClause,
    OrderByItem,
    QueryConfig,
    RawExpression,
)
from querycraft.operations.results import (
    BatchInsertResult,
    BindSlot,
    CompiledQuery,
    CompiledStatement,
    DataPage,
    QueryResult,
)

__all__ = [
    # Query
    "QueryConfig",
    "RawExpression",
    "JoinClause",
    "OrderByItem",
    # DDL
    "CreateTableConfig",
    "ColumnSpec",
    "ColumnOptions",
    "GeneratedColumn",
    "IndexDefinition",
    "ForeignKey",
    "CheckConstraint",
    "TableOptions",
    # Results
    "CompiledQuery",
    "BindSlot",
    "CompiledStatement",
    "QueryResult",
    "DataPage",
    "BatchInsertResult",
]
