"""SQL and query-related constants.

This module contains fundamental SQL enums and constants that are used
across the query builder, the execution engine, and the ORM facade.

These constants are in Layer 0 as they represent core SQL concepts
that can be used by any layer without creating circular dependencies.
"""

from enum import Enum


class QueryType(str, Enum):
    """SQL statement type enumeration.

    Used for logging, tracing attributes, and to pick the failure prefix
    when a statement is rejected by the database.
    """

    SELECT = "SELECT"
    INSERT = "INSERT"
    BATCH_INSERT = "BATCH_INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    CREATE_TABLE = "CREATE_TABLE"
    DROP_TABLE = "DROP_TABLE"
    RAW = "RAW"


class CompileMode(str, Enum):
    """Output shape produced by the query compiler.

    Values:
        ROW: Full field list, ordering and pagination.
        COUNT: ``SELECT COUNT(id) AS count`` with no ordering or offset,
            and a forced ``LIMIT 1``.
    """

    ROW = "row"
    COUNT = "count"


class JoinType(str, Enum):
    """Supported JOIN kinds."""

    INNER = "INNER"
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    FULL = "FULL"


class SortDirection(str, Enum):
    """ORDER BY direction."""

    ASC = "ASC"
    DESC = "DESC"


class ColumnType(str, Enum):
    """MySQL column types accepted by the DDL compiler."""

    INT = "int"
    TINYINT = "tinyint"
    SMALLINT = "smallint"
    MEDIUMINT = "mediumint"
    BIGINT = "bigint"
    FLOAT = "float"
    DOUBLE = "double"
    DECIMAL = "decimal"
    BIT = "bit"
    BOOL = "bool"
    BOOLEAN = "boolean"
    CHAR = "char"
    VARCHAR = "varchar"
    TINYTEXT = "tinytext"
    TEXT = "text"
    MEDIUMTEXT = "mediumtext"
    LONGTEXT = "longtext"
    BINARY = "binary"
    VARBINARY = "varbinary"
    TINYBLOB = "tinyblob"
    BLOB = "blob"
    MEDIUMBLOB = "mediumblob"
    LONGBLOB = "longblob"
    ENUM = "enum"
    SET = "set"
    JSON = "json"
    DATE = "date"
    DATETIME = "datetime"
    TIMESTAMP = "timestamp"
    TIME = "time"
    YEAR = "year"
    GEOMETRY = "geometry"
    POINT = "point"
    LINESTRING = "linestring"
    POLYGON = "polygon"
    MULTIPOINT = "multipoint"
    MULTILINESTRING = "multilinestring"
    MULTIPOLYGON = "multipolygon"
    GEOMETRYCOLLECTION = "geometrycollection"


# Types that accept CHARACTER SET / COLLATE column options
TEXT_COLUMN_TYPES = frozenset(
    {
        ColumnType.CHAR.value,
        ColumnType.VARCHAR.value,
        ColumnType.TINYTEXT.value,
        ColumnType.TEXT.value,
        ColumnType.MEDIUMTEXT.value,
        ColumnType.LONGTEXT.value,
    }
)

# Types that carry a value list instead of a length
VALUE_LIST_COLUMN_TYPES = frozenset({ColumnType.ENUM.value, ColumnType.SET.value})


class IndexType(str, Enum):
    """Secondary index kinds. Plain indexes leave the type unset."""

    UNIQUE = "UNIQUE"
    FULLTEXT = "FULLTEXT"
    SPATIAL = "SPATIAL"


class ReferentialAction(str, Enum):
    """Foreign key ON DELETE / ON UPDATE actions."""

    CASCADE = "CASCADE"
    SET_NULL = "SET NULL"
    RESTRICT = "RESTRICT"
    NO_ACTION = "NO ACTION"


class RowFormat(str, Enum):
    """InnoDB row formats."""

    DEFAULT = "DEFAULT"
    DYNAMIC = "DYNAMIC"
    COMPRESSED = "COMPRESSED"
    REDUNDANT = "REDUNDANT"
    COMPACT = "COMPACT"


class GeneratedColumnType(str, Enum):
    """Storage kind for generated columns."""

    VIRTUAL = "VIRTUAL"
    STORED = "STORED"


CURRENT_TIMESTAMP = "CURRENT_TIMESTAMP"
DEFAULT_ENGINE = "InnoDB"
DEFAULT_CHARSET = "utf8mb4"


class FailureMessage(str, Enum):
    """Stable prefixes for errors surfaced from the execution layer.

    Callers can tell which phase failed without parsing driver-specific
    messages.
    """

    FETCH = "Failed to fetch data"
    INSERT = "Failed to insert data"
    UPDATE = "Failed to update data"
    DELETE = "Failed to delete data"
    BATCH_INSERT = "Failed to batch insert data"
    CREATE_TABLE = "Failed to create table"
    RAW_QUERY = "Failed to execute raw query"


# Surfaced instead of the driver message outside development mode
GENERIC_DATABASE_ERROR = "Database error occurred"
