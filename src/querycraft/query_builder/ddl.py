"""CREATE TABLE compiler.

Every value that has to be interpolated into DDL (names, engine, charset,
FK references, expressions) is escaped or validated before any SQL is
returned, since DDL cannot be parameterized.
"""

from typing import List, Optional

from querycraft.constants.sql import (
    CURRENT_TIMESTAMP,
    ColumnType,
    DEFAULT_CHARSET,
    DEFAULT_ENGINE,
    GeneratedColumnType,
    IndexType,
    ReferentialAction,
    RowFormat,
    TEXT_COLUMN_TYPES,
    VALUE_LIST_COLUMN_TYPES,
)
from querycraft.constants.validation import FragmentKind
from querycraft.logging import get_logger
from querycraft.operations.ddl import (
    CheckConstraint,
    ColumnOptions,
    ColumnSpec,
    CreateTableConfig,
    ForeignKey,
    IndexDefinition,
    TableOptions,
)
from querycraft.query_builder.escaping import escape_identifier, escape_literal
from querycraft.query_builder.validator import (
    validate_ddl_token,
    validate_foreign_key_reference,
    validate_fragment,
)

logger = get_logger(__name__)


def _column_list(columns: List[str]) -> str:
    return ", ".join(escape_identifier(column) for column in columns)


class DDLCompiler:
    """Compile :class:`CreateTableConfig` into executable statements."""

    def compile(self, config: CreateTableConfig) -> List[str]:
        """Build the statements for one table.

        Returns:
            ``["DROP TABLE IF EXISTS ...", "CREATE TABLE ..."]`` when
            ``drop_if_exists`` is set, otherwise just the CREATE statement

        Raises:
            QueryCraftError: On a malformed FK reference, an engine/charset
                name with unsafe characters, or a dangerous expression
        """
        table = escape_identifier(config.table)

        definitions = [self._column_definition(column) for column in config.columns]
        definitions.append(f"PRIMARY KEY ({_column_list(config.primary_key_columns)})")
        definitions.extend(self._index_definition(index) for index in config.indexes)
        definitions.extend(self._foreign_key_definition(fk) for fk in config.foreign_keys)
        definitions.extend(self._check_definition(check) for check in config.checks)

        create = f"CREATE TABLE {table} ({', '.join(definitions)}) {self._table_options(config.table_options)}"

        statements = []
        if config.drop_if_exists:
            statements.append(f"DROP TABLE IF EXISTS {table}")
        statements.append(create)

        logger.debug(
            "Compiled CREATE TABLE",
            extra={"db.table": config.table, "db.statement": create},
        )
        return statements

    def _column_definition(self, column: ColumnSpec) -> str:
        options: ColumnOptions = column.options
        column_type = ColumnType(column.type).value

        if column_type in VALUE_LIST_COLUMN_TYPES:
            values = ", ".join(escape_literal(value) for value in options.enum or [])
            parts = [escape_identifier(column.name), f"{column_type.upper()}({values})"]
        else:
            type_sql = column_type.upper()
            if options.length is not None:
                type_sql += f"({options.length})"
            parts = [escape_identifier(column.name), type_sql]

        if options.unsigned:
            parts.append("UNSIGNED")
        if options.zerofill:
            parts.append("ZEROFILL")

        if column_type in TEXT_COLUMN_TYPES:
            if options.charset:
                parts.append(f"CHARACTER SET {validate_ddl_token(options.charset, 'charset')}")
            if options.collate:
                parts.append(f"COLLATE {validate_ddl_token(options.collate, 'collate')}")

        if options.generated is not None:
            expression = validate_fragment(options.generated.expression, FragmentKind.GENERATED)
            parts.append(f"GENERATED ALWAYS AS ({expression}) {GeneratedColumnType(options.generated.type).value}")

        parts.append("NULL" if options.nullable else "NOT NULL")

        if options.has_default:
            parts.append(f"DEFAULT {self._default_literal(options.default)}")

        if options.auto_increment:
            parts.append("AUTO_INCREMENT")

        if options.on_update is not None:
            if options.on_update.strip().upper() != CURRENT_TIMESTAMP:
                logger.warning(
                    "Ignoring unsupported ON UPDATE value",
                    extra={"db.column": column.name, "on_update": options.on_update},
                )
            else:
                parts.append(f"ON UPDATE {CURRENT_TIMESTAMP}")

        if options.comment:
            parts.append(f"COMMENT {escape_literal(options.comment)}")

        return " ".join(parts)

    @staticmethod
    def _default_literal(value) -> str:
        if value is None:
            return "NULL"
        if isinstance(value, bool):
            return "TRUE" if value else "FALSE"
        if isinstance(value, (int, float)):
            return str(value)
        if value.strip().upper() == CURRENT_TIMESTAMP:
            return CURRENT_TIMESTAMP
        return escape_literal(value)

    @staticmethod
    def _index_definition(index: IndexDefinition) -> str:
        columns = _column_list(index.columns)
        if index.type is None:
            return f"INDEX ({columns})"
        if IndexType(index.type) is IndexType.UNIQUE:
            return f"UNIQUE KEY ({columns})"
        return f"{IndexType(index.type).value} INDEX ({columns})"

    @staticmethod
    def _foreign_key_definition(fk: ForeignKey) -> str:
        reference = validate_foreign_key_reference(fk.reference)
        sql = f"FOREIGN KEY ({escape_identifier(fk.column)}) REFERENCES {reference}"
        if fk.on_delete:
            sql += f" ON DELETE {ReferentialAction(fk.on_delete).value}"
        if fk.on_update:
            sql += f" ON UPDATE {ReferentialAction(fk.on_update).value}"
        return sql

    @staticmethod
    def _check_definition(check: CheckConstraint) -> str:
        condition = validate_fragment(check.condition, FragmentKind.CHECK)
        return f"CONSTRAINT {escape_identifier(check.name)} CHECK ({condition})"

    @staticmethod
    def _table_options(options: Optional[TableOptions] = None) -> str:
        if options is None:
            return f"ENGINE={DEFAULT_ENGINE} DEFAULT CHARACTER SET {DEFAULT_CHARSET}"

        parts = [f"ENGINE={validate_ddl_token(options.engine or DEFAULT_ENGINE, 'engine')}"]
        if options.auto_increment:
            parts.append(f"AUTO_INCREMENT={int(options.auto_increment)}")
        if options.row_format:
            parts.append(f"ROW_FORMAT={RowFormat(options.row_format).value}")
        parts.append(f"DEFAULT CHARACTER SET {validate_ddl_token(options.charset or DEFAULT_CHARSET, 'charset')}")
        if options.collate:
            parts.append(f"COLLATE {validate_ddl_token(options.collate, 'collate')}")
        if options.comment:
            parts.append(f"COMMENT={escape_literal(options.comment)}")
        return " ".join(parts)
