"""Data Definition Language (DDL) configs.

These models describe a single CREATE TABLE statement. Shape checks that
pydantic can express live here; checks on values that end up interpolated
into DDL (engine names, FK references, expressions) are done by
:class:`~querycraft.query_builder.DDLCompiler` so they surface as
``QueryCraftError`` validation errors.
"""

import re
from typing import Any, List, Optional, Union

from pydantic import Field, field_validator, model_validator

from querycraft.constants.sql import (
    ColumnType,
    GeneratedColumnType,
    IndexType,
    ReferentialAction,
    RowFormat,
    VALUE_LIST_COLUMN_TYPES,
)
from querycraft.types.base import QueryCraftBaseModel

_LENGTH_PATTERN = re.compile(r"^\d+(\s*,\s*\d+)?$")


class GeneratedColumn(QueryCraftBaseModel):
    """``GENERATED ALWAYS AS (expression) VIRTUAL|STORED``."""
    expression: str = Field(..., min_length=1)
    type: GeneratedColumnType = Field(default=GeneratedColumnType.VIRTUAL)

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper()
        return v


class ColumnOptions(QueryCraftBaseModel):
    """Per-column modifiers.

    ``default`` distinguishes "not given" from ``None``: an explicit
    ``default=None`` emits ``DEFAULT NULL``, leaving it out emits nothing.
    """
    length: Optional[Union[int, str]] = None
    default: Optional[Union[bool, int, float, str]] = None
    nullable: bool = True
    auto_increment: bool = False
    unsigned: bool = False
    zerofill: bool = False
    charset: Optional[str] = None
    collate: Optional[str] = None
    comment: Optional[str] = None
    on_update: Optional[str] = None
    enum: Optional[List[str]] = None
    generated: Optional[GeneratedColumn] = None

    @field_validator("length")
    @classmethod
    def validate_length(cls, v: Optional[Union[int, str]]) -> Optional[Union[int, str]]:
        if v is None:
            return v
        if isinstance(v, int):
            if v <= 0:
                raise ValueError("length must be positive")
            return v
        if not _LENGTH_PATTERN.match(v.strip()):
            raise ValueError(f"Invalid length '{v}'. Expected 'n' or 'precision,scale'.")
        return v.replace(" ", "")

    @property
    def has_default(self) -> bool:
        return "default" in self.model_fields_set


class ColumnSpec(QueryCraftBaseModel):
    """One column in a CREATE TABLE statement."""
    name: str = Field(..., min_length=1)
    type: ColumnType
    options: ColumnOptions = Field(default_factory=ColumnOptions)

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @model_validator(mode="after")
    def validate_value_list(self):
        """ENUM and SET columns need their value list."""
        if self.type in VALUE_LIST_COLUMN_TYPES and not self.options.enum:
            raise ValueError(f"Column '{self.name}' of type {self.type} requires options.enum values")
        return self


class IndexDefinition(QueryCraftBaseModel):
    """Secondary index. ``type=None`` is a plain ``INDEX``."""
    columns: List[str] = Field(..., min_length=1)
    type: Optional[IndexType] = None

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper()
        return v


class ForeignKey(QueryCraftBaseModel):
    """``FOREIGN KEY (`column`) REFERENCES table(column)``.

    ``reference`` is interpolated as written and must look like
    ``table(column)``.
    """
    column: str = Field(..., min_length=1)
    reference: str
    on_delete: Optional[ReferentialAction] = None
    on_update: Optional[ReferentialAction] = None

    @field_validator("on_delete", "on_update", mode="before")
    @classmethod
    def normalize_action(cls, v: Any) -> Any:
        if isinstance(v, str):
            return " ".join(v.split()).upper()
        return v


class CheckConstraint(QueryCraftBaseModel):
    """``CONSTRAINT `name` CHECK (condition)``."""
    name: str = Field(..., min_length=1)
    condition: str = Field(..., min_length=1)


class TableOptions(QueryCraftBaseModel):
    """Trailing table options. Unset engine and charset fall back to
    InnoDB and utf8mb4."""
    engine: Optional[str] = None
    auto_increment: Optional[int] = Field(default=None, ge=1)
    row_format: Optional[RowFormat] = None
    charset: Optional[str] = None
    collate: Optional[str] = None
    comment: Optional[str] = None

    @field_validator("row_format", mode="before")
    @classmethod
    def normalize_row_format(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper()
        return v


class CreateTableConfig(QueryCraftBaseModel):
    """Full description of one CREATE TABLE statement.

    Attributes:
        table: Table name.
        columns: Ordered column definitions.
        primary_key: Single column or composite key.
        foreign_keys: Foreign key constraints.
        indexes: Secondary indexes.
        checks: Named CHECK constraints.
        table_options: ENGINE / charset / row format and friends.
        drop_if_exists: Emit ``DROP TABLE IF EXISTS`` first.
    """
    table: str = Field(..., min_length=1)
    columns: List[ColumnSpec] = Field(..., min_length=1)
    primary_key: Union[str, List[str]]
    foreign_keys: List[ForeignKey] = Field(default_factory=list)
    indexes: List[IndexDefinition] = Field(default_factory=list)
    checks: List[CheckConstraint] = Field(default_factory=list)
    table_options: Optional[TableOptions] = None
    drop_if_exists: bool = False

    @field_validator("primary_key")
    @classmethod
    def validate_primary_key(cls, v: Union[str, List[str]]) -> Union[str, List[str]]:
        if not v:
            raise ValueError("primary_key cannot be empty")
        return v

    @property
    def primary_key_columns(self) -> List[str]:
        return [self.primary_key] if isinstance(self.primary_key, str) else list(self.primary_key)
