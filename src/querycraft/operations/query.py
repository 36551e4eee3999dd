"""Declarative SELECT description.

A :class:`QueryConfig` is a plain value built by the caller and handed to
:class:`~querycraft.query_builder.QueryCompiler`. Nothing in here touches
a connection; configs are transient and single-use.
"""

import math
from typing import Any, Dict, List, Optional, Union

from pydantic import Field, field_validator

from querycraft.constants.sql import JoinType, SortDirection
from querycraft.types.base import QueryCraftBaseModel


class RawExpression(QueryCraftBaseModel):
    """A trusted-shape SQL expression emitted as ``<raw> AS `alias```.

    The expression is still run through the injection validator before it
    is compiled. Accepts ``{"raw": "..."}`` wherever a field spec is expected.
    """
    raw: str = Field(..., min_length=1)


class JoinClause(QueryCraftBaseModel):
    """One ``<TYPE> JOIN `table` ON <on>`` clause."""
    type: JoinType = Field(default=JoinType.INNER)
    table: str = Field(..., min_length=1)
    on: str = Field(..., min_length=1)

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper()
        return v


class OrderByItem(QueryCraftBaseModel):
    """Structured ORDER BY entry.

    The item's own direction always wins; a config-level
    ``order_direction`` is not applied to structured items.
    """
    column: str = Field(..., min_length=1)
    direction: Optional[SortDirection] = Field(default=None)

    @field_validator("direction", mode="before")
    @classmethod
    def normalize_direction(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper()
        return v


class QueryConfig(QueryCraftBaseModel):
    """Declarative description of a SELECT statement.

    Attributes:
        table: Table name, or a list of names joined into a comma FROM.
        id_field: Primary identifier; default ORDER BY and COUNT target.
        fields: Output alias -> column string, :class:`RawExpression`
            or nested :class:`QueryConfig` (correlated scalar subquery).
            Insertion order is the SELECT order.
        joins: JOIN clauses in emission order.
        where: Fragments ANDed together. ``?`` placeholders bind to the
            caller's positional values.
        where_in: Column -> values for ``col IN (?, ...)``.
        where_not_in: Column -> values for ``col NOT IN (?, ...)``.
        having: Fragments ANDed together; only emitted with ``group_by``.
        group_by: Column or columns to group on.
        order_by: String, list of strings (optionally suffixed with
            ASC/DESC) or list of :class:`OrderByItem`.
        order_direction: Shared direction for string ``order_by`` entries.
            When set it supersedes any inline ASC/DESC suffix.
        limit: Row limit, sanitized to ``floor(abs(limit))``.
        offset: Row offset, sanitized to ``floor(abs(offset))``.
        distinct: Emit ``SELECT DISTINCT`` (and ``COUNT(DISTINCT ...)``).
        union: Configs compiled in row mode and appended as ``UNION <sql>``.
    """
    table: Union[str, List[str]]
    id_field: str = Field(default="id", min_length=1)
    fields: Dict[str, Union[str, RawExpression, "QueryConfig"]]
    joins: List[JoinClause] = Field(default_factory=list)
    where: List[str] = Field(default_factory=list)
    where_in: Dict[str, List[Any]] = Field(default_factory=dict)
    where_not_in: Dict[str, List[Any]] = Field(default_factory=dict)
    having: List[str] = Field(default_factory=list)
    group_by: Optional[Union[str, List[str]]] = None
    order_by: Optional[Union[str, List[Union[str, OrderByItem]]]] = None
    order_direction: Optional[SortDirection] = None
    limit: Optional[float] = None
    offset: Optional[float] = None
    distinct: bool = False
    union: List["QueryConfig"] = Field(default_factory=list)

    @field_validator("table")
    @classmethod
    def validate_table(cls, v: Union[str, List[str]]) -> Union[str, List[str]]:
        if isinstance(v, list):
            if not v or any(not t for t in v):
                raise ValueError("table list must contain at least one non-empty name")
        elif not v:
            raise ValueError("table cannot be empty")
        return v

    @field_validator("fields")
    @classmethod
    def validate_fields(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        if not v:
            raise ValueError("fields must define at least one output column")
        return v

    @field_validator("limit", "offset")
    @classmethod
    def validate_finite(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and not math.isfinite(v):
            raise ValueError("limit and offset must be finite numbers")
        return v

    @field_validator("where", "having", mode="before")
    @classmethod
    def coerce_fragment_list(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [v]
        return v

    @field_validator("order_direction", mode="before")
    @classmethod
    def normalize_direction(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @property
    def tables(self) -> List[str]:
        return [self.table] if isinstance(self.table, str) else list(self.table)

    @property
    def group_by_columns(self) -> List[str]:
        if self.group_by is None:
            return []
        if isinstance(self.group_by, str):
            return [self.group_by]
        return list(self.group_by)


QueryConfig.model_rebuild()
