"""Compiled statements and execution results."""

from typing import Any, Dict, List, Optional, Sequence

from pydantic import Field

from querycraft.common.exceptions import ErrorCode, validation_error
from querycraft.types.base import QueryCraftBaseModel


class BindSlot(QueryCraftBaseModel):
    """One ``?`` of a compiled statement, in textual order.

    A slot either takes the caller value at ``caller_index`` or carries a
    compiler-collected ``value`` (IN-list entries).
    """
    caller_index: Optional[int] = None
    value: Any = None


class CompiledQuery(QueryCraftBaseModel):
    """SQL text plus the bind values the compiler produced itself.

    ``additional_values`` holds the IN-list values emitted in this
    statement, in clause order. ``slots`` records which source fills each
    ``?``, so subquery IN-lists in the field list and caller placeholders
    that only the row statement emits still line up. ``caller_placeholders``
    is the number of caller values the config consumes in row mode.
    """
    sql: str
    additional_values: List[Any] = Field(default_factory=list)
    slots: List[BindSlot] = Field(default_factory=list)
    caller_placeholders: int = 0

    def bind(self, values: Sequence[Any] = ()) -> List[Any]:
        """Return one value per ``?`` in ``sql``.

        Caller values a statement does not emit (a count statement drops
        the field list and UNION branches) are skipped.

        Raises:
            QueryCraftError: PLACEHOLDER_MISMATCH when ``values`` does not
                match the caller placeholders of the config
        """
        values = list(values)
        if len(values) != self.caller_placeholders:
            raise validation_error(
                f"Query has {self.caller_placeholders} caller placeholders but {len(values)} values were supplied",
                field="values",
                error_code=ErrorCode.PLACEHOLDER_MISMATCH,
                details={"query": self.sql[:500]},
            )
        return [values[slot.caller_index] if slot.caller_index is not None else slot.value for slot in self.slots]


class CompiledStatement(QueryCraftBaseModel):
    """A DML statement with its complete, ordered bind values."""
    sql: str
    values: List[Any] = Field(default_factory=list)


class QueryResult(QueryCraftBaseModel):
    """What an executor returns for one statement.

    Attributes:
        rows: Result rows as column -> value mappings (empty for DML).
        insert_id: Auto-increment id of the first inserted row, 0 if none.
        affected_rows: Rows changed by DML, as reported by the driver.
    """
    rows: List[Dict[str, Any]] = Field(default_factory=list)
    insert_id: int = 0
    affected_rows: int = 0


class DataPage(QueryCraftBaseModel):
    """Rows plus total count. ``count`` is -1 when counting was skipped."""
    rows: List[Dict[str, Any]] = Field(default_factory=list)
    count: int = 0


class BatchInsertResult(QueryCraftBaseModel):
    """Outcome of a multi-row INSERT.

    ``insert_ids`` is derived as ``range(first_insert_id,
    first_insert_id + affected_rows)``. This is best-effort: it assumes
    auto-increment values were allocated contiguously with no interleaving
    writers, which InnoDB only guarantees for
    ``innodb_autoinc_lock_mode`` 0 and 1. Treat the ids as a hint when
    other sessions insert into the same table concurrently.
    """
    first_insert_id: int = 0
    affected_rows: int = 0
    insert_ids: List[int] = Field(default_factory=list)
