"""INSERT, UPDATE and DELETE statement builders.

Every value is bound through a ``?`` placeholder; only table and column
names are interpolated, and those are identifier-escaped.
"""

from typing import Any, Dict, List, Mapping, Sequence

from querycraft.common.exceptions import validation_error
from querycraft.constants.validation import FragmentKind
from querycraft.operations.results import CompiledStatement
from querycraft.query_builder.escaping import escape_identifier
from querycraft.query_builder.validator import validate_fragment


def _row_placeholders(width: int) -> str:
    return "(" + ", ".join("?" for _ in range(width)) + ")"


def _column_list(keys: Sequence[str]) -> str:
    return ", ".join(escape_identifier(key) for key in keys)


def build_insert(table: str, data: Mapping[str, Any]) -> CompiledStatement:
    """Single-row ``INSERT INTO `t` (`a`, `b`) VALUES (?, ?)``."""
    if not data:
        raise validation_error("Cannot build INSERT without data", field="data")

    keys = list(data.keys())
    sql = f"INSERT INTO {escape_identifier(table)} ({_column_list(keys)}) VALUES {_row_placeholders(len(keys))}"
    return CompiledStatement(sql=sql, values=list(data.values()))


def build_batch_insert(table: str, rows: Sequence[Mapping[str, Any]]) -> CompiledStatement:
    """Multi-row INSERT with one value tuple per row.

    Column names come from the first row. Values are flattened row-major,
    following that column order for every row.

    Raises:
        QueryCraftError: If ``rows`` is empty or a row's key set differs
            from the first row's
    """
    if not rows:
        raise validation_error("Cannot build batch INSERT without rows", field="rows")

    keys = list(rows[0].keys())
    if not keys:
        raise validation_error("Cannot build batch INSERT from rows without columns", field="rows")

    expected = set(keys)
    values: List[Any] = []
    for index, row in enumerate(rows):
        if set(row.keys()) != expected:
            raise validation_error(
                f"Row {index} does not match the columns of the first row",
                field="rows",
                details={
                    "expected": sorted(expected),
                    "actual": sorted(row.keys()),
                },
            )
        values.extend(row[key] for key in keys)

    tuples = ", ".join(_row_placeholders(len(keys)) for _ in rows)
    sql = f"INSERT INTO {escape_identifier(table)} ({_column_list(keys)}) VALUES {tuples}"
    return CompiledStatement(sql=sql, values=values)


def build_update(
    table: str,
    data: Mapping[str, Any],
    where: Sequence[str],
    values: Sequence[Any] = (),
) -> CompiledStatement:
    """``UPDATE `t` SET `a` = ? WHERE <fragments ANDed>``.

    Bind values are the SET values followed by ``values`` for the ``?``
    placeholders inside the WHERE fragments.
    """
    if not data:
        raise validation_error("Cannot build UPDATE without data", field="data")
    if not where:
        raise validation_error("Refusing to build UPDATE without a WHERE condition", field="where")

    conditions = [validate_fragment(fragment, FragmentKind.WHERE) for fragment in where]
    assignments = ", ".join(f"{escape_identifier(key)} = ?" for key in data.keys())
    sql = f"UPDATE {escape_identifier(table)} SET {assignments} WHERE {' AND '.join(conditions)}"
    return CompiledStatement(sql=sql, values=[*data.values(), *values])


def build_delete(table: str, where: Dict[str, Any]) -> CompiledStatement:
    """``DELETE FROM `t` WHERE `k1` = ? AND `k2` = ?``."""
    if not where:
        raise validation_error("Refusing to build DELETE without a WHERE condition", field="where")

    conditions = " AND ".join(f"{escape_identifier(key)} = ?" for key in where.keys())
    sql = f"DELETE FROM {escape_identifier(table)} WHERE {conditions}"
    return CompiledStatement(sql=sql, values=list(where.values()))
