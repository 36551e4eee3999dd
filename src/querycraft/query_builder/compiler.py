"""SELECT compiler.

Turns a :class:`~querycraft.operations.QueryConfig` into SQL text plus the
bind values the compiler itself introduces (IN-lists, subqueries, UNION
branches). Clause order is fixed::

    SELECT [DISTINCT] <fields|count> FROM <table> [joins] [WHERE] [GROUP BY]
    [HAVING] [ORDER BY] [LIMIT] [OFFSET] [UNION ...]

Compilation is a pure function of its input: no I/O, no shared state and
no mutation of the config. Caller placeholders (``?`` inside WHERE, HAVING,
JOIN ON and raw fragments) and IN-list placeholders are recorded as
:class:`~querycraft.operations.BindSlot` entries in textual order, and
``CompiledQuery.bind`` fills each one from the matching source.

Example:
    >>> config = QueryConfig(
    ...     table="users",
    ...     fields={"id": "id", "name": "full_name"},
    ...     where=["name LIKE ?"],
    ...     where_in={"status": ["active", "pending"]},
    ... )
    >>> compiled = QueryCompiler().compile(config)
    >>> compiled.sql
    "SELECT `id` AS `id`, `full_name` AS `name` FROM `users` WHERE full_name LIKE ? AND `status` IN (?, ?) ORDER BY `id` ASC"
    >>> compiled.bind(["A%"])
    ['A%', 'active', 'pending']
"""

import math
from typing import Any, Dict, List, Optional, Sequence

from querycraft.constants.sql import CompileMode, JoinType, SortDirection
from querycraft.constants.validation import FragmentKind
from querycraft.logging import get_logger
from querycraft.operations.query import OrderByItem, QueryConfig, RawExpression
from querycraft.operations.results import BindSlot, CompiledQuery
from querycraft.query_builder.aliases import resolve, resolve_condition, resolve_order_term
from querycraft.query_builder.escaping import escape_identifier, format_column
from querycraft.query_builder.validator import count_placeholders, validate_fragment

logger = get_logger(__name__)


def _sanitize_bound(value: float) -> int:
    """LIMIT/OFFSET are interpolated, so coerce to ``floor(abs(x))``."""
    return math.floor(abs(value))


def _placeholders(count: int) -> str:
    return ", ".join("?" for _ in range(count))


class _BindPlan:
    """Slots collected while one statement is compiled.

    Caller indices keep counting through clauses a mode leaves out, so the
    same caller values fit both the row and the count statement.
    """

    def __init__(self):
        self.slots: List[BindSlot] = []
        self.caller_count = 0

    def caller(self, text: str) -> str:
        """Register the caller placeholders in emitted ``text``."""
        for _ in range(count_placeholders(text)):
            self.slots.append(BindSlot(caller_index=self.caller_count))
            self.caller_count += 1
        return text

    def values(self, values: Sequence[Any]) -> None:
        self.slots.extend(BindSlot(value=value) for value in values)

    def mark(self) -> int:
        return len(self.slots)

    def discard_from(self, mark: int) -> None:
        """Drop slots of text that will not be emitted; caller indices stay reserved."""
        del self.slots[mark:]


class QueryCompiler:
    """Compile :class:`QueryConfig` values to MySQL SELECT statements.

    The compiler holds no state; one instance can be shared freely.
    """

    def compile(self, config: QueryConfig, mode: CompileMode = CompileMode.ROW) -> CompiledQuery:
        """Compile ``config`` in the given mode.

        Args:
            config: Query description
            mode: ``ROW`` for the field list with ordering and pagination,
                ``COUNT`` for ``SELECT COUNT([DISTINCT] id) AS count ... LIMIT 1``

        Returns:
            CompiledQuery with the SQL, its bind slots and the
            compiler-collected values

        Raises:
            QueryCraftError: If any fragment fails injection validation
        """
        mode = CompileMode(mode)
        plan = _BindPlan()
        sql = self._compile(config, mode, plan)
        additional_values = [slot.value for slot in plan.slots if slot.caller_index is None]

        logger.debug(
            "Compiled query",
            extra={
                "db.statement": sql,
                "compile.mode": mode.value,
                "compile.additional_values": len(additional_values),
                "compile.caller_placeholders": plan.caller_count,
            },
        )
        return CompiledQuery(
            sql=sql,
            additional_values=additional_values,
            slots=plan.slots,
            caller_placeholders=plan.caller_count,
        )

    def _compile(self, config: QueryConfig, mode: CompileMode, plan: _BindPlan) -> str:
        if mode is CompileMode.COUNT:
            # The field list is not emitted but its placeholders still count
            mark = plan.mark()
            self._field_list(config.fields, plan)
            plan.discard_from(mark)
            parts = [self._count_clause(config)]
        else:
            select = "SELECT DISTINCT" if config.distinct else "SELECT"
            parts = [f"{select} {self._field_list(config.fields, plan)}"]

        parts.append(f"FROM {self._from_clause(config)}")
        parts.extend(plan.caller(join) for join in self._join_clauses(config))

        where = self._where_clause(config, plan)
        if where:
            parts.append(where)

        having = [validate_fragment(fragment, FragmentKind.HAVING) for fragment in config.having]
        group_by = config.group_by_columns
        if group_by:
            parts.append(plan.caller("GROUP BY " + ", ".join(format_column(column) for column in group_by)))
            if having:
                parts.append(plan.caller("HAVING " + " AND ".join(having)))

        mark = plan.mark()
        tail = [plan.caller(self._order_by_clause(config))]
        if config.limit is not None:
            tail.append(f"LIMIT {_sanitize_bound(config.limit)}")
        if config.offset is not None:
            tail.append(f"OFFSET {_sanitize_bound(config.offset)}")

        if mode is CompileMode.COUNT:
            for branch in config.union:
                self._compile(branch, CompileMode.ROW, plan)
            plan.discard_from(mark)
            parts.append("LIMIT 1")
        else:
            parts.extend(tail)
            for branch in config.union:
                parts.append(f"UNION {self._compile(branch, CompileMode.ROW, plan)}")

        return " ".join(parts)

    def _count_clause(self, config: QueryConfig) -> str:
        target = escape_identifier(config.id_field)
        if config.distinct:
            target = f"DISTINCT {target}"
        return f"SELECT COUNT({target}) AS count"

    def _field_list(self, fields: Dict[str, Any], plan: _BindPlan) -> str:
        columns = []
        for alias, spec in fields.items():
            quoted_alias = escape_identifier(alias)
            if isinstance(spec, QueryConfig):
                columns.append(f"({self._compile(spec, CompileMode.ROW, plan)}) AS {quoted_alias}")
            elif isinstance(spec, RawExpression):
                raw = plan.caller(validate_fragment(spec.raw, FragmentKind.RAW_FIELD))
                columns.append(f"{raw} AS {quoted_alias}")
            else:
                columns.append(f"{plan.caller(format_column(spec))} AS {quoted_alias}")
        return ", ".join(columns)

    def _from_clause(self, config: QueryConfig) -> str:
        return ", ".join(escape_identifier(table) for table in config.tables)

    def _join_clauses(self, config: QueryConfig) -> List[str]:
        return [
            f"{JoinType(join.type).value} JOIN {escape_identifier(join.table)} "
            f"ON {validate_fragment(join.on, FragmentKind.JOIN_ON)}"
            for join in config.joins
        ]

    def _where_clause(self, config: QueryConfig, plan: _BindPlan) -> Optional[str]:
        conditions = [
            plan.caller(validate_fragment(resolve_condition(fragment, config), FragmentKind.WHERE))
            for fragment in config.where
        ]

        for operator, mapping in (("IN", config.where_in), ("NOT IN", config.where_not_in)):
            for key, values in mapping.items():
                if not values:
                    continue
                column = plan.caller(format_column(validate_fragment(resolve(key, config), FragmentKind.WHERE)))
                conditions.append(f"{column} {operator} ({_placeholders(len(values))})")
                plan.values(values)

        if not conditions:
            return None
        return "WHERE " + " AND ".join(conditions)

    def _order_by_clause(self, config: QueryConfig) -> str:
        if not config.order_by:
            return f"ORDER BY {escape_identifier(config.id_field)} {SortDirection.ASC.value}"

        entries = [config.order_by] if isinstance(config.order_by, str) else config.order_by
        shared = SortDirection(config.order_direction).value if config.order_direction else None

        terms = []
        for entry in entries:
            if isinstance(entry, OrderByItem):
                column = format_column(resolve(entry.column, config))
                direction = SortDirection(entry.direction).value if entry.direction else SortDirection.ASC.value
            else:
                term, inline = resolve_order_term(entry, config)
                column = format_column(term)
                # A shared direction supersedes any inline suffix
                direction = shared or inline or SortDirection.ASC.value
            terms.append(f"{column} {direction}")

        return "ORDER BY " + ", ".join(terms)
