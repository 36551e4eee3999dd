"""Execution protocol definitions.

The query builder produces ``(sql, values)`` pairs; anything that can run
such a pair and report rows, insert id and affected row count satisfies
:class:`QueryExecutor`. Both the pooled engine and a transaction handle do.
"""

from typing import Any, Protocol, Sequence, runtime_checkable

from querycraft.operations.results import QueryResult


@runtime_checkable
class QueryExecutor(Protocol):
    """Protocol for anything that runs one parameterized statement."""

    async def query(self, sql: str, values: Sequence[Any] = ()) -> QueryResult:
        """Run ``sql`` with ``?`` placeholders bound positionally to ``values``.

        Args:
            sql: Statement using ``?`` placeholders
            values: Bind values, one per placeholder

        Returns:
            QueryResult with rows (for reads), insert id and affected rows
        """
        ...
