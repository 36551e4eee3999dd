"""Query sink protocol.

A sink receives one record per executed statement and one per failure.
:class:`querycraft.logging.QueryLogger` is the default implementation;
tests usually pass a ``Mock``.
"""

from typing import Any, Protocol, Sequence, runtime_checkable


@runtime_checkable
class QuerySink(Protocol):
    """Protocol for statement-level query logging."""

    def log_query(self, sql: str, values: Sequence[Any] = (), duration_ms: float = 0) -> None:
        """Record a statement that completed.

        Args:
            sql: Executed statement
            values: Bind values
            duration_ms: Wall time in milliseconds
        """
        ...

    def log_error(self, sql: str, error: BaseException, values: Sequence[Any] = ()) -> None:
        """Record a statement that failed.

        Args:
            sql: Statement that failed
            error: The driver or wrapped exception
            values: Bind values
        """
        ...
