"""Transaction handle bound to one dedicated connection."""

import time
from typing import TYPE_CHECKING, Any, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncConnection, AsyncTransaction

from querycraft.common.exceptions import transaction_error
from querycraft.engines.base import execute_statement, statement_attributes
from querycraft.logging import get_logger
from querycraft.operations.results import QueryResult
from querycraft.utils.decorators import traced

if TYPE_CHECKING:
    from querycraft.engines.base import SQLEngine

logger = get_logger(__name__)


class Transaction:
    """Explicit transaction over a connection checked out from the pool.

    The handle owns its connection from :meth:`begin` until :meth:`commit`
    or :meth:`rollback` returns it to the pool. Statements issued through
    :meth:`query` run on that connection in call order; callers must not
    interleave concurrent operations on one transaction.
    """

    def __init__(self, engine: "SQLEngine"):
        self._engine = engine
        self._connection: Optional[AsyncConnection] = None
        self._transaction: Optional[AsyncTransaction] = None
        self._started_at: Optional[float] = None

    @property
    def is_active(self) -> bool:
        return self._connection is not None and self._transaction is not None

    def is_active_transaction(self) -> bool:
        return self.is_active

    async def begin(self) -> None:
        """Check out a connection and start the transaction.

        Raises:
            QueryCraftError: TRANSACTION_ERROR if already started
        """
        if self.is_active:
            raise transaction_error("Transaction already started")

        connection = await self._engine.connect()
        try:
            self._transaction = await connection.begin()
        except BaseException:
            await connection.close()
            raise

        self._connection = connection
        self._started_at = time.time()
        logger.debug("Transaction started")

    async def commit(self) -> None:
        """Commit and release the connection.

        Raises:
            QueryCraftError: TRANSACTION_ERROR without an active transaction
        """
        if not self.is_active:
            raise transaction_error("No active transaction to commit")

        try:
            await self._transaction.commit()
        finally:
            await self._release()
        logger.debug("Transaction committed")

    async def rollback(self) -> None:
        """Roll back and release the connection.

        Raises:
            QueryCraftError: TRANSACTION_ERROR without an active transaction
        """
        if not self.is_active:
            raise transaction_error("No active transaction to rollback")

        try:
            await self._transaction.rollback()
        finally:
            await self._release()
        logger.debug("Transaction rolled back")

    def get_connection(self) -> AsyncConnection:
        """Return the dedicated connection.

        Raises:
            QueryCraftError: TRANSACTION_ERROR without an active transaction
        """
        if not self.is_active:
            raise transaction_error("No active transaction")
        return self._connection

    @traced(
        span_name="querycraft.db.transaction.query",
        attribute_getter=lambda self, sql, values=(): statement_attributes(sql, "transaction.query"),
    )
    async def query(self, sql: str, values: Sequence[Any] = ()) -> QueryResult:
        """Run one statement inside the transaction."""
        return await execute_statement(self.get_connection(), sql, values)

    async def _release(self) -> None:
        connection = self._connection
        duration = time.time() - self._started_at if self._started_at else 0.0
        self._connection = None
        self._transaction = None
        self._started_at = None
        if connection is not None:
            await connection.close()
        logger.info("Transaction finished", extra={"duration.seconds": f"{duration:.6f}"})
