import re
import time
from typing import Any, Dict, Optional, Sequence

from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from querycraft.common.exceptions import ErrorCode, configuration_error, connection_error
from querycraft.engines.binding import bind_positional
from querycraft.logging import get_logger
from querycraft.operations.results import QueryResult
from querycraft.settings import DatabaseSettings
from querycraft.utils.decorators import retry_with_backoff as retry, traced

logger = get_logger(__name__)

MISSING_CONFIGURATION_MESSAGE = (
    "Database configuration is missing. Please set DB_USER, DB_PASS, DB_HOST, "
    "and DB_NAME environment variables."
)

_READ_STATEMENT = re.compile(r"^\s*\(?\s*(SELECT|SHOW|DESCRIBE|DESC|EXPLAIN)\b", re.IGNORECASE)
_MAX_STATEMENT_ATTRIBUTE = 4096


def is_read_statement(sql: str) -> bool:
    return bool(_READ_STATEMENT.match(sql))


def statement_attributes(sql: str, operation: str) -> Dict[str, Any]:
    """Build OpenTelemetry span attributes for one SQL statement."""
    statement = (sql or "").strip()
    if len(statement) > _MAX_STATEMENT_ATTRIBUTE:
        statement = f"{statement[:_MAX_STATEMENT_ATTRIBUTE - 3]}..."

    attributes: Dict[str, Any] = {
        "db.system": "mysql",
        "db.operation": operation,
    }
    if statement:
        attributes["db.statement"] = statement
        attributes["db.statement.length"] = len(statement)
    return attributes


async def execute_statement(conn: AsyncConnection, sql: str, values: Sequence[Any] = ()) -> QueryResult:
    """Run one ``?``-placeholder statement on ``conn`` and normalize the result."""
    statement, params = bind_positional(sql, values)
    result = await conn.execute(text(statement), params)

    insert_id = result.lastrowid or 0
    if result.returns_rows:
        rows = [dict(row) for row in result.mappings().all()]
        return QueryResult(rows=rows, insert_id=insert_id, affected_rows=0)

    return QueryResult(insert_id=insert_id, affected_rows=max(result.rowcount, 0))


class SQLEngine:
    """SQLAlchemy asyncio engine for MySQL.

    Owns the connection pool and satisfies the
    :class:`~querycraft.protocols.QueryExecutor` protocol for statements
    that run outside a transaction.

    Features:
        - Lazy engine creation from :class:`DatabaseSettings`
        - Pool size, overflow, timeout and recycle from settings
        - Reads retried with backoff on transient ``OperationalError``
        - Writes run in their own short transaction and commit on success
        - Span per statement plus structured success/failure logs

    Example:
        >>> engine = SQLEngine(DatabaseSettings())
        >>> result = await engine.query("SELECT * FROM `users` WHERE `id` = ?", [1])
        >>> result.rows
        [{'id': 1, 'name': 'Ada'}]
        >>> await engine.dispose()
    """

    def __init__(self, settings: DatabaseSettings, engine: Optional[AsyncEngine] = None):
        """Initialize SQL engine.

        Args:
            settings: Connection and pool configuration
            engine: Pre-built async engine, mainly for tests
        """
        self.settings = settings
        self._engine: Optional[AsyncEngine] = engine

    @property
    def engine(self) -> AsyncEngine:
        """Get or create the SQLAlchemy async engine with lazy initialization."""
        if self._engine is None:
            self._engine = self._create_engine()
        return self._engine

    def _create_engine(self) -> AsyncEngine:
        """Create the async engine with connection pooling.

        Raises:
            QueryCraftError: CONFIG_MISSING when credentials are absent,
                CONNECTION_ERROR when the engine cannot be created
        """
        if not self.settings.is_configured:
            raise configuration_error(
                MISSING_CONFIGURATION_MESSAGE,
                error_code=ErrorCode.CONFIG_MISSING,
            )

        try:
            engine = create_async_engine(
                self.settings.build_url(),
                pool_pre_ping=True,
                pool_size=self.settings.pool_size,
                max_overflow=self.settings.max_overflow,
                pool_timeout=self.settings.pool_timeout,
                pool_recycle=self.settings.pool_recycle,
            )
        except Exception as e:
            raise connection_error(
                "Failed to create MySQL engine",
                service="mysql",
                host=self.settings.host,
                cause=e,
            ) from e

        logger.info(
            "Created MySQL engine",
            extra={"db.host": self.settings.host, "db.name": self.settings.name, "db.pool_size": self.settings.pool_size},
        )
        return engine

    @traced(
        span_name="querycraft.db.query",
        attribute_getter=lambda self, sql, values=(): statement_attributes(sql, "query"),
    )
    async def query(self, sql: str, values: Sequence[Any] = ()) -> QueryResult:
        """Run one statement on a pooled connection.

        Args:
            sql: Statement with ``?`` placeholders
            values: Bind values in placeholder order

        Returns:
            QueryResult for the statement
        """
        if is_read_statement(sql):
            return await self._read(sql, values)
        return await self._write(sql, values)

    @retry(max_retries=2, initial_delay=0.2, exponential_base=2, retry_on=(OperationalError,))
    async def _read(self, sql: str, values: Sequence[Any]) -> QueryResult:
        start_time = time.time()
        try:
            async with self.engine.connect() as conn:
                result = await execute_statement(conn, sql, values)
        except Exception as exc:
            self._log_failure("read", start_time, exc)
            raise

        duration = time.time() - start_time
        logger.info(
            "SQL read executed",
            extra={"db.operation": "read", "row_count": len(result.rows), "duration.seconds": f"{duration:.6f}"},
        )
        return result

    async def _write(self, sql: str, values: Sequence[Any]) -> QueryResult:
        start_time = time.time()
        try:
            async with self.engine.begin() as conn:
                result = await execute_statement(conn, sql, values)
        except Exception as exc:
            self._log_failure("write", start_time, exc)
            raise

        duration = time.time() - start_time
        logger.info(
            "SQL write executed",
            extra={"db.operation": "write", "affected_rows": result.affected_rows, "duration.seconds": f"{duration:.6f}"},
        )
        return result

    @staticmethod
    def _log_failure(operation: str, start_time: float, exc: Exception) -> None:
        duration = time.time() - start_time
        logger.error(
            "SQL statement failed",
            extra={"db.operation": operation, "duration.seconds": f"{duration:.6f}", "error": type(exc).__name__},
            exc_info=True,
        )

    async def connect(self) -> AsyncConnection:
        """Check out a dedicated connection; the caller must close it."""
        return await self.engine.connect()

    async def test_connection(self) -> bool:
        """Test if connection to the database is working."""
        try:
            result = await self.query("SELECT 1 AS test")
        except Exception as exc:
            logger.error(
                "SQL connection test failed",
                extra={"db.host": self.settings.host, "error": type(exc).__name__},
                exc_info=True,
            )
            return False
        return bool(result.rows) and result.rows[0].get("test") == 1

    async def dispose(self) -> None:
        """Close every pooled connection."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            logger.info("Disposed MySQL engine")
