import asyncio
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, TypeVar, Union

from querycraft.common.exceptions import (
    ErrorCode,
    QueryCraftError,
    configuration_error,
    execution_error,
)
from querycraft.constants.sql import CompileMode, FailureMessage, QueryType
from querycraft.engines import SQLEngine, Transaction
from querycraft.engines.base import MISSING_CONFIGURATION_MESSAGE, statement_attributes
from querycraft.logging import get_logger, get_query_logger
from querycraft.operations import (
    BatchInsertResult,
    CreateTableConfig,
    DataPage,
    QueryConfig,
    QueryResult,
)
from querycraft.protocols import QueryExecutor, QuerySink
from querycraft.query_builder import (
    DDLCompiler,
    QueryCompiler,
    build_batch_insert,
    build_delete,
    build_insert,
    build_update,
    json_array_sql,
    json_object_sql,
)
from querycraft.settings import get_settings
from querycraft.utils.decorators import traced

logger = get_logger(__name__)

T = TypeVar("T")


def _target_attributes(operation: str) -> Callable[..., Dict[str, Any]]:
    """Span attributes naming the table an operation works on."""

    def getter(self: "Database", target: Any, *args: Any, **kwargs: Any) -> Dict[str, Any]:
        if isinstance(target, QueryConfig):
            table = ", ".join(target.tables)
        elif isinstance(target, CreateTableConfig):
            table = target.table
        else:
            table = str(target)
        return {"db.system": "mysql", "db.operation": operation, "db.table": table}

    return getter


class Database:
    """Row-fetch and DML facade over the query builder and an executor.

    Each operation compiles its statement, runs it on the pool (or on the
    given transaction's connection), reports it to the query sink and maps
    driver failures to :class:`QueryCraftError` with a stable prefix.

    Validation errors raised while compiling propagate unchanged and never
    reach the database.

    Args:
        engine: Pooled executor; also the connection source for transactions
        sink: Query log sink. Falls back to :func:`get_query_logger`
        development: Append driver messages to surfaced errors. Defaults to
            ``APP_ENV == "development"``

    Example:
        >>> db = create_database_from_env()
        >>> page = await db.get_data(
        ...     QueryConfig(table="users", fields={"id": "id", "name": "name"}, limit=10)
        ... )
        >>> page.count
        42
        >>> await db.close()
    """

    def __init__(
        self,
        engine: SQLEngine,
        sink: Optional[QuerySink] = None,
        *,
        development: Optional[bool] = None,
        compiler: Optional[QueryCompiler] = None,
        ddl_compiler: Optional[DDLCompiler] = None,
    ):
        self._engine = engine
        self._sink = sink
        self._development = development
        self._compiler = compiler or QueryCompiler()
        self._ddl_compiler = ddl_compiler or DDLCompiler()

    @property
    def sink(self) -> QuerySink:
        if self._sink is None:
            self._sink = get_query_logger()
        return self._sink

    @property
    def is_development(self) -> bool:
        if self._development is None:
            return get_settings().is_development
        return self._development

    def _executor(self, transaction: Optional[Transaction]) -> QueryExecutor:
        return transaction if transaction is not None else self._engine

    async def _run(
        self,
        executor: QueryExecutor,
        sql: str,
        values: Sequence[Any],
        failure: FailureMessage,
    ) -> QueryResult:
        """Execute one statement and report it to the sink.

        Raises:
            QueryCraftError: Propagated unchanged when raised by the
                execution layer, otherwise an execution error prefixed by
                ``failure`` and chained to the driver exception
        """
        start_time = time.time()
        try:
            result = await executor.query(sql, values)
        except QueryCraftError:
            raise
        except Exception as exc:
            self.sink.log_error(sql, exc, values)
            raise execution_error(
                FailureMessage(failure).value,
                exc,
                query=sql,
                include_cause=self.is_development,
            ) from exc

        duration_ms = (time.time() - start_time) * 1000
        self.sink.log_query(sql, values, duration_ms)
        return result

    @traced(span_name="querycraft.db.get_data", attribute_getter=_target_attributes("get_data"))
    async def get_data(
        self,
        config: QueryConfig,
        values: Sequence[Any] = (),
        *,
        skip_count: bool = False,
    ) -> DataPage:
        """Fetch one page of rows plus the total row count.

        The row and count statements are compiled separately and run
        concurrently. Each binds only the caller values its own text uses,
        so placeholders in the field list or UNION branches do not shift
        the count statement.

        Args:
            config: Query description
            values: Bind values for ``?`` placeholders in the fragments
            skip_count: Do not issue the count statement; ``count`` is -1

        Returns:
            DataPage with the rows and total count
        """
        row_query = self._compiler.compile(config, CompileMode.ROW)

        if skip_count:
            result = await self._run(self._engine, row_query.sql, row_query.bind(values), FailureMessage.FETCH)
            return DataPage(rows=result.rows, count=-1)

        count_query = self._compiler.compile(config, CompileMode.COUNT)
        row_result, count_result = await asyncio.gather(
            self._run(self._engine, row_query.sql, row_query.bind(values), FailureMessage.FETCH),
            self._run(self._engine, count_query.sql, count_query.bind(values), FailureMessage.FETCH),
        )

        count = 0
        if count_result.rows:
            count = int(count_result.rows[0].get("count") or 0)
        return DataPage(rows=row_result.rows, count=count)

    @traced(span_name="querycraft.db.get_first", attribute_getter=_target_attributes("get_first"))
    async def get_first(self, config: QueryConfig, values: Sequence[Any] = ()) -> Optional[Dict[str, Any]]:
        """Return the first matching row, or None.

        Runs on a copy of ``config`` with ``limit=1``; the caller's config
        is left as it was.
        """
        compiled = self._compiler.compile(config.model_copy(update={"limit": 1}), CompileMode.ROW)
        result = await self._run(self._engine, compiled.sql, compiled.bind(values), FailureMessage.FETCH)
        return result.rows[0] if result.rows else None

    @traced(span_name="querycraft.db.insert_data", attribute_getter=_target_attributes("insert_data"))
    async def insert_data(
        self,
        table: str,
        data: Mapping[str, Any],
        transaction: Optional[Transaction] = None,
    ) -> int:
        """Insert one row and return its auto-increment id (0 if none)."""
        statement = build_insert(table, data)
        result = await self._run(self._executor(transaction), statement.sql, statement.values, FailureMessage.INSERT)
        return result.insert_id

    @traced(span_name="querycraft.db.update_data", attribute_getter=_target_attributes("update_data"))
    async def update_data(
        self,
        table: str,
        data: Mapping[str, Any],
        where: Union[str, Sequence[str]],
        values: Sequence[Any] = (),
        transaction: Optional[Transaction] = None,
    ) -> int:
        """Update matching rows and return the affected row count.

        Args:
            table: Target table
            data: Column -> new value
            where: Fragment or fragments ANDed into the WHERE clause
            values: Bind values for ``?`` placeholders in ``where``
            transaction: Run on this transaction's connection
        """
        conditions = [where] if isinstance(where, str) else list(where)
        statement = build_update(table, data, conditions, values)
        result = await self._run(self._executor(transaction), statement.sql, statement.values, FailureMessage.UPDATE)
        return result.affected_rows

    @traced(span_name="querycraft.db.delete_data", attribute_getter=_target_attributes("delete_data"))
    async def delete_data(
        self,
        table: str,
        where: Mapping[str, Any],
        transaction: Optional[Transaction] = None,
    ) -> int:
        """Delete rows matching every ``column = value`` pair in ``where``."""
        statement = build_delete(table, dict(where))
        result = await self._run(self._executor(transaction), statement.sql, statement.values, FailureMessage.DELETE)
        return result.affected_rows

    @traced(span_name="querycraft.db.batch_insert", attribute_getter=_target_attributes("batch_insert"))
    async def batch_insert(
        self,
        table: str,
        rows: Sequence[Mapping[str, Any]],
        transaction: Optional[Transaction] = None,
    ) -> BatchInsertResult:
        """Insert many rows in one statement.

        Empty input returns an empty result without touching the database.
        See :class:`BatchInsertResult` for the limits of ``insert_ids``.
        """
        if not rows:
            return BatchInsertResult()

        statement = build_batch_insert(table, rows)
        result = await self._run(
            self._executor(transaction),
            statement.sql,
            statement.values,
            FailureMessage.BATCH_INSERT,
        )

        first_id = result.insert_id
        insert_ids = list(range(first_id, first_id + result.affected_rows)) if first_id else []
        logger.info(
            "Batch insert completed",
            extra={"db.table": table, "row_count": len(rows), "affected_rows": result.affected_rows},
        )
        return BatchInsertResult(
            first_insert_id=first_id,
            affected_rows=result.affected_rows,
            insert_ids=insert_ids,
        )

    @traced(span_name="querycraft.db.create_table", attribute_getter=_target_attributes("create_table"))
    async def create_table(self, config: CreateTableConfig) -> None:
        """Compile and run ``DROP TABLE IF EXISTS`` (optional) and ``CREATE TABLE``."""
        statements = self._ddl_compiler.compile(config)
        for statement in statements:
            await self._run(self._engine, statement, (), FailureMessage.CREATE_TABLE)

        logger.info(
            "Table created",
            extra={"db.table": config.table, "db.operation": QueryType.CREATE_TABLE.value},
        )

    @traced(
        span_name="querycraft.db.raw_query",
        attribute_getter=lambda self, sql, *args, **kwargs: statement_attributes(sql, "raw_query"),
    )
    async def raw_query(
        self,
        sql: str,
        values: Sequence[Any] = (),
        transaction: Optional[Transaction] = None,
    ) -> List[Dict[str, Any]]:
        """Run a caller-written statement and return its rows.

        The statement is not validated; only use it with trusted SQL and
        keep every value in ``values``.
        """
        result = await self._run(self._executor(transaction), sql, values, FailureMessage.RAW_QUERY)
        return result.rows

    def create_transaction(self) -> Transaction:
        """Return a new, not yet started, transaction handle."""
        return Transaction(self._engine)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Transaction]:
        """Run a block in a transaction.

        Commits when the block exits normally. On an exception the
        transaction is rolled back (if still active) and the exception
        propagates.

        Example:
            >>> async with db.transaction() as tx:
            ...     user_id = await db.insert_data("users", {"name": "Ada"}, transaction=tx)
            ...     await db.insert_data("audit", {"user_id": user_id}, transaction=tx)
        """
        transaction = self.create_transaction()
        await transaction.begin()
        try:
            yield transaction
        except BaseException as exc:
            await self._rollback_quietly(transaction, exc)
            raise
        if transaction.is_active:
            await transaction.commit()

    async def with_transaction(self, callback: Callable[[Transaction], Awaitable[T]]) -> T:
        """Run ``callback`` in a transaction and return its result.

        Commits on success. On failure the transaction is rolled back if it
        is still active and the original error is re-raised.
        """
        async with self.transaction() as transaction:
            return await callback(transaction)

    async def _rollback_quietly(self, transaction: Transaction, original: BaseException) -> None:
        """Roll back without masking ``original``; a rollback failure is logged."""
        if not transaction.is_active:
            return
        try:
            await transaction.rollback()
        except Exception as rollback_exc:
            logger.error(
                "Transaction rollback failed",
                extra={"original_error": type(original).__name__, "error": type(rollback_exc).__name__},
                exc_info=rollback_exc,
            )
            self.sink.log_error("ROLLBACK", rollback_exc)

    async def close(self) -> None:
        """Dispose of the connection pool."""
        await self._engine.dispose()

    @staticmethod
    def json_object_sql(mapping: Mapping[str, Any]) -> str:
        return json_object_sql(mapping)

    @staticmethod
    def json_array_sql(items: Sequence[Any]) -> str:
        return json_array_sql(items)


def create_database_from_env(sink: Optional[QuerySink] = None) -> Database:
    """Build a :class:`Database` from ``DB_*`` environment settings.

    Raises:
        QueryCraftError: CONFIG_MISSING when DB_USER, DB_PASS, DB_HOST or
            DB_NAME is not set
    """
    settings = get_settings()
    if not settings.database.is_configured:
        raise configuration_error(
            MISSING_CONFIGURATION_MESSAGE,
            error_code=ErrorCode.CONFIG_MISSING,
        )

    return Database(SQLEngine(settings.database), sink=sink, development=settings.is_development)
