"""Statement-level query log.

:class:`QueryLogger` is the default :class:`~querycraft.protocols.QuerySink`.
It writes one line per executed statement to a size-rotated file and,
optionally, to stdout:

    [2024-05-01 10:00:00,123] [INFO] [12.40ms] SELECT ... | Values: [1, "a"]
    [2024-05-01 10:00:01,456] [WARNING] [1530.02ms] SELECT ... (slow)
    [2024-05-01 10:00:02,789] [ERROR] UPDATE ... | Error: ... (+ traceback)

The logger is dedicated and does not propagate, so statement text never
ends up in the application's JSON logs unless a handler is attached there
on purpose. A process-wide default instance is created lazily by
:func:`get_query_logger`.
"""

from __future__ import annotations

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from pydantic import Field

from querycraft.types.base import QueryCraftBaseModel

if TYPE_CHECKING:
    from querycraft.settings.main import _Settings

_LINE_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"


class QueryLoggerConfig(QueryCraftBaseModel):
    """Runtime configuration for one :class:`QueryLogger`.

    Attributes:
        enabled: Master switch; a disabled logger attaches no handlers
        log_to_file: Write entries to ``log_file_path``
        log_to_console: Echo entries to stdout
        log_file_path: Log file location; parent directories are created
        slow_query_threshold: Milliseconds above which a query logs at WARNING
        max_file_size: Size in bytes that triggers rotation
        backup_count: Rotated files kept next to the active one
        rotate_on_size: Rotate by size; when off the file grows unbounded
    """
    enabled: bool = False
    log_to_file: bool = True
    log_to_console: bool = False
    log_file_path: str = "./logs/queries.log"
    slow_query_threshold: float = Field(default=1000, ge=0)
    max_file_size: int = Field(default=10 * 1024 * 1024, ge=1024)
    backup_count: int = Field(default=5, ge=0)
    rotate_on_size: bool = True

    @classmethod
    def from_settings(cls, settings: Optional["_Settings"] = None) -> "QueryLoggerConfig":
        """Build the config from ``QUERY_LOG_*`` environment settings."""
        if settings is None:
            from querycraft.settings import get_settings
            settings = get_settings()

        log_settings = settings.query_log
        return cls(
            enabled=log_settings.enabled,
            log_to_file=log_settings.to_file,
            log_to_console=log_settings.resolve_to_console(settings.is_development),
            log_file_path=log_settings.path,
            slow_query_threshold=log_settings.slow_query_threshold_ms,
            max_file_size=log_settings.max_bytes,
            backup_count=log_settings.backup_count,
            rotate_on_size=log_settings.rotate,
        )


class QueryLogger:
    """Query sink backed by a dedicated :class:`logging.Logger`.

    Args:
        config: Full configuration; defaults to :meth:`QueryLoggerConfig.from_settings`
        **overrides: Individual fields applied on top of ``config``

    Example:
        >>> sink = QueryLogger(enabled=True, log_file_path="/tmp/q.log")
        >>> sink.log_query("SELECT 1", [], 3.2)
        >>> sink.close()
    """

    def __init__(self, config: Optional[QueryLoggerConfig] = None, **overrides: Any):
        base = config if config is not None else QueryLoggerConfig.from_settings()
        self._config = base.model_copy(update=overrides) if overrides else base.model_copy()
        self._logger = logging.Logger("querycraft.queries", level=logging.DEBUG)
        self._logger.propagate = False
        self._handlers: List[logging.Handler] = []
        self._stats = {"queries": 0, "slow_queries": 0, "errors": 0}

        if self._config.enabled:
            self._configure_handlers()

    def _configure_handlers(self) -> None:
        formatter = logging.Formatter(_LINE_FORMAT)

        if self._config.log_to_file:
            path = Path(self._config.log_file_path)
            path.parent.mkdir(parents=True, exist_ok=True)
            if self._config.rotate_on_size:
                file_handler: logging.Handler = RotatingFileHandler(
                    path,
                    maxBytes=self._config.max_file_size,
                    backupCount=self._config.backup_count,
                    encoding="utf-8",
                    delay=True,
                )
            else:
                file_handler = logging.FileHandler(path, encoding="utf-8", delay=True)
            self._handlers.append(file_handler)

        if self._config.log_to_console:
            self._handlers.append(logging.StreamHandler(sys.stdout))

        for handler in self._handlers:
            handler.setFormatter(formatter)
            self._logger.addHandler(handler)

    @staticmethod
    def _format_values(values: Sequence[Any]) -> str:
        return f" | Values: {json.dumps(list(values), default=str)}" if values else ""

    def _emit(self, level: int, message: str, error: Optional[BaseException] = None) -> None:
        if not self._config.enabled:
            return
        exc_info = (type(error), error, error.__traceback__) if error is not None else None
        self._logger.log(level, message, exc_info=exc_info)

    def log_query(self, sql: str, values: Sequence[Any] = (), duration_ms: Optional[float] = None) -> None:
        """Log a statement that completed; slow ones are logged at WARNING."""
        slow = duration_ms is not None and duration_ms > self._config.slow_query_threshold
        self._stats["queries"] += 1
        if slow:
            self._stats["slow_queries"] += 1

        duration = f"[{duration_ms:.2f}ms] " if duration_ms is not None else ""
        self._emit(
            logging.WARNING if slow else logging.INFO,
            f"{duration}{sql}{self._format_values(values)}",
        )

    def log_error(self, sql: str, error: BaseException, values: Sequence[Any] = ()) -> None:
        """Log a failed statement together with the error and its traceback."""
        self._stats["errors"] += 1
        self._emit(
            logging.ERROR,
            f"{sql}{self._format_values(values)} | Error: {error}",
            error=error,
        )

    def log_debug(self, message: str) -> None:
        self._emit(logging.DEBUG, message)

    def log_warning(self, message: str) -> None:
        self._emit(logging.WARNING, message)

    def close(self) -> None:
        """Flush and detach every handler."""
        for handler in self._handlers:
            self._logger.removeHandler(handler)
            handler.close()
        self._handlers = []

    def update_config(self, **changes: Any) -> None:
        """Apply configuration changes and rebuild the handlers."""
        self.close()
        self._config = self._config.model_copy(update=changes)
        if self._config.enabled:
            self._configure_handlers()

    def get_config(self) -> QueryLoggerConfig:
        return self._config.model_copy()

    def get_stats(self) -> Dict[str, Any]:
        """Return the switches in effect and per-instance counters."""
        return {
            "enabled": self._config.enabled,
            "log_to_file": self._config.log_to_file,
            "log_to_console": self._config.log_to_console,
            "queries_logged": self._stats["queries"],
            "slow_queries": self._stats["slow_queries"],
            "errors_logged": self._stats["errors"],
        }

    @property
    def handlers(self) -> List[logging.Handler]:
        return list(self._handlers)


# Singleton instance
_query_logger: Optional[QueryLogger] = None


def get_query_logger(config: Optional[QueryLoggerConfig] = None) -> QueryLogger:
    """Return the process-wide query logger, creating it on first use.

    ``config`` only applies to that first creation; use
    :func:`initialise_query_logger` to replace an existing instance.
    """
    global _query_logger

    if _query_logger is None:
        _query_logger = QueryLogger(config)

    return _query_logger


def initialise_query_logger(config: Optional[QueryLoggerConfig] = None, **overrides: Any) -> QueryLogger:
    """Close the current default logger, if any, and install a new one."""
    global _query_logger

    if _query_logger is not None:
        _query_logger.close()
    _query_logger = QueryLogger(config, **overrides)
    return _query_logger


def close_query_logger() -> None:
    """Close and forget the default logger."""
    global _query_logger

    if _query_logger is not None:
        _query_logger.close()
        _query_logger = None


def create_query_logger(config: Optional[QueryLoggerConfig] = None, **overrides: Any) -> QueryLogger:
    """Create a standalone logger that is not the process default."""
    return QueryLogger(config, **overrides)
