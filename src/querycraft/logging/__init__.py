"""Logging infrastructure for QueryCraft.

This module provides structured application logging with JSON output and
context tracking, plus the dedicated statement-level query log.
"""

from querycraft.logging.filters import ContextFilter, current_operation, operation_context
from querycraft.logging.logger import CustomJsonFormatter, get_logger, setup_logging
from querycraft.logging.query_logger import (
    QueryLogger,
    QueryLoggerConfig,
    close_query_logger,
    create_query_logger,
    get_query_logger,
    initialise_query_logger,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "CustomJsonFormatter",
    "ContextFilter",
    "operation_context",
    "current_operation",
    "QueryLogger",
    "QueryLoggerConfig",
    "get_query_logger",
    "initialise_query_logger",
    "close_query_logger",
    "create_query_logger",
]
