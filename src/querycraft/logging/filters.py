"""Logging filter that tags records with the active database operation.

``traced`` enters :func:`operation_context` around every instrumented call,
so a driver warning logged deep inside ``SQLEngine.query`` still says which
operation issued it and which trace it belongs to.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

from opentelemetry import trace

from querycraft.__version__ import __version__

operation_var: ContextVar[Optional[str]] = ContextVar("querycraft_operation", default=None)


@contextmanager
def operation_context(operation: str) -> Iterator[None]:
    """Mark ``operation`` as current for records logged inside the block."""
    token = operation_var.set(operation)
    try:
        yield
    finally:
        operation_var.reset(token)


def current_operation() -> Optional[str]:
    return operation_var.get()


class ContextFilter(logging.Filter):
    """Add the operation, trace ids and package identity to each record.

    Trace and span ids are taken from the current OpenTelemetry span and
    are ``None`` outside a recording trace. Never drops a record.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            trace_id = format(span_context.trace_id, "032x")
            span_id = format(span_context.span_id, "016x")
        else:
            trace_id = span_id = None

        setattr(record, "operation", operation_var.get())
        setattr(record, "trace_id", trace_id)
        setattr(record, "span_id", span_id)
        setattr(record, "sdk_name", "querycraft")
        setattr(record, "sdk_version", __version__)
        return True
