"""Tracing and retry decorators shared by the execution layer."""

import asyncio
import functools
import inspect
import time
from typing import Any, Callable, Dict, Optional, Tuple, Type, TypeVar

from opentelemetry.trace import SpanKind, Status, StatusCode

from querycraft.logging.filters import operation_context
from querycraft.telemetry import get_tracer


F = TypeVar('F', bound=Callable[..., Any])
T = TypeVar('T')

logger = None


def _get_logger():
    """Get logger instance lazily."""
    global logger
    if logger is None:
        from querycraft.logging import get_logger
        logger = get_logger(__name__)
    return logger


def traced(
    span_name: Optional[str] = None,
    *,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: Optional[Dict[str, Any]] = None,
    attribute_getter: Optional[Callable[..., Optional[Dict[str, Any]]]] = None,
) -> Callable[[F], F]:
    """Instrument a function with an OpenTelemetry span.

    The span records the exception and an ERROR status when the wrapped
    call raises; the exception itself is re-raised untouched. The span name
    is also the current operation for log records emitted during the call.

    Args:
        span_name: Optional explicit span name. Defaults to module-qualified function name.
        kind: Span kind, defaults to INTERNAL.
        attributes: Static span attributes to attach.
        attribute_getter: Callable receiving the call's arguments and returning
            additional attributes at call time.
    """

    def decorator(func: F) -> F:
        is_coroutine = inspect.iscoroutinefunction(func)
        name = span_name or f"{func.__module__}.{func.__qualname__}"

        def _collect_attributes(args: tuple, kwargs: dict) -> Dict[str, Any]:
            collected: Dict[str, Any] = {}
            if attributes:
                collected.update({k: v for k, v in attributes.items() if v is not None})

            if attribute_getter:
                try:
                    dynamic_attrs = attribute_getter(*args, **kwargs)
                except Exception as exc:  # pragma: no cover - attribute errors never fail the call
                    _get_logger().warning("trace attribute getter failed: %s", exc)
                    dynamic_attrs = None

                if dynamic_attrs:
                    collected.update({k: v for k, v in dynamic_attrs.items() if v is not None})

            return collected

        if is_coroutine:

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                tracer = get_tracer(func.__module__)

                with tracer.start_as_current_span(name, kind=kind) as span, operation_context(name):
                    for key, value in _collect_attributes(args, kwargs).items():
                        span.set_attribute(key, value)

                    try:
                        return await func(*args, **kwargs)
                    except Exception as exc:
                        span.record_exception(exc)
                        span.set_status(Status(StatusCode.ERROR, type(exc).__name__))
                        raise

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            tracer = get_tracer(func.__module__)

            with tracer.start_as_current_span(name, kind=kind) as span, operation_context(name):
                for key, value in _collect_attributes(args, kwargs).items():
                    span.set_attribute(key, value)

                try:
                    return func(*args, **kwargs)
                except Exception as exc:
                    span.record_exception(exc)
                    span.set_status(Status(StatusCode.ERROR, type(exc).__name__))
                    raise

        return sync_wrapper  # type: ignore[return-value]

    return decorator


def retry_with_backoff(
    max_retries: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    retry_on: Optional[Tuple[Type[Exception], ...]] = None,
    retry_condition: Optional[Callable[[Exception], bool]] = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator for retrying operations with exponential backoff.

    Works with both synchronous and asynchronous functions. The delay
    between retries follows
    ``delay = min(initial_delay * (exponential_base ** attempt), max_delay)``.

    Args:
        max_retries: Maximum number of retry attempts. Default is 3.
        initial_delay: Initial delay in seconds between retries. Default is 1.0.
        max_delay: Maximum delay in seconds (caps exponential growth). Default is 60.0.
        exponential_base: Base for exponential backoff calculation. Default is 2.0.
        retry_on: Tuple of exception types to retry on. If None, retries on all
            exceptions.
        retry_condition: Optional predicate deciding, per exception, whether
            to retry.

    Returns:
        Decorator function that can be applied to both sync and async functions.

    Raises:
        The last exception encountered if all retry attempts fail.

    Example:
        >>> @retry_with_backoff(max_retries=2, retry_on=(OperationalError,))
        ... async def fetch_rows():
        ...     return await engine.query("SELECT 1")

    Notes:
        - Retry attempts are logged at WARNING level
        - Final failure is logged at ERROR level
        - Total attempts = max_retries + 1 (initial attempt + retries)
    """
    def _should_retry(exc: Exception) -> bool:
        if retry_on is not None and not isinstance(exc, retry_on):
            return False
        if retry_condition is not None:
            return retry_condition(exc)
        return True

    def _log_retry(func: Callable, attempt: int, exc: Exception, delay: float) -> None:
        _get_logger().warning(
            "Attempt %d failed for %s, retrying in %.2f seconds",
            attempt + 1,
            func.__name__,
            delay,
            extra={"retry.attempt": attempt + 1, "error": type(exc).__name__},
        )

    def _log_exhausted(func: Callable) -> None:
        _get_logger().error(
            "All %d attempts failed for %s", max_retries + 1, func.__name__
        )

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> T:
            delay = initial_delay

            for attempt in range(max_retries + 1):
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    if not _should_retry(e):
                        raise
                    if attempt == max_retries:
                        _log_exhausted(func)
                        raise
                    _log_retry(func, attempt, e, delay)
                    await asyncio.sleep(delay)
                    delay = min(delay * exponential_base, max_delay)

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs) -> T:
            delay = initial_delay

            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    if not _should_retry(e):
                        raise
                    if attempt == max_retries:
                        _log_exhausted(func)
                        raise
                    _log_retry(func, attempt, e, delay)
                    time.sleep(delay)
                    delay = min(delay * exponential_base, max_delay)

        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator
