from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """Standard error codes for QueryCraft operations.

    This enum provides categorized error codes that can be used
    to identify error types without creating numerous exception classes.
    Each category has a specific number range for easy identification.

    Attributes:
        CONFIG_*: Configuration-related errors (1xxx)
        VALIDATION_*: Pre-execution validation errors (2xxx)
        CONNECTION_*: Network and connection errors (3xxx)
        EXECUTION_*: Errors raised by the database while running a statement (4xxx)
        RETRY_*: Transient/retryable errors (9xxx)
    """
    # Configuration errors (1xxx)
    CONFIG_ERROR = "CONFIG_001"
    CONFIG_MISSING = "CONFIG_002"

    # Validation errors (2xxx)
    VALIDATION_ERROR = "VALIDATION_001"
    INVALID_IDENTIFIER = "VALIDATION_004"
    DANGEROUS_PATTERN = "VALIDATION_005"
    PLACEHOLDER_MISMATCH = "VALIDATION_006"

    # Connection errors (3xxx)
    CONNECTION_ERROR = "CONNECTION_001"
    TIMEOUT_ERROR = "CONNECTION_003"

    # Execution errors (4xxx)
    EXECUTION_ERROR = "EXECUTION_001"
    QUERY_EXECUTION_ERROR = "EXECUTION_002"
    TRANSACTION_ERROR = "EXECUTION_006"

    # Retry/Transient errors (9xxx)
    RETRYABLE_ERROR = "RETRY_001"


class QueryCraftError(Exception):
    """Base exception for all QueryCraft errors.

    This exception class uses error codes for categorization
    instead of creating numerous specific exception classes.

    Attributes:
        message: Error message
        error_code: Error code from ErrorCode enum
        details: Additional error details
        cause: Optional underlying exception
        is_retryable: Whether the error is transient and can be retried
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.EXECUTION_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
        is_retryable: bool = False
    ):
        """Initialize QueryCraft error.

        Args:
            message: Error message
            error_code: Error code from ErrorCode enum
            details: Additional error details
            cause: Optional underlying exception
            is_retryable: Whether error is transient
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.cause = cause
        self.is_retryable = is_retryable

        # Lazy import to avoid circular dependency
        from querycraft.logging import get_logger
        logger = get_logger(__name__)
        logger.error(
            message,
            extra={
                "error_code": error_code.value,
                "details": self.details,
                "is_retryable": is_retryable,
            },
            exc_info=cause,
        )

    def __str__(self) -> str:
        """String representation of the error.

        The cause is not rendered here; it is reachable through ``cause``
        and ``__cause__`` so surfaced messages never leak driver text.
        """
        return f"[{self.error_code.value}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "error_name": self.error_code.name,
            "details": self.details,
            "is_retryable": self.is_retryable
        }

    @property
    def is_validation_error(self) -> bool:
        """True for errors raised before any statement reached the database."""
        return self.error_code.value.startswith("VALIDATION_")

    @classmethod
    def from_error_code(
        cls,
        error_code: ErrorCode,
        message: str,
        **kwargs
    ) -> "QueryCraftError":
        """Create exception from error code.

        Args:
            error_code: Error code
            message: Error message
            **kwargs: Additional arguments for QueryCraftError

        Returns:
            QueryCraftError instance
        """
        if error_code in [
            ErrorCode.TIMEOUT_ERROR,
            ErrorCode.RETRYABLE_ERROR,
        ]:
            kwargs.setdefault('is_retryable', True)

        return cls(message=message, error_code=error_code, **kwargs)


# Helper functions for common error scenarios
def configuration_error(
    message: str,
    config_key: Optional[str] = None,
    **kwargs
) -> QueryCraftError:
    """Create a configuration error.

    Args:
        message: Error message
        config_key: Configuration key that caused the error
        **kwargs: Additional error details

    Returns:
        QueryCraftError with CONFIG_ERROR code
    """
    details = kwargs.get('details', {})
    if config_key:
        details["config_key"] = config_key

    return QueryCraftError(
        message=message,
        error_code=kwargs.pop('error_code', ErrorCode.CONFIG_ERROR),
        details=details,
        **{k: v for k, v in kwargs.items() if k != 'details'}
    )


def validation_error(
    message: str,
    field: Optional[str] = None,
    value: Any = None,
    **kwargs
) -> QueryCraftError:
    """Create a validation error.

    Args:
        message: Error message
        field: Field that failed validation
        value: Invalid value
        **kwargs: Additional error details

    Returns:
        QueryCraftError with VALIDATION_ERROR code (or the code passed in)
    """
    details = kwargs.get('details', {})
    if field:
        details["field"] = field
    if value is not None:
        details["value"] = str(value)

    return QueryCraftError(
        message=message,
        error_code=kwargs.pop('error_code', ErrorCode.VALIDATION_ERROR),
        details=details,
        **{k: v for k, v in kwargs.items() if k != 'details'}
    )


def dangerous_pattern_error(
    label: str,
    fragment: str,
    pattern: str,
) -> QueryCraftError:
    """Create an error for a fragment that matched the injection denylist.

    Args:
        label: Human-readable clause kind, e.g. ``WHERE clause``
        fragment: The rejected fragment
        pattern: The denylist pattern that matched

    Returns:
        QueryCraftError with DANGEROUS_PATTERN code
    """
    return QueryCraftError(
        message=f"Invalid {label}: potentially dangerous pattern detected",
        error_code=ErrorCode.DANGEROUS_PATTERN,
        details={
            "fragment": fragment[:200],
            "pattern": pattern,
        },
    )


def connection_error(
    message: str,
    service: Optional[str] = None,
    host: Optional[str] = None,
    **kwargs
) -> QueryCraftError:
    """Create a connection error.

    Args:
        message: Error message
        service: Service that failed to connect
        host: Host/endpoint that failed
        **kwargs: Additional error details

    Returns:
        QueryCraftError with CONNECTION_ERROR code
    """
    details = kwargs.get('details', {})
    if service:
        details["service"] = service
    if host:
        details["host"] = host

    return QueryCraftError(
        message=message,
        error_code=ErrorCode.CONNECTION_ERROR,
        details=details,
        **{k: v for k, v in kwargs.items() if k != 'details'}
    )


def execution_error(
    prefix: str,
    original_error: BaseException,
    query: Optional[str] = None,
    include_cause: bool = False,
    **kwargs
) -> QueryCraftError:
    """Create a query execution error with a stable operation prefix.

    Args:
        prefix: Operation-specific prefix such as ``Failed to fetch data``
        original_error: The underlying driver exception
        query: Query that failed (if applicable)
        include_cause: Append the driver message (development mode only)
        **kwargs: Additional error details

    Returns:
        QueryCraftError with QUERY_EXECUTION_ERROR code
    """
    from querycraft.constants.sql import GENERIC_DATABASE_ERROR

    details = kwargs.get('details', {})
    if query:
        # Truncate long queries to prevent log bloat
        details["query"] = query[:500] + "..." if len(query) > 500 else query

    reason = str(original_error) if include_cause else GENERIC_DATABASE_ERROR

    return QueryCraftError(
        message=f"{prefix}: {reason}",
        error_code=ErrorCode.QUERY_EXECUTION_ERROR,
        details=details,
        cause=original_error,
        **{k: v for k, v in kwargs.items() if k not in ['details', 'cause']}
    )


def transaction_error(
    message: str,
    **kwargs
) -> QueryCraftError:
    """Create a transaction lifecycle error.

    Args:
        message: Error message
        **kwargs: Additional error details

    Returns:
        QueryCraftError with TRANSACTION_ERROR code
    """
    return QueryCraftError(
        message=message,
        error_code=ErrorCode.TRANSACTION_ERROR,
        **kwargs
    )
