"""Common exceptions for QueryCraft.

Exception Design:
    The exception system uses error codes for categorization rather than
    numerous specific exception classes. Every error is a
    :class:`QueryCraftError` carrying an :class:`ErrorCode`, structured
    details and, where one exists, the underlying driver exception.
"""

from querycraft.common.exceptions import (
    QueryCraftError,
    ErrorCode,
    # Helper functions
    configuration_error,
    validation_error,
    dangerous_pattern_error,
    connection_error,
    execution_error,
    transaction_error,
)

__all__ = [
    # Base Exception and Error Codes
    "QueryCraftError",
    "ErrorCode",
    # Helper functions
    "configuration_error",
    "validation_error",
    "dangerous_pattern_error",
    "connection_error",
    "execution_error",
    "transaction_error",
]
