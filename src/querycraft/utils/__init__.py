"""Utility functions and helpers for QueryCraft."""

from querycraft.utils.decorators import (
    retry_with_backoff,
    traced,
)

__all__ = [
    "retry_with_backoff",
    "traced",
]
