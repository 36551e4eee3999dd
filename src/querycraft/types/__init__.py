"""Type definitions for QueryCraft.

This module provides the base model shared by every config and result
type in the package.
"""

from .base import QueryCraftBaseModel

__all__ = [
    'QueryCraftBaseModel',
]
