"""Execution layer.

:class:`SQLEngine` runs statements on the shared pool and
:class:`Transaction` runs them on one dedicated connection. Both accept
``?`` placeholder SQL and return :class:`~querycraft.operations.QueryResult`.
"""

from querycraft.engines.base import SQLEngine, execute_statement, is_read_statement
from querycraft.engines.binding import bind_positional
from querycraft.engines.transaction import Transaction

__all__ = [
    "SQLEngine",
    "Transaction",
    "bind_positional",
    "execute_statement",
    "is_read_statement",
]
