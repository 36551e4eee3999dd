"""Protocol definitions for QueryCraft.

Protocols describe the seams between the builder, the execution layer and
the query log. They provide type-safe interfaces without requiring
inheritance, following Python's structural subtyping.
"""

from .executor import QueryExecutor
from .sink import QuerySink

__all__ = [
    "QueryExecutor",
    "QuerySink",
]
