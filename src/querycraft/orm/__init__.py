"""High-level database facade.

:class:`Database` ties the query builder, the execution layer and the
query log together. Use :func:`create_database_from_env` to build one
from ``DB_*`` environment variables.
"""

from querycraft.orm.database import Database, create_database_from_env

__all__ = [
    "Database",
    "create_database_from_env",
]
