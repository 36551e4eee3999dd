"""Settings module providing configuration management for QueryCraft.

Configuration is built on Pydantic Settings and organized by domain:

    - base.py: QueryCraftBaseSettings and application switches
      (``APP_ENV``, ``LOG_LEVEL``)
    - database.py: MySQL connection and pool (``DB_*``)
    - query_log.py: Query log sink (``QUERY_LOG_*``, ``QUERY_LOGGING_ENABLED``,
      ``SLOW_QUERY_THRESHOLD``)
    - main.py: aggregator plus the ``get_settings()`` singleton

Configuration Sources (precedence order):
    1. Environment Variables (highest priority)
    2. ``.env`` file in the working directory
    3. Default Values in code (lowest priority)

Quick Start:
    >>> from querycraft.settings import get_settings
    >>> settings = get_settings()
    >>> settings.database.port
    3306
"""

from .base import AppSettings, QueryCraftBaseSettings
from .database import DatabaseSettings
from .main import _Settings, _reload_settings, get_settings
from .query_log import QueryLogSettings

__all__ = [
    "get_settings",
    "AppSettings",
    "QueryCraftBaseSettings",
    "DatabaseSettings",
    "QueryLogSettings",
]
