"""Query log sink settings.

Most variables use the ``QUERY_LOG_`` prefix. ``QUERY_LOGGING_ENABLED`` and
``SLOW_QUERY_THRESHOLD`` keep their historical names.
"""

from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import SettingsConfigDict

from .base import QueryCraftBaseSettings


class QueryLogSettings(QueryCraftBaseSettings):
    """Configuration consumed by :func:`querycraft.logging.get_query_logger`."""

    model_config = SettingsConfigDict(
        env_prefix="QUERY_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    enabled: bool = Field(
        default=False,
        validation_alias=AliasChoices("QUERY_LOGGING_ENABLED"),
    )
    to_file: bool = Field(default=True, description="Write entries to the rotating log file")
    to_console: Optional[bool] = Field(
        default=None,
        description="Echo entries to stdout. Unset means 'only in development'."
    )
    path: str = Field(default="./logs/queries.log")
    slow_query_threshold_ms: int = Field(
        default=1000,
        ge=0,
        validation_alias=AliasChoices("SLOW_QUERY_THRESHOLD"),
    )
    max_bytes: int = Field(default=10 * 1024 * 1024, ge=1024)
    backup_count: int = Field(default=5, ge=0)
    rotate: bool = Field(default=True, description="Rotate the file once it reaches max_bytes")

    def resolve_to_console(self, is_development: bool) -> bool:
        if self.to_console is None:
            return is_development
        return self.to_console
