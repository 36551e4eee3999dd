from typing import Optional

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from .base import AppSettings
from .database import DatabaseSettings
from .query_log import QueryLogSettings


class _Settings(AppSettings):
    """Aggregated QueryCraft configuration.

    Top-level values (``APP_ENV``, ``LOG_LEVEL``) are read here; each
    domain group reads its own prefixed variables.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__"
    )

    database: DatabaseSettings = Field(
        default_factory=DatabaseSettings,
        description="MySQL connection and pool configuration"
    )
    query_log: QueryLogSettings = Field(
        default_factory=QueryLogSettings,
        description="Query log sink configuration"
    )


# Singleton instance
_settings: Optional[_Settings] = None


def get_settings(force_reload: bool = False) -> _Settings:
    """Get the singleton settings instance for the application.

    The settings are loaded from environment variables (and ``.env``) on
    first access and reused afterwards.

    Args:
        force_reload: If True, creates a new Settings instance even if
                     one already exists. Useful for testing or when
                     environment variables have changed.

    Returns:
        Settings: The singleton Settings instance

    Example:
        ```python
        settings = get_settings()
        assert settings is get_settings()

        new_settings = get_settings(force_reload=True)
        assert new_settings is not settings
        ```
    """
    global _settings

    if _settings is None or force_reload:
        _settings = _Settings()

    return _settings


def _reload_settings() -> _Settings:
    """Force reload of settings.

    This is primarily for testing purposes where you need to reset
    the singleton instance.

    Returns:
        A fresh _Settings instance
    """
    global _settings
    _settings = None
    return get_settings(force_reload=True)
