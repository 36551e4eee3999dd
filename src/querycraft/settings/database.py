"""MySQL connection settings.

Environment variables use the ``DB_`` prefix (``DB_HOST``, ``DB_USER``,
``DB_NAME``, ``DB_PORT`` ...). The password is read from ``DB_PASS`` and,
for compatibility with common deployment templates, ``DB_PASSWORD``.
"""

from typing import Optional

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import SettingsConfigDict
from sqlalchemy.engine import URL

from .base import QueryCraftBaseSettings


class DatabaseSettings(QueryCraftBaseSettings):
    """Connection and pool configuration for the execution engine."""

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    host: Optional[str] = Field(default=None, description="MySQL server host")
    user: Optional[str] = Field(default=None, description="Login user")
    password: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("DB_PASS", "DB_PASSWORD"),
        description="Login password"
    )
    name: Optional[str] = Field(default=None, description="Default schema")
    port: int = Field(default=3306, ge=1, le=65535)

    driver: str = Field(
        default="mysql+aiomysql",
        description="SQLAlchemy async driver name"
    )

    pool_size: int = Field(default=10, ge=1, le=100)
    max_overflow: int = Field(default=0, ge=0)
    pool_timeout: int = Field(default=30, ge=1, description="Seconds to wait for a pooled connection")
    pool_recycle: int = Field(default=60, ge=-1, description="Seconds before a pooled connection is recycled")

    @property
    def is_configured(self) -> bool:
        """Check if the mandatory credentials are present.

        Returns:
            True when host, user, password and database name are all set
        """
        return bool(self.host and self.user and self.password and self.name)

    def build_url(self) -> URL:
        """Build the SQLAlchemy URL for :func:`create_async_engine`."""
        return URL.create(
            drivername=self.driver,
            username=self.user,
            password=self.password.get_secret_value() if self.password else None,
            host=self.host,
            port=self.port,
            database=self.name,
            query={"charset": "utf8mb4"},
        )
