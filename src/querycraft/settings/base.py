from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class QueryCraftBaseSettings(BaseSettings):
    """Base class for every QueryCraft settings group.

    Values are read from the process environment and an optional ``.env``
    file. Names are matched case-insensitively and unknown variables are
    ignored so the library can share an environment with its host
    application.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
        populate_by_name=True,
    )

    @classmethod
    def get_env_prefix(cls) -> str:
        """Get the environment variable prefix for this settings class.

        Returns:
            str: Environment variable prefix (empty string for base class)
        """
        return cls.model_config.get("env_prefix", "")


class AppSettings(QueryCraftBaseSettings):
    """Application-wide switches that are not tied to one subsystem."""

    app_env: str = Field(
        default="production",
        description="Deployment environment. 'development' exposes driver error text and console query logs."
    )
    log_level: str = Field(
        default="INFO",
        description="Base level passed to setup_logging()"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level '{v}'")
        return level

    @property
    def is_development(self) -> bool:
        return self.app_env.strip().lower() == "development"
