"""
Environment-driven settings for the DevOps Lab API.

Nothing is read at import time; call get_settings() when the service
starts. Variable names match the field names (case-insensitive), e.g.
STATIC_TOKEN, DATABASE_URL, SENTRY_DSN.
"""

import logging
from typing import Optional

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    API settings.

    Only ``static_token`` is required; everything else has a local
    development default (SQLite file, Sentry off).
    """

    model_config = SettingsConfigDict(
        env_file=None,
        case_sensitive=False,
        extra="ignore"
    )

    # Storage
    database_url: str = Field(
        default="sqlite:///./devops_lab.db",
        description="SQLAlchemy URL for progress, achievements and runs"
    )
    auto_create_schema: bool = Field(
        default=True,
        description="Create missing tables at startup instead of "
                    "requiring alembic upgrade"
    )

    # Access
    static_token: str = Field(
        ...,
        description="Bearer token expected on every authenticated route"
    )

    # Error reporting
    sentry_dsn: Optional[str] = Field(
        default=None,
        description="Sentry DSN; reporting is off when unset"
    )
    sentry_environment: str = Field(default="development")
    sentry_traces_sample_rate: float = Field(default=0.1, ge=0, le=1)
    sentry_profiles_sample_rate: float = Field(default=1.0, ge=0, le=1)

    # Playground
    execution_history_limit: int = Field(
        default=50,
        gt=0,
        description="Runs returned by the history endpoint when no "
                    "limit is given"
    )

    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @computed_field  # type: ignore[misc]
    @property
    def effective_log_level(self) -> str:
        """DEBUG in debug mode, otherwise the configured level."""
        return "DEBUG" if self.debug else self.log_level


def get_settings() -> Settings:
    """
    Load settings from the process environment.

    Raises:
        pydantic.ValidationError: If STATIC_TOKEN is missing or a value
            fails validation
    """
    return Settings()  # type: ignore[call-arg]
