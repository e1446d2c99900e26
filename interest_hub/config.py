"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        default="sqlite:///./interest_hub.db",
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    app_timezone: str = Field(
        default="UTC",
        description="Timezone whose local midnight delimits the daily interest quota",
    )
    interest_daily_limit: int = Field(
        default=5,
        description="Maximum number of interests a user may send per calendar day",
        gt=0,
    )
    interest_expiry_days: int = Field(
        default=30,
        description="Number of days a pending interest stays answerable",
        gt=0,
    )
    dispatch_retry_attempts: int = Field(
        default=3,
        description="Attempts made to persist a notification before degrading to a warning",
        ge=1,
    )
    publish_retry_attempts: int = Field(
        default=3,
        description="Attempts made to deliver a realtime event to a subscriber",
        ge=1,
    )
    operation_timeout_seconds: float = Field(
        default=5.0,
        description="Upper bound for a single store or channel call",
        gt=0,
    )
    activity_feed_capacity: int = Field(
        default=100,
        description="Activity feed entries retained per user",
        gt=0,
    )
    event_history_capacity: int = Field(
        default=50,
        description="Raw state-change events retained per user for replay",
        gt=0,
    )
    realtime_max_topics: int = Field(
        default=10_000,
        description="Users whose realtime buffers are kept before the least recent is evicted",
        gt=0,
    )
    notification_expiry_days: int = Field(
        default=30,
        description="Number of days a notification is kept before the cleanup sweep removes it",
        gt=0,
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
