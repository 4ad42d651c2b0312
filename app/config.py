"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        default="sqlite:///./notifications.db",
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    store_backend: Literal["sql", "memory"] = Field(
        default="sql",
        description="Record store implementation used by the notification engine",
    )
    app_timezone: str = Field(
        default="UTC",
        description="Timezone used for notification timestamps (name or UTC+HH:MM)",
    )
    default_recipient_id: str | None = Field(
        default=None,
        description=(
            "Recipient used by the legacy surface when the caller omits one. "
            "Leave unset in production so that missing identities are rejected"
        ),
    )
    default_page_size: int = Field(
        default=20, description="Page size used when the caller does not send one", gt=0
    )
    max_page_size: int = Field(
        default=100, description="Largest page size accepted by paginated listings", gt=0
    )
    publish_attempts: int = Field(
        default=2,
        description="Best-effort attempts to publish a new notification before dropping it",
        ge=1,
        le=10,
    )
    subscriber_queue_size: int = Field(
        default=100,
        description="Pending payloads buffered per realtime subscription",
        gt=0,
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:4200"],
        description="Origins allowed to call the API from a browser",
    )
    log_level: str = Field(default="INFO", description="Root logging level")

    @model_validator(mode="after")
    def _validate_page_sizes(self) -> "Settings":
        if self.default_page_size > self.max_page_size:
            raise ValueError("DEFAULT_PAGE_SIZE must not exceed MAX_PAGE_SIZE")
        if self.default_recipient_id is not None and not self.default_recipient_id.strip():
            raise ValueError("DEFAULT_RECIPIENT_ID must not be blank when provided")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
