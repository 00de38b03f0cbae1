"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "button-monitor"
    log_level: str = "INFO"

    # Query surface
    host: str = "0.0.0.0"
    port: int = Field(default=8001, validation_alias=AliasChoices("BUTTON_PORT", "PORT"))

    # Event history
    max_entries: int = Field(
        default=1000,
        ge=1,
        validation_alias=AliasChoices("BUTTON_MAX_ENTRIES", "maxEntries"),
    )

    # Persistence
    database_url: str = Field(
        default="sqlite:///button_presses.db",
        validation_alias=AliasChoices("BUTTON_DATABASE_URL", "DATABASE_URL"),
    )
    snapshot_key: str = "entries"
    shutdown_save_timeout_seconds: float = 10.0

    # Endpoint discovery
    source_url: str = "http://www.reddit.com/r/thebutton"
    resolver_retry_seconds: float = 5.0
    fetch_timeout_seconds: float = 30.0
    user_agent: str = "button-monitor/1.0"

    model_config = {"env_prefix": "BUTTON_", "populate_by_name": True}


settings = Settings()
