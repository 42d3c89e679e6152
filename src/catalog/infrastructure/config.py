"""Runtime configuration, read from ``CATALOG_*`` environment variables."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CATALOG_", env_file=".env", extra="ignore"
    )

    # --- Persistence ---
    database_url: str = "sqlite+aiosqlite:///./catalog.db"
    echo_sql: bool = False

    # --- Logging ---
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"

    # --- Request context ---
    # Identity recorded in the audit columns for CLI-issued commands.
    actor_id: str | None = None

    # --- Queries ---
    default_page_size: int = 20
    max_page_size: int = 100


def get_settings() -> Settings:
    return Settings()
