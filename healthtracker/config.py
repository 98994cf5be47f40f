"""Application settings, read from ``HEALTH_*`` environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the health timeline service."""

    app_name: str = "Health Timeline"
    log_level: str = "INFO"

    # Wall clock used for "today", past-event locks and event status.
    timezone: str = "America/Sao_Paulo"

    # Load the two demo professionals on startup.
    seed_demo_data: bool = True

    max_attachment_mb: int = 5

    model_config = SettingsConfigDict(
        env_prefix="HEALTH_", env_file=".env", extra="ignore"
    )

    @property
    def max_attachment_bytes(self) -> int:
        return self.max_attachment_mb * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    """Factory for settings (cached singleton)."""
    return Settings()
