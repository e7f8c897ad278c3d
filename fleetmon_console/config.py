"""
Console configuration using pydantic-settings.

Reads FLEETMON_* environment variables (or .env).
"""
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class ConsoleSettings(BaseSettings):
    """Where the fleet API lives and how long to wait for it."""

    model_config = SettingsConfigDict(
        env_prefix="FLEETMON_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_url: str = "http://localhost:4000"
    timeout_s: float = 15.0
    email: Optional[str] = None
    password: Optional[str] = None
    log_level: str = "INFO"


@lru_cache()
def get_console_settings() -> ConsoleSettings:
    """Cached settings instance."""
    return ConsoleSettings()
