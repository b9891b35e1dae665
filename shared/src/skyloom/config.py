"""Application configuration from environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Settings for the chart computation core, loaded from environment variables."""

    # Redis
    redis_url: str = Field(default="redis://localhost:6379/0", alias="REDIS_URL")

    # Chart cache
    chart_cache_backend: str = Field(default="memory", alias="CHART_CACHE_BACKEND")
    chart_cache_prefix: str = Field(default="chartcache", alias="CHART_CACHE_PREFIX")
    chart_cache_grace_seconds: int = Field(default=3600, alias="CHART_CACHE_GRACE_SECONDS")
    chart_cache_max_entries: int = Field(default=1024, alias="CHART_CACHE_MAX_ENTRIES")

    # Local calendar used for bucket dates
    timezone: str = Field(default="UTC", alias="TIMEZONE")

    # Aspects
    transit_orb_factor: float = Field(default=0.8, alias="TRANSIT_ORB_FACTOR")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def reset_settings_cache() -> None:
    """Clear cached settings (useful in tests)."""
    get_settings.cache_clear()
