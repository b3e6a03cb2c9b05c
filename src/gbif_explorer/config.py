"""Application configuration loaded from environment or ``.env``."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralized configuration; every field can be set as ``GBIF_EXPLORER_<NAME>``."""

    model_config = SettingsConfigDict(
        env_prefix="GBIF_EXPLORER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "gbif-explorer"
    app_env: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    gbif_api_base: str = "https://api.gbif.org/v1"
    nominatim_url: str = "https://nominatim.openstreetmap.org/search"
    user_agent: str = "gbif-explorer/0.1 (biodiversity occurrence explorer)"
    request_timeout: float = Field(default=30.0, gt=0)

    data_dir: Path = Path("data")
    default_limit: int = Field(default=1000, ge=1, le=100_000)
    chunk_delay_seconds: float = Field(default=0.4, ge=0)
    fetch_debounce_seconds: float = Field(default=0.8, ge=0)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
