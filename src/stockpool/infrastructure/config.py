"""Runtime settings, read from the environment (prefix ``STOCKPOOL_``) or ``.env``."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="STOCKPOOL_", env_file=".env", extra="ignore")

    data_dir: Path = Path("data")
    log_level: str = "WARNING"
    calendar_days: int = 30


@lru_cache
def get_settings() -> Settings:
    return Settings()
