"""Engine defaults, overridable through FLOATCRAFT_* environment variables."""
import os
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_worker_count() -> int:
    return os.cpu_count() or 1


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FLOATCRAFT_",
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    worker_count: int = Field(default_factory=_default_worker_count, ge=1)
    # Minimum fixed-point decimal places; widened per search when inputs need more
    wear_digits: int = Field(default=12, ge=1, le=18)
    price_digits: int = Field(default=4, ge=0, le=8)
    max_results: int = Field(default=100, ge=1)
    # Visited search nodes between cancellation checks
    cancel_check_interval: int = Field(default=4096, ge=1)


@lru_cache
def get_settings() -> Settings:
    return Settings()
