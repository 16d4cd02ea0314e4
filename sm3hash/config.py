"""
Configuration and settings for the SM3 hasher.
Values come from SM3HASH_* environment variables or a local .env file.
"""

from __future__ import annotations

from functools import lru_cache
from pydantic_settings import BaseSettings
from pydantic import Field

from sm3hash.core.stream import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_PROGRESS_INTERVAL,
    DEFAULT_PROGRESS_STEP,
)
from sm3hash.ops.queue import HashingOptions, ReportOptions


class Settings(BaseSettings):
    """Application settings."""

    # Server settings
    host: str = "127.0.0.1"
    port: int = 8743
    debug: bool = False
    log_level: str = "INFO"

    # Hashing
    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, gt=0)
    progress_step: int = Field(default=DEFAULT_PROGRESS_STEP, ge=1)
    progress_interval: float = Field(default=DEFAULT_PROGRESS_INTERVAL, ge=0)

    # Report options (the three checkboxes of the desktop tool, all on by default)
    uppercase: bool = True
    show_size: bool = True
    show_elapsed: bool = True

    # Completed results kept in memory for the results endpoints
    result_history_limit: int = Field(default=1000, ge=1)
    output_line_limit: int = Field(default=10000, ge=1)

    class Config:
        env_prefix = "SM3HASH_"
        env_file = ".env"

    def report_options(self) -> ReportOptions:
        return ReportOptions(
            uppercase=self.uppercase,
            show_size=self.show_size,
            show_elapsed=self.show_elapsed,
        )

    def hashing_options(self) -> HashingOptions:
        return HashingOptions(
            chunk_size=self.chunk_size,
            progress_step=self.progress_step,
            progress_interval=self.progress_interval,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
