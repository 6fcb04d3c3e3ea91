"""
Configuration for Event Board

Settings come from environment variables, falling back to the defaults below.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("true", "1", "yes", "on")


@dataclass
class Settings:
    """Runtime settings for the client and the development API."""

    # Remote API
    api_url: str = "http://localhost:3000"
    timeout: float = 10.0
    max_retries: int = 3
    retry_backoff: float = 0.5

    # Drafts
    strict_schedule: bool = False

    # Development API
    database_path: str = "events.db"
    seed_file: str | None = None

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    def __post_init__(self) -> None:
        self.api_url = os.getenv("EVENTBOARD_API_URL", self.api_url).rstrip("/")
        self.timeout = float(os.getenv("EVENTBOARD_TIMEOUT", str(self.timeout)))
        self.max_retries = int(
            os.getenv("EVENTBOARD_MAX_RETRIES", str(self.max_retries))
        )
        self.retry_backoff = float(
            os.getenv("EVENTBOARD_RETRY_BACKOFF", str(self.retry_backoff))
        )
        self.strict_schedule = _env_flag(
            "EVENTBOARD_STRICT_SCHEDULE", self.strict_schedule
        )
        self.database_path = os.getenv("EVENTBOARD_DATABASE", self.database_path)
        self.seed_file = os.getenv("EVENTBOARD_SEED_FILE", self.seed_file)
        self.log_level = os.getenv("LOG_LEVEL", self.log_level).upper()

        if self.max_retries < 1:
            raise ValueError("EVENTBOARD_MAX_RETRIES must be at least 1")


def configure_logging(settings: Settings) -> None:
    """Apply the configured level and format to the root logger."""
    logging.basicConfig(level=settings.log_level, format=settings.log_format)
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
