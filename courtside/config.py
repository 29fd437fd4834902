"""
Courtside — Centralized configuration.

Loads all settings from .env and validates them.
Every other module reads its tunables from here.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError, field_validator

# Load .env from project root (two levels up from courtside/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # SQLite record store
    DATABASE_PATH: str = "data/courtside.db"

    # Max staged entries applied at once during a commit
    COMMIT_CONCURRENCY: int = 4

    # Line count used when a team has none configured
    DEFAULT_LINE_COUNT: int = 3

    LOG_LEVEL: str = "INFO"

    # Event-type filter a fresh availability view starts with
    DEFAULT_EVENT_TYPES: list[str] = ["match", "practice", "warmup", "other"]

    @field_validator("DEFAULT_EVENT_TYPES", mode="before")
    @classmethod
    def parse_event_types(cls, v: str | list[str]) -> list[str]:
        if isinstance(v, list):
            return v
        if isinstance(v, str) and v.strip():
            return [t.strip().lower() for t in v.split(",") if t.strip()]
        return ["match", "practice", "warmup", "other"]

    @field_validator("COMMIT_CONCURRENCY", "DEFAULT_LINE_COUNT", mode="before")
    @classmethod
    def parse_int(cls, v: str | int) -> int:
        return int(v)

    @field_validator("COMMIT_CONCURRENCY")
    @classmethod
    def check_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("COMMIT_CONCURRENCY must be at least 1")
        return v

    @field_validator("DEFAULT_LINE_COUNT")
    @classmethod
    def check_line_count(cls, v: int) -> int:
        if v < 0:
            raise ValueError("DEFAULT_LINE_COUNT cannot be negative")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def check_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown LOG_LEVEL: {v!r}")
        return level


def _load_settings() -> Settings:
    """Load settings from environment, exiting on invalid values."""
    try:
        return Settings(
            DATABASE_PATH=os.getenv("DATABASE_PATH", "data/courtside.db"),
            COMMIT_CONCURRENCY=os.getenv("COMMIT_CONCURRENCY", "4"),
            DEFAULT_LINE_COUNT=os.getenv("DEFAULT_LINE_COUNT", "3"),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
            DEFAULT_EVENT_TYPES=os.getenv("DEFAULT_EVENT_TYPES", ""),
        )
    except ValidationError as exc:
        print(f"ERROR: invalid configuration in .env:\n{exc}", file=sys.stderr)
        sys.exit(1)


def configure_logging() -> None:
    """Apply LOG_LEVEL and the shared log format to the root logger."""
    logging.basicConfig(level=settings.LOG_LEVEL, format=LOG_FORMAT)


# Singleton: imported by all other modules as:
#   from courtside.config import settings
settings = _load_settings()
