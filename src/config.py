"""
Revezamento — Centralized configuration.

Loads all settings from .env and validates them.
This module is the foundation for every other module in the project.
"""

from __future__ import annotations

import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (two levels up from src/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # SQLite
    DATABASE_PATH: str = "data/revezamento.db"

    # Civil time zone for every date/time computation
    TIMEZONE: str = "America/Sao_Paulo"

    # Length of one shift window
    SHIFT_DURATION_MINUTES: int = 75

    # /history-recent default window
    HISTORY_DEFAULT_DAYS: int = 7

    LOG_LEVEL: str = "INFO"

    # Role used by the CLI when --role is not given
    DEFAULT_ROLE: str = ""

    @field_validator("TIMEZONE")
    @classmethod
    def check_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown time zone: {v!r}") from exc
        return v

    @field_validator("SHIFT_DURATION_MINUTES", "HISTORY_DEFAULT_DAYS", mode="before")
    @classmethod
    def parse_positive_int(cls, v: str | int) -> int:
        value = int(v)
        if value <= 0:
            raise ValueError("must be a positive integer")
        return value

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.TIMEZONE)


def _load_settings() -> Settings:
    """Load settings from environment."""
    return Settings(
        DATABASE_PATH=os.getenv("DATABASE_PATH", "data/revezamento.db"),
        TIMEZONE=os.getenv("TIMEZONE", "America/Sao_Paulo"),
        SHIFT_DURATION_MINUTES=os.getenv("SHIFT_DURATION_MINUTES", "75"),
        HISTORY_DEFAULT_DAYS=os.getenv("HISTORY_DEFAULT_DAYS", "7"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
        DEFAULT_ROLE=os.getenv("REVEZAMENTO_ROLE", ""),
    )


# Singleton — imported by all other modules as:
#   from src.config import settings
settings = _load_settings()
