"""
Configuration and logging setup.

Settings come from environment variables prefixed with ``MASTERY_`` or from a
``.env`` file in the working directory.
"""
from __future__ import annotations

import sys
from functools import lru_cache

from loguru import logger
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from mastery_tracker.db import DEFAULT_DB_PATH


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="MASTERY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    db_path: str = Field(
        default=DEFAULT_DB_PATH,
        description="SQLite database file holding learners and mastery records",
    )
    learner_id: str = Field(
        default="local",
        description="Learner the CLI reads and writes",
    )
    catalog_path: str | None = Field(
        default=None,
        description="Curriculum JSON to use instead of the bundled catalog",
    )
    log_level: str = Field(
        default="WARNING",
        description="Minimum loguru level written to stderr",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(level: str = "WARNING") -> None:
    """Replace loguru's default sink with a single stderr sink at ``level``."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {name}:{function} - {message}",
    )
