"""Runtime configuration."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from worklog_engine.aggregator import DONE_TAGS
from worklog_engine.schema import DEFAULT_PAGE_SIZE


class Settings(BaseSettings):
    """Process configuration, read from ``WORKLOG_*`` variables or a ``.env`` file."""

    model_config = SettingsConfigDict(env_prefix="WORKLOG_", env_file=".env", extra="ignore")

    data_dir: Path = Path("./data")
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, gt=0)
    done_tags: tuple[str, ...] = DONE_TAGS
    backup_limit: int = Field(default=10, ge=1)
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level '{value}'")
        return level


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
