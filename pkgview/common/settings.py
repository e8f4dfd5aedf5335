"""
Process-wide settings read from the environment.
Logging and the API config loader both start from these values, so a missing
database URL or an unknown log level stops the site before any route is served.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Final

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

REQUIRED_ENV_VARS: Final[tuple[str, ...]] = ("PROJECT_NAME", "ENV", "LOG_LEVEL", "DATABASE_URL")


class Settings(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    project_name: str = Field(validation_alias="PROJECT_NAME")
    environment: str = Field(validation_alias="ENV")
    log_level: str = Field(validation_alias="LOG_LEVEL")
    database_url: str = Field(validation_alias="DATABASE_URL")

    @field_validator("log_level")
    @classmethod
    def known_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value!r}")
        return level


def load_settings(*, load_env: bool = True) -> Settings:
    """Read settings from `.env` (optional) and the process environment."""

    if load_env:
        load_dotenv()

    values = {name: os.getenv(name, "").strip() for name in REQUIRED_ENV_VARS}
    missing = sorted(name for name, value in values.items() if not value)
    if missing:
        raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")

    try:
        return Settings.model_validate(values)
    except ValidationError as exc:
        raise RuntimeError(f"Invalid environment configuration: {exc}") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
