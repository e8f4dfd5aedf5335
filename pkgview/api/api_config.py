# This file defines runtime settings for the view API in one place.
# Search limits, page-link windows, importer limits, and data-source table names come from
# API_* environment variables; unset variables keep the defaults below.
# Table names end up inside SQL text, so each one must be a plain identifier on the allowlist.

from __future__ import annotations

import os
import re
from collections.abc import Callable
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from pkgview.common.settings import load_settings

_IDENTIFIER_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

_TABLE_NAME_FIELDS = (
    "units_table_name",
    "modules_table_name",
    "imports_table_name",
    "search_documents_table_name",
    "request_log_table_name",
)


def _check_identifier(value: str) -> str:
    if not _IDENTIFIER_RE.match(value):
        raise ValueError(f"Unsafe SQL identifier: {value!r}")
    return value


class ApiConfig(BaseModel):
    """Typed API runtime configuration."""

    model_config = ConfigDict(extra="ignore")

    api_name: str = "Package Documentation Views"
    api_version_path: str = "/api/v1"
    schema_version: str = "1.0.0"
    app_version: str = "0.1.0"
    environment: str = "local"
    database_url: str
    allowed_origins: list[str] = Field(default_factory=list)
    enable_request_logging: bool = False

    default_search_limit: int = 10
    max_search_page_size: int = 100
    max_search_offset: int = 90
    max_search_query_length: int = 500
    search_count_sigma: float = 0.1
    search_exact_count_limit: int = 10000
    search_sample_percent: float = 1.0
    pages_to_link: int = 7
    main_page_imported_by_limit: int = 1001
    imported_by_limit: int = 20001

    units_table_name: str = "units"
    modules_table_name: str = "modules"
    imports_table_name: str = "imports"
    search_documents_table_name: str = "search_documents"
    request_log_table_name: str = "request_log"
    # Configured table names are always allowed; this adds any extra ones.
    allowed_table_names: set[str] = Field(default_factory=set)

    @field_validator("api_version_path")
    @classmethod
    def validate_api_version_path(cls, value: str) -> str:
        value = value.rstrip("/")
        parts = [part for part in value.split("/") if part]
        if not value.startswith("/") or len(parts) < 2 or not parts[-1].startswith("v"):
            raise ValueError("api_version_path must look like '/api/v1'.")
        return value

    @field_validator(*_TABLE_NAME_FIELDS)
    @classmethod
    def validate_table_identifier(cls, value: str) -> str:
        return _check_identifier(value)

    @field_validator("allowed_table_names")
    @classmethod
    def validate_allowlist(cls, value: set[str]) -> set[str]:
        return {_check_identifier(name) for name in value}

    @field_validator(
        "default_search_limit",
        "max_search_page_size",
        "max_search_query_length",
        "search_exact_count_limit",
        "pages_to_link",
        "main_page_imported_by_limit",
        "imported_by_limit",
    )
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("Value must be greater than 0.")
        return value

    @model_validator(mode="after")
    def validate_cross_field_limits(self) -> ApiConfig:
        if self.default_search_limit > self.max_search_page_size:
            raise ValueError("default_search_limit must be <= max_search_page_size.")
        if not 0 < self.search_sample_percent <= 100:
            raise ValueError("search_sample_percent must be in (0, 100].")
        if self.search_count_sigma <= 0:
            raise ValueError("search_count_sigma must be greater than 0.")
        self.allowed_table_names = self.allowed_table_names | {
            getattr(self, name) for name in _TABLE_NAME_FIELDS
        }
        return self

    def validate_table_name(self, table_name: str) -> str:
        _check_identifier(table_name)
        if table_name not in self.allowed_table_names:
            raise ValueError(f"Table name is not in allowlist: {table_name!r}")
        return table_name


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.lower()
    if value in {"1", "true", "yes", "y", "on"}:
        return True
    if value in {"0", "false", "no", "n", "off"}:
        return False
    raise ValueError(f"{name} must be boolean-like, got {raw!r}")


def _parse_list(_: str, raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


def _parse_int(_: str, raw: str) -> int:
    return int(raw)


def _parse_float(_: str, raw: str) -> float:
    return float(raw)


def _parse_text(_: str, raw: str) -> str:
    return raw


_ENV_FIELDS: tuple[tuple[str, str, Callable[[str, str], object]], ...] = (
    ("api_name", "API_NAME", _parse_text),
    ("api_version_path", "API_VERSION_PATH", _parse_text),
    ("schema_version", "API_SCHEMA_VERSION", _parse_text),
    ("app_version", "APP_VERSION", _parse_text),
    ("allowed_origins", "API_ALLOWED_ORIGINS", _parse_list),
    ("enable_request_logging", "API_ENABLE_REQUEST_LOGGING", _parse_bool),
    ("default_search_limit", "API_DEFAULT_SEARCH_LIMIT", _parse_int),
    ("max_search_page_size", "API_MAX_SEARCH_PAGE_SIZE", _parse_int),
    ("max_search_offset", "API_MAX_SEARCH_OFFSET", _parse_int),
    ("max_search_query_length", "API_MAX_SEARCH_QUERY_LENGTH", _parse_int),
    ("search_count_sigma", "API_SEARCH_COUNT_SIGMA", _parse_float),
    ("search_exact_count_limit", "API_SEARCH_EXACT_COUNT_LIMIT", _parse_int),
    ("search_sample_percent", "API_SEARCH_SAMPLE_PERCENT", _parse_float),
    ("pages_to_link", "API_PAGES_TO_LINK", _parse_int),
    ("main_page_imported_by_limit", "API_MAIN_PAGE_IMPORTED_BY_LIMIT", _parse_int),
    ("imported_by_limit", "API_IMPORTED_BY_LIMIT", _parse_int),
    ("units_table_name", "API_UNITS_TABLE_NAME", _parse_text),
    ("modules_table_name", "API_MODULES_TABLE_NAME", _parse_text),
    ("imports_table_name", "API_IMPORTS_TABLE_NAME", _parse_text),
    ("search_documents_table_name", "API_SEARCH_DOCUMENTS_TABLE_NAME", _parse_text),
    ("request_log_table_name", "API_REQUEST_LOG_TABLE_NAME", _parse_text),
    ("allowed_table_names", "API_ALLOWED_TABLE_NAMES", lambda name, raw: set(_parse_list(name, raw))),
)


def load_api_config(*, load_env: bool = True) -> ApiConfig:
    """Build the API config from process settings plus any API_* overrides."""

    settings = load_settings(load_env=load_env)
    values: dict[str, object] = {
        "environment": settings.environment,
        "database_url": settings.database_url,
    }
    for field_name, env_name, parse in _ENV_FIELDS:
        raw = os.getenv(env_name)
        if raw is None or raw.strip() == "":
            continue
        values[field_name] = parse(env_name, raw.strip())
    return ApiConfig.model_validate(values)


@lru_cache(maxsize=1)
def get_api_config() -> ApiConfig:
    return load_api_config()
