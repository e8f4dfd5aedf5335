# This file provides dependency factories for FastAPI routes and middleware.
# Services are created once and shared through dependency injection, and tests override them.

from __future__ import annotations

from functools import lru_cache

from pkgview.api.api_config import ApiConfig, get_api_config
from pkgview.api.db_access import DatabaseClient
from pkgview.api.services.imports_service import ImportsService
from pkgview.api.services.search_service import SearchService
from pkgview.api.services.unit_service import UnitService


@lru_cache(maxsize=1)
def get_database_client() -> DatabaseClient:
    config = get_api_config()
    return DatabaseClient(database_url=config.database_url)


@lru_cache(maxsize=1)
def get_unit_service() -> UnitService:
    return UnitService(config=get_api_config(), db=get_database_client())


@lru_cache(maxsize=1)
def get_imports_service() -> ImportsService:
    return ImportsService(config=get_api_config(), db=get_database_client())


@lru_cache(maxsize=1)
def get_search_service() -> SearchService:
    return SearchService(config=get_api_config(), db=get_database_client())


def get_config() -> ApiConfig:
    return get_api_config()
