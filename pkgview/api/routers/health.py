# This file defines liveness, readiness, and version endpoints.
# Readiness needs a reachable database and every table the page services read from.

from __future__ import annotations

import logging
import subprocess
from functools import lru_cache
from typing import Annotated

from fastapi import APIRouter, Depends, Request

from pkgview.api.api_config import ApiConfig
from pkgview.api.db_access import DatabaseClient
from pkgview.api.dependencies import get_config, get_database_client
from pkgview.api.response_envelope import envelope_header, utc_now
from pkgview.api.schemas.health_schemas import HealthResponse, ReadinessResponse, VersionResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])
ConfigDep = Annotated[ApiConfig, Depends(get_config)]
DBDep = Annotated[DatabaseClient, Depends(get_database_client)]


def source_tables(config: ApiConfig) -> dict[str, str]:
    """Table role -> configured table name, for the tables page views read."""

    return {
        "units": config.units_table_name,
        "modules": config.modules_table_name,
        "imports": config.imports_table_name,
        "search_documents": config.search_documents_table_name,
    }


@lru_cache(maxsize=1)
def _git_commit() -> str | None:
    try:
        completed = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            check=True,
            capture_output=True,
            text=True,
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        logger.debug("git commit unavailable: %s", exc)
        return None
    return completed.stdout.strip() or None


@router.get("/health", response_model=HealthResponse)
def health(request: Request, config: ConfigDep) -> dict[str, object]:
    return {
        **envelope_header(config, request),
        "status": "ok",
        "environment": config.environment,
        "service_name": config.api_name,
        "timestamp": utc_now(),
    }


@router.get("/ready", response_model=ReadinessResponse)
def ready(request: Request, config: ConfigDep, db: DBDep) -> dict[str, object]:
    db_connected = db.can_connect()
    sources = {
        role: db_connected and db.table_exists(table_name)
        for role, table_name in source_tables(config).items()
    }
    missing = sorted(role for role, present in sources.items() if not present)
    if db_connected and missing:
        logger.warning("Readiness check: missing source tables %s", ", ".join(missing))

    return {
        **envelope_header(config, request),
        "db_connected": db_connected,
        "sources": sources,
        "ready": db_connected and not missing,
        "database": "reachable" if db_connected else "unreachable",
        "timestamp": utc_now(),
    }


@router.get("/version", response_model=VersionResponse)
def version(request: Request, config: ConfigDep) -> dict[str, object]:
    return {
        **envelope_header(config, request),
        "api_version_path": config.api_version_path,
        "app_version": config.app_version,
        "git_commit": _git_commit(),
        "project": config.api_name,
        "timestamp": utc_now(),
    }
