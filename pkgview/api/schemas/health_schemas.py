# Response models for the operational endpoints.

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class OperationalResponse(BaseModel):
    api_version: str
    schema_version: str
    request_id: str
    timestamp: datetime


class HealthResponse(OperationalResponse):
    status: str
    environment: str
    service_name: str


class ReadinessResponse(OperationalResponse):
    db_connected: bool
    # Table role ("units", "search_documents", ...) -> whether the configured table exists.
    sources: dict[str, bool]
    ready: bool
    database: str


class VersionResponse(OperationalResponse):
    api_version_path: str
    app_version: str
    git_commit: str | None = None
    project: str
