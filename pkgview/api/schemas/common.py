# This file defines schema pieces shared by every page response.
# Envelope metadata, pagination, breadcrumbs, and error payloads stay consistent across routes.

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class PaginationMetadata(BaseModel):
    page: int = Field(ge=1)
    per_page: int = Field(ge=1)
    total_count: int = Field(ge=0)
    result_count: int = Field(ge=0)
    page_count: int = Field(ge=0)
    offset: int = Field(ge=0)
    previous_page: int = Field(ge=0)
    next_page: int = Field(ge=0)
    pages: list[int]
    approximate: bool = False
    previous_url: str | None = None
    next_url: str | None = None


class LinkV1(BaseModel):
    href: str
    body: str


class BreadcrumbV1(BaseModel):
    links: list[LinkV1]
    current: str
    copy_data: str = ""


class EnvelopeFields(BaseModel):
    api_version: str
    schema_version: str
    request_id: str
    generated_at: datetime
    warnings: list[str] | None = None


class ErrorResponse(BaseModel):
    error_code: str
    message: str
    details: Any | None = None
    request_id: str
    timestamp: datetime
