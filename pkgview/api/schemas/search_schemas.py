# This file defines response schemas for the search page.

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from pkgview.api.schemas.common import EnvelopeFields, PaginationMetadata


class SearchResultV1(BaseModel):
    name: str
    package_path: str
    module_path: str
    chip_text: str = ""
    synopsis: str = ""
    display_version: str | None = None
    num_imported_by: int = 0
    commit_time: datetime | None = None
    commit_time_display: str = ""


class SearchResponseV1(EnvelopeFields):
    query: str
    redirect_to: str | None = None
    data: list[SearchResultV1]
    pagination: PaginationMetadata | None = None
