# This file defines response schemas for unit pages: the main view, directory listings,
# and the imports / imported-by tabs.

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from pkgview.api.schemas.common import BreadcrumbV1, EnvelopeFields


class UnitHeaderV1(BaseModel):
    path: str
    module_path: str
    version: str
    name: str
    synopsis: str = ""
    is_package: bool
    is_redistributable: bool
    commit_time: datetime | None = None
    commit_time_display: str = ""


class DirectoryEntryV1(BaseModel):
    suffix: str
    url: str
    synopsis: str = ""
    is_module: bool = False
    is_internal: bool = False


class DirectoryGroupV1(BaseModel):
    prefix: str
    root: DirectoryEntryV1 | None = None
    children: list[DirectoryEntryV1]


class UnitMainV1(BaseModel):
    unit: UnitHeaderV1
    breadcrumb: BreadcrumbV1
    directories: list[DirectoryGroupV1]
    num_imports: int
    imported_by_count: str


class UnitMainResponseV1(EnvelopeFields):
    data: UnitMainV1


class DirectoryPackageV1(BaseModel):
    path: str
    name: str
    synopsis: str = ""
    path_after_directory: str
    url: str


class DirectoryV1(BaseModel):
    path: str
    module_path: str
    version: str
    url: str
    breadcrumb: BreadcrumbV1
    packages: list[DirectoryPackageV1]


class DirectoryResponseV1(EnvelopeFields):
    data: DirectoryV1


class ImportsV1(BaseModel):
    module_path: str
    external_imports: list[str]
    internal_imports: list[str]
    std_lib: list[str]


class ImportsResponseV1(EnvelopeFields):
    data: ImportsV1


class SectionV1(BaseModel):
    prefix: str
    num_lines: int
    subs: list[SectionV1]


class ImportedByV1(BaseModel):
    module_path: str
    imported_by: list[SectionV1]
    num_imported_by_display: str
    total: int


class ImportedByResponseV1(EnvelopeFields):
    data: ImportedByV1
