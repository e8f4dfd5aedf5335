# This file defines the unit page endpoints under the versioned API path.
# Each route cleans the requested path, asks a service for the view model, and wraps it in an envelope.

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from pkgview.api.api_config import ApiConfig
from pkgview.api.dependencies import get_config, get_imports_service, get_unit_service
from pkgview.api.links import LATEST_VERSION
from pkgview.api.response_envelope import object_envelope
from pkgview.api.schemas.unit_schemas import (
    DirectoryResponseV1,
    ImportedByResponseV1,
    ImportsResponseV1,
    UnitMainResponseV1,
)
from pkgview.api.services.imports_service import ImportsService
from pkgview.api.services.unit_service import UnitService

router = APIRouter(prefix="/units", tags=["units"])
UnitServiceDep = Annotated[UnitService, Depends(get_unit_service)]
ImportsServiceDep = Annotated[ImportsService, Depends(get_imports_service)]
ConfigDep = Annotated[ApiConfig, Depends(get_config)]


def unit_path(
    path: Annotated[str, Query(min_length=1, description="Import path of the unit or directory.")],
) -> str:
    # Page URLs arrive as "/example.com/pkg/"; stored paths have no surrounding slashes.
    return path.strip().strip("/")


def unit_version(
    version: Annotated[str, Query(min_length=1, description="Concrete version or 'latest'.")] = LATEST_VERSION,
) -> str:
    return version.strip()


PathDep = Annotated[str, Depends(unit_path)]
VersionDep = Annotated[str, Depends(unit_version)]


@router.get("/main", response_model=UnitMainResponseV1)
def unit_main(
    request: Request, config: ConfigDep, service: UnitServiceDep, path: PathDep, version: VersionDep
) -> dict[str, object]:
    return object_envelope(config, request, service.get_main_details(path=path, version=version))


@router.get("/directory", response_model=DirectoryResponseV1)
def unit_directory(
    request: Request,
    config: ConfigDep,
    service: UnitServiceDep,
    path: PathDep,
    version: VersionDep,
    include_dir_path: Annotated[bool, Query()] = False,
) -> dict[str, object]:
    data = service.get_directory(path=path, version=version, include_dir_path=include_dir_path)
    return object_envelope(config, request, data)


@router.get("/imports", response_model=ImportsResponseV1)
def unit_imports(
    request: Request, config: ConfigDep, service: ImportsServiceDep, path: PathDep, version: VersionDep
) -> dict[str, object]:
    return object_envelope(config, request, service.get_imports(path=path, version=version))


@router.get("/imported-by", response_model=ImportedByResponseV1)
def unit_imported_by(
    request: Request, config: ConfigDep, service: ImportsServiceDep, path: PathDep, version: VersionDep
) -> dict[str, object]:
    return object_envelope(config, request, service.get_imported_by(path=path, version=version))
