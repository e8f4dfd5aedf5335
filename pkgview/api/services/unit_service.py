# This file builds the main view of a unit page and the directory listing of a path.
# It gathers subdirectory packages, nested modules, and importer counts from the data source,
# then hands them to the directory-tree and count helpers for shaping.

from __future__ import annotations

import logging
from typing import Any

from pkgview.api.api_config import ApiConfig
from pkgview.api.breadcrumb import display_breadcrumb
from pkgview.api.counts import NOT_AVAILABLE, imported_by_count_text
from pkgview.api.db_access import DatabaseClient
from pkgview.api.directories import (
    DirectoryEntry,
    DirectoryGroup,
    nested_module_entries,
    subdirectory_entries,
    unit_directory_tree,
)
from pkgview.api.elapsed import elapsed_time
from pkgview.api.errors import InvalidArgumentError
from pkgview.api.links import (
    LATEST_VERSION,
    STDLIB_MODULE_PATH,
    construct_unit_url,
    effective_name,
    path_suffix,
)
from pkgview.api.services.unit_lookup import UnitLookup, like_prefix

logger = logging.getLogger(__name__)


class UnitService:
    """Data retrieval and shaping for unit main pages and directory listings."""

    def __init__(self, *, config: ApiConfig, db: DatabaseClient) -> None:
        self.config = config
        self.db = db
        self.lookup = UnitLookup(config=config, db=db)
        self.units_table = self.config.validate_table_name(self.config.units_table_name)
        self.modules_table = self.config.validate_table_name(self.config.modules_table_name)
        self.imports_table = self.config.validate_table_name(self.config.imports_table_name)
        self.search_table = self.config.validate_table_name(self.config.search_documents_table_name)

    def get_main_details(self, *, path: str, version: str) -> dict[str, Any]:
        unit = self.lookup.resolve_unit(path=path, version=version)
        module_path = str(unit["module_path"])

        packages = self._packages_below(
            dir_path=path, module_path=module_path, version=str(unit["version"])
        )
        subdirectories = subdirectory_entries(
            unit_path=path,
            module_path=module_path,
            version=_link_version(version, str(unit["version"])),
            packages=packages,
        )
        nested_modules = nested_module_entries(
            unit_path=path,
            module_path=module_path,
            modules=self._nested_modules(unit_path=path),
        )
        directories = unit_directory_tree(subdirectories=subdirectories, nested_modules=nested_modules)

        return {
            "unit": _unit_header(unit),
            "breadcrumb": display_breadcrumb(path, module_path, version).as_dict(),
            "directories": [_group_dict(group) for group in directories],
            "num_imports": int(unit.get("num_imports") or 0),
            "imported_by_count": self.get_imported_by_count(path=path, module_path=module_path),
        }

    def get_directory(self, *, path: str, version: str, include_dir_path: bool = False) -> dict[str, Any]:
        """Packages at or below `path`, sorted by import path.

        `include_dir_path` keeps a package whose path equals `path`; it is only
        meaningful when `path` is a module root, as on a module's packages tab.
        A module, or a known unit with nothing below it, lists no packages.
        """

        module = self.lookup.resolve_module(path=path, version=version)
        module_path = str(module["module_path"])
        if include_dir_path and path != module_path and path != STDLIB_MODULE_PATH:
            raise InvalidArgumentError("include_dir_path can only be set when the path is a module path")

        resolved_version = str(module["version"])
        rows = self._packages_below(
            dir_path=path,
            module_path=module_path,
            version=resolved_version,
            include_dir_path=True,
        )
        if not rows and path not in (module_path, STDLIB_MODULE_PATH):
            # A known unit without packages below it still gets an empty listing.
            self.lookup.resolve_unit(path=path, version=version)

        link_version = _link_version(version, resolved_version)
        packages: list[dict[str, Any]] = []
        for row in rows:
            package_path = str(row["path"])
            if not include_dir_path and package_path == path:
                continue
            after_directory = path_suffix(package_path, path)
            if after_directory == "":
                after_directory = f"{effective_name(package_path, str(row['name']))} (root)"
            packages.append(
                {
                    "path": package_path,
                    "name": effective_name(package_path, str(row["name"])),
                    "synopsis": row["synopsis"] or "",
                    "path_after_directory": after_directory,
                    "url": construct_unit_url(package_path, module_path, link_version),
                }
            )
        packages.sort(key=lambda package: package["path"])

        return {
            "path": path,
            "module_path": module_path,
            "version": resolved_version,
            "url": construct_unit_url(path, module_path, link_version),
            "breadcrumb": display_breadcrumb(path, module_path, version).as_dict(),
            "packages": packages,
        }

    def get_imported_by_count(self, *, path: str, module_path: str) -> str:
        """Display text for the number of importers; see `imported_by_count_text`."""

        if not getattr(self.db, "supports_imported_by", False):
            return NOT_AVAILABLE

        limit = self.config.main_page_imported_by_limit
        count_query = f"""
        SELECT COUNT(*) AS importer_count
        FROM (
            SELECT DISTINCT i.from_path
            FROM {self.imports_table} i
            WHERE i.to_path = :path AND i.from_module_path <> :module_path
            LIMIT :limit
        ) importers
        """
        exact = int(
            self.db.fetch_scalar(count_query, {"path": path, "module_path": module_path, "limit": limit}) or 0
        )
        if exact < limit:
            return imported_by_count_text(exact_count=exact, search_count=None, limit=limit)

        search_query = f"""
        SELECT sd.num_imported_by
        FROM {self.search_table} sd
        WHERE sd.package_path = :path AND sd.module_path = :module_path
        """
        search_count = self.db.fetch_scalar(search_query, {"path": path, "module_path": module_path})
        if search_count is None:
            logger.error("missing search document for path %s, module path %s", path, module_path)
            return ""
        return imported_by_count_text(exact_count=exact, search_count=int(search_count), limit=limit)

    def _packages_below(
        self,
        *,
        dir_path: str,
        module_path: str,
        version: str,
        include_dir_path: bool = False,
    ) -> list[dict[str, Any]]:
        path_sql = "u.path LIKE :path_prefix"
        if include_dir_path:
            path_sql = f"(u.path = :dir_path OR {path_sql})"
        if dir_path == STDLIB_MODULE_PATH:
            path_sql = "TRUE"

        query = f"""
        SELECT
            u.path,
            u.name,
            CASE WHEN u.is_redistributable THEN u.synopsis ELSE '' END AS synopsis
        FROM {self.units_table} u
        WHERE u.module_path = :module_path
            AND u.version = :version
            AND u.is_package = TRUE
            AND {path_sql}
        ORDER BY u.path ASC
        """
        return self.db.fetch_all(
            query,
            {
                "module_path": module_path,
                "version": version,
                "dir_path": dir_path,
                "path_prefix": like_prefix(dir_path),
            },
        )

    def _nested_modules(self, *, unit_path: str) -> list[dict[str, Any]]:
        query = f"""
        SELECT DISTINCT m.module_path
        FROM {self.modules_table} m
        WHERE m.module_path LIKE :path_prefix AND m.is_latest = TRUE
        ORDER BY m.module_path ASC
        """
        return self.db.fetch_all(query, {"path_prefix": like_prefix(unit_path)})


def _link_version(requested_version: str, resolved_version: str) -> str:
    # Links keep pointing at "latest" when that is what was asked for.
    if requested_version == LATEST_VERSION:
        return LATEST_VERSION
    return resolved_version


def _unit_header(unit: dict[str, Any]) -> dict[str, Any]:
    path = str(unit["path"])
    return {
        "path": path,
        "module_path": unit["module_path"],
        "version": unit["version"],
        "name": effective_name(path, str(unit.get("name") or "")),
        "synopsis": unit.get("synopsis") or "",
        "is_package": bool(unit.get("is_package")),
        "is_redistributable": bool(unit.get("is_redistributable")),
        "commit_time": unit.get("commit_time"),
        "commit_time_display": elapsed_time(unit.get("commit_time")),
    }


def _group_dict(group: DirectoryGroup) -> dict[str, Any]:
    def entry_dict(entry: DirectoryEntry) -> dict[str, Any]:
        return {
            "suffix": entry.suffix,
            "url": entry.url,
            "synopsis": entry.synopsis,
            "is_module": entry.is_module,
            "is_internal": entry.is_internal,
        }

    return {
        "prefix": group.prefix,
        "root": entry_dict(group.root) if group.root is not None else None,
        "children": [entry_dict(child) for child in group.children],
    }
