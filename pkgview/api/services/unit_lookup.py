# This file resolves a requested path and version to the unit or module stored in the data source.
# Every page service starts here, so "latest" resolution and not-found handling behave the same way.

from __future__ import annotations

from typing import Any

from pkgview.api.api_config import ApiConfig
from pkgview.api.db_access import DatabaseClient
from pkgview.api.errors import NotFoundError
from pkgview.api.links import LATEST_VERSION


def like_prefix(path: str) -> str:
    """LIKE pattern matching every path below `path`, with wildcards in `path` escaped."""

    escaped = path.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return escaped + "/%"


class UnitLookup:
    """Version-aware lookups shared by the page services."""

    def __init__(self, *, config: ApiConfig, db: DatabaseClient) -> None:
        self.config = config
        self.db = db
        self.units_table = self.config.validate_table_name(self.config.units_table_name)
        self.modules_table = self.config.validate_table_name(self.config.modules_table_name)

    def resolve_unit(self, *, path: str, version: str) -> dict[str, Any]:
        """Return the unit row for `path`, preferring the longest containing module."""

        params: dict[str, Any] = {"path": path}
        if version == LATEST_VERSION:
            version_sql = "m.is_latest = TRUE"
        else:
            version_sql = "u.version = :version"
            params["version"] = version

        query = f"""
        SELECT
            u.path,
            u.module_path,
            u.version,
            u.name,
            u.synopsis,
            u.is_package,
            u.is_redistributable,
            u.num_imports,
            m.commit_time
        FROM {self.units_table} u
        JOIN {self.modules_table} m
            ON m.module_path = u.module_path AND m.version = u.version
        WHERE u.path = :path AND {version_sql}
        ORDER BY LENGTH(u.module_path) DESC
        LIMIT 1
        """
        row = self.db.fetch_one(query, params)
        if row is None:
            raise NotFoundError(f"{path}@{version} not found")
        return row

    def resolve_module(self, *, path: str, version: str) -> dict[str, Any]:
        """Return the module row whose path is `path` or the longest prefix of it."""

        params: dict[str, Any] = {"path": path}
        if version == LATEST_VERSION:
            version_sql = "m.is_latest = TRUE"
        else:
            version_sql = "m.version = :version"
            params["version"] = version

        query = f"""
        SELECT m.module_path, m.version, m.commit_time
        FROM {self.modules_table} m
        WHERE (m.module_path = :path OR :path LIKE m.module_path || '/%') AND {version_sql}
        ORDER BY LENGTH(m.module_path) DESC
        LIMIT 1
        """
        row = self.db.fetch_one(query, params)
        if row is None:
            raise NotFoundError(f"no module contains {path}@{version}")
        return row
