# This file implements the imports and imported-by tabs of a package page.
# Imports are split into standard library, same-module, and external packages.
# Importers are grouped into account/repository sections and capped at the configured limit.

from __future__ import annotations

from typing import Any

from pkgview.api.api_config import ApiConfig
from pkgview.api.counts import imported_by_display
from pkgview.api.db_access import DatabaseClient
from pkgview.api.errors import NotSupportedError
from pkgview.api.links import is_stdlib_path
from pkgview.api.sections import build_sections, next_prefix_account
from pkgview.api.services.unit_lookup import UnitLookup


class ImportsService:
    """Data retrieval for the imports and imported-by tabs."""

    def __init__(self, *, config: ApiConfig, db: DatabaseClient) -> None:
        self.config = config
        self.db = db
        self.lookup = UnitLookup(config=config, db=db)
        self.imports_table = self.config.validate_table_name(self.config.imports_table_name)
        self.search_table = self.config.validate_table_name(self.config.search_documents_table_name)

    def get_imports(self, *, path: str, version: str) -> dict[str, Any]:
        unit = self.lookup.resolve_unit(path=path, version=version)
        module_path = str(unit["module_path"])

        query = f"""
        SELECT DISTINCT i.to_path
        FROM {self.imports_table} i
        WHERE i.from_path = :path AND i.from_module_path = :module_path AND i.from_version = :version
        ORDER BY i.to_path ASC
        """
        rows = self.db.fetch_all(query, {"path": path, "module_path": module_path, "version": unit["version"]})

        std: list[str] = []
        module_imports: list[str] = []
        external: list[str] = []
        for row in rows:
            imported = str(row["to_path"])
            if is_stdlib_path(imported):
                std.append(imported)
            elif (imported + "/").startswith(module_path + "/"):
                module_imports.append(imported)
            else:
                external.append(imported)

        return {
            "module_path": module_path,
            "external_imports": external,
            "internal_imports": module_imports,
            "std_lib": std,
        }

    def get_imported_by(self, *, path: str, version: str) -> dict[str, Any]:
        if not getattr(self.db, "supports_imported_by", False):
            raise NotSupportedError("The imported-by view is not supported by this data source.")

        unit = self.lookup.resolve_unit(path=path, version=version)
        module_path = str(unit["module_path"])
        limit = self.config.imported_by_limit

        importers_query = f"""
        SELECT DISTINCT i.from_path
        FROM {self.imports_table} i
        WHERE i.to_path = :path AND i.from_module_path <> :module_path
        ORDER BY i.from_path ASC
        LIMIT :limit
        """
        importers = [
            str(row["from_path"])
            for row in self.db.fetch_all(
                importers_query, {"path": path, "module_path": module_path, "limit": limit}
            )
        ]
        num_retrieved = len(importers)

        search_query = f"""
        SELECT sd.num_imported_by
        FROM {self.search_table} sd
        WHERE sd.package_path = :path AND sd.module_path = :module_path
        """
        num_search = int(self.db.fetch_scalar(search_query, {"path": path, "module_path": module_path}) or 0)

        if num_retrieved >= limit:
            importers = importers[: limit - 1]

        return {
            "module_path": module_path,
            "imported_by": [section.as_dict() for section in build_sections(importers, next_prefix_account)],
            "num_imported_by_display": imported_by_display(
                num_retrieved=num_retrieved,
                num_search=num_search,
                limit=limit,
            ),
            "total": num_retrieved,
        }
