# This file implements package search over the search_documents table.
# Result counts are exact up to a configured limit; beyond it the count is estimated from a
# table sample and flagged approximate so the page can round it for display.
# Queries that name an existing package path are reported as redirects instead of searched.

from __future__ import annotations

import logging
import posixpath
from typing import Any

from pkgview.api.api_config import ApiConfig
from pkgview.api.db_access import DatabaseClient
from pkgview.api.elapsed import elapsed_time
from pkgview.api.errors import NotFoundError
from pkgview.api.links import LATEST_VERSION, STDLIB_MODULE_PATH, effective_name
from pkgview.api.services.unit_lookup import UnitLookup

logger = logging.getLogger(__name__)


def like_contains(query: str) -> str:
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class SearchService:
    """Package search and search-to-page redirects."""

    def __init__(self, *, config: ApiConfig, db: DatabaseClient) -> None:
        self.config = config
        self.db = db
        self.lookup = UnitLookup(config=config, db=db)
        self.search_table = self.config.validate_table_name(self.config.search_documents_table_name)

    def search(self, *, query: str, limit: int, offset: int) -> dict[str, Any]:
        where_sql = "(sd.package_path ILIKE :pattern OR sd.synopsis ILIKE :pattern)"
        params: dict[str, Any] = {"pattern": like_contains(query)}

        data_query = f"""
        SELECT
            sd.package_path,
            sd.module_path,
            sd.version,
            sd.name,
            sd.synopsis,
            sd.num_imported_by,
            sd.commit_time
        FROM {self.search_table} sd
        WHERE {where_sql}
        ORDER BY sd.num_imported_by DESC, sd.package_path ASC
        LIMIT :limit OFFSET :offset
        """
        rows = self.db.fetch_all(data_query, {**params, "limit": limit, "offset": offset})

        exact_limit = self.config.search_exact_count_limit
        count_query = f"""
        SELECT COUNT(*) AS total_count
        FROM (SELECT 1 FROM {self.search_table} sd WHERE {where_sql} LIMIT :count_limit) matches
        """
        total_count = int(self.db.fetch_scalar(count_query, {**params, "count_limit": exact_limit}) or 0)
        approximate = False
        if total_count >= exact_limit:
            total_count = max(self._estimate_count(where_sql, params), exact_limit)
            approximate = True

        return {
            "rows": [_search_result(row) for row in rows],
            "total_count": total_count,
            "approximate": approximate,
        }

    def redirect_path(self, query: str) -> str:
        """Return the page path a query should redirect to, or "" to search normally.

        Only paths containing a slash redirect, so one-element standard library
        names such as "errors" still produce search results.
        """

        scheme_index = query.find("://")
        if scheme_index > -1:
            query = query[scheme_index + 3:]
        requested_path = posixpath.normpath(query)
        if "/" not in requested_path:
            return ""
        try:
            self.lookup.resolve_unit(path=requested_path, version=LATEST_VERSION)
        except NotFoundError:
            return ""
        return "/" + requested_path

    def _estimate_count(self, where_sql: str, params: dict[str, Any]) -> int:
        percent = self.config.search_sample_percent
        query = f"""
        SELECT COUNT(*) AS sampled_count
        FROM {self.search_table} sd TABLESAMPLE SYSTEM (:percent)
        WHERE {where_sql}
        """
        sampled = int(self.db.fetch_scalar(query, {**params, "percent": percent}) or 0)
        estimate = int(sampled * 100 / percent)
        logger.debug("Estimated %d search matches from a %.2f%% sample", estimate, percent)
        return estimate


def _search_result(row: dict[str, Any]) -> dict[str, Any]:
    package_path = str(row["package_path"])
    module_path = str(row["module_path"])
    name = str(row.get("name") or "")
    chip_text = ""
    if name == "main":
        chip_text = "command"
        name = effective_name(package_path, name)
    if module_path == STDLIB_MODULE_PATH:
        chip_text = "standard library"
    return {
        "name": name,
        "package_path": package_path,
        "module_path": module_path,
        "chip_text": chip_text,
        "synopsis": row.get("synopsis") or "",
        "display_version": row.get("version"),
        "num_imported_by": int(row.get("num_imported_by") or 0),
        "commit_time": row.get("commit_time"),
        "commit_time_display": elapsed_time(row.get("commit_time")),
    }
