# This file wraps the relational data source holding units, modules, imports, and search documents.
# Services hand it parameterized SQL and get plain dictionaries back, so view shaping never sees
# SQLAlchemy rows. Request-log rows are written only when the log table exists.

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class DatabaseClient:
    """Read access to the page data plus best-effort request logging."""

    # Importer counts need the imports table; a client without one sets this to False.
    supports_imported_by = True

    def __init__(self, *, database_url: str) -> None:
        self._engine: Engine = create_engine(database_url, pool_pre_ping=True)
        self._known_tables: dict[str, bool] = {}

    @contextmanager
    def _connect(self) -> Iterator[Connection]:
        with self._engine.connect() as connection:
            yield connection

    def can_connect(self) -> bool:
        try:
            with self._connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            logger.warning("Database connectivity check failed: %s", exc)
            return False
        return True

    def table_exists(self, table_name: str) -> bool:
        with self._connect() as connection:
            return inspect(connection).has_table(table_name)

    def fetch_all(self, query: str, params: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        with self._connect() as connection:
            result = connection.execute(text(query), dict(params or {}))
            return [dict(row) for row in result.mappings()]

    def fetch_one(self, query: str, params: Mapping[str, Any] | None = None) -> dict[str, Any] | None:
        with self._connect() as connection:
            row = connection.execute(text(query), dict(params or {})).mappings().first()
        return None if row is None else dict(row)

    def fetch_scalar(self, query: str, params: Mapping[str, Any] | None = None) -> Any:
        """First column of the first row, or None when the query returns nothing."""

        with self._connect() as connection:
            return connection.execute(text(query), dict(params or {})).scalar()

    def log_request(
        self,
        *,
        table_name: str,
        request_id: str,
        path: str,
        method: str,
        status_code: int,
        duration_ms: float,
    ) -> None:
        """Insert one request-log row; `table_name` must already be allowlisted by the caller."""

        if table_name not in self._known_tables:
            self._known_tables[table_name] = self.table_exists(table_name)
        if not self._known_tables[table_name]:
            return

        statement = text(
            f"INSERT INTO {table_name} (request_id, path, method, status_code, duration_ms, created_at) "
            "VALUES (:request_id, :path, :method, :status_code, :duration_ms, NOW())"
        )
        with self._engine.begin() as connection:
            connection.execute(
                statement,
                {
                    "request_id": request_id,
                    "path": path,
                    "method": method,
                    "status_code": status_code,
                    "duration_ms": duration_ms,
                },
            )

    def dispose(self) -> None:
        self._engine.dispose()
