# This file builds the FastAPI application and registers the page routers.
# Middleware tags each request with an id, reports timing and Prometheus metrics, and can
# write a request-log row; error handling is registered in one place.

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import RequestResponseEndpoint

from pkgview.api.api_config import ApiConfig, get_api_config
from pkgview.api.dependencies import get_database_client
from pkgview.api.error_handlers import register_error_handlers
from pkgview.api.routers.health import router as health_router
from pkgview.api.routers.search import router as search_router
from pkgview.api.routers.units import router as units_router
from pkgview.common.logging import configure_logging

logger = logging.getLogger(__name__)

REQUESTS_TOTAL = Counter(
    "pkgview_http_requests_total",
    "HTTP requests served, by route template and status.",
    ["method", "route", "status_code"],
)
REQUEST_DURATION_SECONDS = Histogram(
    "pkgview_http_request_duration_seconds",
    "HTTP request latency in seconds.",
    ["method", "route"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10),
)
REQUESTS_IN_PROGRESS = Gauge(
    "pkgview_http_requests_in_progress",
    "HTTP requests currently being served.",
    ["method"],
)


def _route_label(request: Request) -> str:
    # Template paths keep label cardinality bounded; unmatched requests share one label.
    route = request.scope.get("route")
    return getattr(route, "path", "unmatched")


def _record_request(config: ApiConfig, *, request_id: str, request: Request, status_code: int, duration_ms: float) -> None:
    if not config.enable_request_logging:
        return
    try:
        get_database_client().log_request(
            table_name=config.validate_table_name(config.request_log_table_name),
            request_id=request_id,
            path=request.url.path,
            method=request.method,
            status_code=status_code,
            duration_ms=duration_ms,
        )
    except SQLAlchemyError as exc:
        logger.warning("Request log write failed for %s: %s", request_id, exc)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    try:
        app.state.db_connected_at_startup = get_database_client().can_connect()
    except (SQLAlchemyError, ImportError) as exc:
        logger.warning("Database client unavailable at startup: %s", exc)
        app.state.db_connected_at_startup = False
    if not app.state.db_connected_at_startup:
        logger.warning("Starting without a reachable database; /ready will report not ready.")
    yield


def create_app() -> FastAPI:
    """Create the configured FastAPI application."""

    configure_logging()
    config = get_api_config()

    app = FastAPI(
        title=config.api_name,
        description=(
            "View models for package documentation pages: unit directories, imports, "
            "importers, and paginated search results."
        ),
        version=config.app_version,
        lifespan=lifespan,
        openapi_tags=[
            {"name": "health", "description": "Liveness, readiness, and version metadata."},
            {"name": "units", "description": "Unit main views, directory listings, and import tabs."},
            {"name": "search", "description": "Package search with pagination."},
        ],
    )

    if config.allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.allowed_origins,
            allow_methods=["GET"],
            allow_headers=["*"],
        )

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()
        status_code = 500

        REQUESTS_IN_PROGRESS.labels(method=request.method).inc()
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            elapsed = time.perf_counter() - started
            route = _route_label(request)
            REQUESTS_IN_PROGRESS.labels(method=request.method).dec()
            REQUESTS_TOTAL.labels(method=request.method, route=route, status_code=str(status_code)).inc()
            REQUEST_DURATION_SECONDS.labels(method=request.method, route=route).observe(elapsed)

        duration_ms = elapsed * 1000.0
        response.headers["x-request-id"] = request_id
        response.headers["x-response-time-ms"] = f"{duration_ms:.2f}"
        _record_request(config, request_id=request_id, request=request, status_code=status_code, duration_ms=duration_ms)
        return response

    @app.get("/metrics", include_in_schema=False)
    def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    register_error_handlers(app)

    app.include_router(health_router)
    app.include_router(units_router, prefix=config.api_version_path)
    app.include_router(search_router, prefix=config.api_version_path)

    return app


app = create_app()
