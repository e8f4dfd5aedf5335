# This file wraps view models in the response envelope handed to the rendering layer.
# Every envelope carries the API version label, schema version, request id, and generation time.

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from starlette.requests import Request

from pkgview.api.api_config import ApiConfig
from pkgview.api.pagination import PaginationState


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def api_version_label(api_version_path: str) -> str:
    """`/api/v1` -> `v1`."""

    label = api_version_path.rstrip("/").rpartition("/")[2]
    if not label:
        raise ValueError(f"Invalid api_version_path: {api_version_path!r}")
    return label


def request_id_of(request: Request) -> str:
    return str(getattr(request.state, "request_id", "unknown"))


def envelope_header(config: ApiConfig, request: Request) -> dict[str, Any]:
    """Version and trace fields shared by every response, including health checks."""

    return {
        "api_version": api_version_label(config.api_version_path),
        "schema_version": config.schema_version,
        "request_id": request_id_of(request),
    }


def pagination_payload(state: PaginationState) -> dict[str, Any]:
    """Pagination view model plus ready-made links to the neighbouring pages."""

    payload = state.as_dict()
    payload["previous_url"] = state.page_url(state.previous_page) if state.previous_page else None
    payload["next_url"] = state.page_url(state.next_page) if state.next_page else None
    return payload


def object_envelope(
    config: ApiConfig,
    request: Request,
    data: dict[str, Any] | list[dict[str, Any]] | None,
    *,
    warnings: list[str] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Wrap `data`; `extra` adds page-specific top-level fields such as the search query."""

    return {
        **envelope_header(config, request),
        "generated_at": utc_now(),
        "data": data,
        "warnings": warnings,
        **extra,
    }


def list_envelope(
    config: ApiConfig,
    request: Request,
    data: list[dict[str, Any]],
    pagination: PaginationState | None,
    **extra: Any,
) -> dict[str, Any]:
    payload = pagination_payload(pagination) if pagination is not None else None
    return object_envelope(config, request, data, pagination=payload, **extra)
