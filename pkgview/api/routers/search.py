# This file defines the search endpoint.
# Query and paging limits are enforced before the data source is touched, exact package paths are
# answered with a redirect target, and estimated result counts are rounded before display.

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from pkgview.api.api_config import ApiConfig
from pkgview.api.counts import approximate_number
from pkgview.api.dependencies import get_config, get_search_service
from pkgview.api.errors import InvalidArgumentError
from pkgview.api.pagination import compute_pagination, normalize_pagination_params
from pkgview.api.response_envelope import list_envelope
from pkgview.api.schemas.search_schemas import SearchResponseV1
from pkgview.api.services.search_service import SearchService

router = APIRouter(tags=["search"])
SearchServiceDep = Annotated[SearchService, Depends(get_search_service)]
ConfigDep = Annotated[ApiConfig, Depends(get_config)]


def _relative_url(request: Request) -> str:
    if request.url.query:
        return f"{request.url.path}?{request.url.query}"
    return request.url.path


@router.get("/search", response_model=SearchResponseV1)
def search(
    request: Request,
    config: ConfigDep,
    service: SearchServiceDep,
    q: Annotated[str, Query()] = "",
    page: Annotated[int | None, Query()] = None,
    limit: Annotated[int | None, Query()] = None,
) -> dict[str, object]:
    query = q.strip()
    if len(query) > config.max_search_query_length:
        raise InvalidArgumentError("Search query too long.")
    if query == "":
        return list_envelope(config, request, [], None, query=query, redirect_to="/")

    params = normalize_pagination_params(
        page=page,
        limit=limit,
        default_limit=config.default_search_limit,
        base_url=_relative_url(request),
    )
    # Offset first: a request over both limits reports the page number.
    if params.offset > config.max_search_offset:
        raise InvalidArgumentError("Search page number too large.")
    if params.limit > config.max_search_page_size:
        raise InvalidArgumentError("Search page size too large.")

    redirect_to = service.redirect_path(query)
    if redirect_to:
        return list_envelope(config, request, [], None, query=query, redirect_to=redirect_to)

    result = service.search(query=query, limit=params.limit, offset=params.offset)
    rows = list(result["rows"])
    approximate = bool(result["approximate"])
    total_count = int(result["total_count"])
    if approximate:
        total_count = approximate_number(total_count, config.search_count_sigma)

    pagination = compute_pagination(
        page=params.page,
        page_size=params.limit,
        total_count=total_count,
        result_count=len(rows),
        link_count=config.pages_to_link,
        base_url=params.base_url,
        approximate=approximate,
    )
    return list_envelope(config, request, rows, pagination, query=query, redirect_to=None)
