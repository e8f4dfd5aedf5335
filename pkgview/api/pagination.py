# This file handles pagination arithmetic for list pages such as search results and importer lists.
# Every route uses the same rules for offsets, neighbouring pages, and the window of page links.
# Request values are normalized here; contract violations raise InvalidArgumentError.

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from pkgview.api.errors import InvalidArgumentError

DEFAULT_PAGE = 1
DEFAULT_PAGES_TO_LINK = 7


@dataclass(frozen=True)
class PaginationParams:
    page: int
    limit: int
    base_url: str = ""

    @property
    def offset(self) -> int:
        return page_offset(self.page, self.limit)


@dataclass(frozen=True)
class PaginationState:
    """Everything a list page needs to render its navigation links."""

    base_url: str
    page: int
    per_page: int
    total_count: int
    result_count: int
    page_count: int
    offset: int
    previous_page: int
    next_page: int
    pages: tuple[int, ...] = ()
    approximate: bool = False

    def page_url(self, page: int) -> str:
        return page_url(self.base_url, page)

    def as_dict(self) -> dict[str, object]:
        return {
            "page": self.page,
            "per_page": self.per_page,
            "total_count": self.total_count,
            "result_count": self.result_count,
            "page_count": self.page_count,
            "offset": self.offset,
            "previous_page": self.previous_page,
            "next_page": self.next_page,
            "pages": list(self.pages),
            "approximate": self.approximate,
        }


def normalize_pagination_params(
    *,
    page: int | None,
    limit: int | None,
    default_limit: int,
    max_limit: int | None = None,
    base_url: str = "",
) -> PaginationParams:
    """Resolve request values; missing or non-positive values fall back to defaults.

    Without `max_limit` the caller checks the resolved limit itself.
    """

    resolved_page = page if page is not None and page >= 1 else DEFAULT_PAGE
    resolved_limit = limit if limit is not None and limit >= 1 else default_limit
    if max_limit is not None and resolved_limit > max_limit:
        raise InvalidArgumentError(f"limit must be <= {max_limit}")
    return PaginationParams(page=resolved_page, limit=resolved_limit, base_url=base_url)


def num_pages(*, total_count: int, page_size: int) -> int:
    """Number of pages needed to show `total_count` results."""

    if total_count <= 0:
        return 0
    return (total_count + page_size - 1) // page_size


def page_offset(page: int, page_size: int) -> int:
    if page <= 1:
        return 0
    return (page - 1) * page_size


def previous_page(page: int) -> int:
    if page <= 1:
        return 0
    return page - 1


def next_page(page: int, total_pages: int) -> int:
    if page >= total_pages:
        return 0
    return page + 1


def pages_to_link(page: int, total_pages: int, link_count: int) -> list[int]:
    """Return up to `link_count` ascending page numbers with `page` as centered as possible.

    The window is pulled left near the end of the range and clamped to start at 1.
    """

    start = page - link_count // 2
    if total_pages - start < link_count:
        start = total_pages - link_count + 1
    if start < 1:
        start = 1
    end = min(start + link_count - 1, total_pages)
    return list(range(start, end + 1))


def compute_pagination(
    *,
    page: int,
    page_size: int,
    total_count: int,
    result_count: int,
    link_count: int = DEFAULT_PAGES_TO_LINK,
    base_url: str = "",
    approximate: bool = False,
) -> PaginationState:
    """Build the pagination view model for one page of results."""

    if page_size < 1:
        raise InvalidArgumentError(f"page_size must be >= 1, got {page_size}")
    if link_count < 1:
        raise InvalidArgumentError(f"link_count must be >= 1, got {link_count}")
    if total_count < 0:
        raise InvalidArgumentError(f"total_count must be >= 0, got {total_count}")
    if result_count < 0:
        raise InvalidArgumentError(f"result_count must be >= 0, got {result_count}")

    if page < 1:
        page = DEFAULT_PAGE
    total_pages = num_pages(total_count=total_count, page_size=page_size)
    return PaginationState(
        base_url=base_url,
        page=page,
        per_page=page_size,
        total_count=total_count,
        result_count=result_count,
        page_count=total_pages,
        offset=page_offset(page, page_size),
        previous_page=previous_page(page),
        next_page=next_page(page, total_pages),
        pages=tuple(pages_to_link(page, total_pages, link_count)),
        approximate=approximate,
    )


def page_url(base_url: str, page: int) -> str:
    """Return `base_url` with its `page` query parameter set to `page`."""

    parts = urlsplit(base_url)
    query = [(key, value) for key, value in parse_qsl(parts.query, keep_blank_values=True) if key != "page"]
    query.append(("page", str(page)))
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))
