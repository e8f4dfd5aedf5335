# This file tests the page services against a scripted fake database.
# It exists to check row shaping, importer limits, count estimation, and not-found handling
# without a running Postgres instance.

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import pytest

from pkgview.api.errors import InvalidArgumentError, NotFoundError, NotSupportedError
from pkgview.api.services.imports_service import ImportsService
from pkgview.api.services.search_service import SearchService, like_contains
from pkgview.api.services.unit_lookup import like_prefix
from pkgview.api.services.unit_service import UnitService
from tests.api.support import FakeDBClient, build_test_config

RESOLVE_UNIT = "ORDER BY LENGTH(u.module_path) DESC"
RESOLVE_MODULE = "SELECT m.module_path, m.version, m.commit_time"
PACKAGES = "u.is_package = TRUE"
NESTED_MODULES = "SELECT DISTINCT m.module_path"
IMPORTER_COUNT = "importer_count"
SEARCH_IMPORTED_BY = "SELECT sd.num_imported_by"

UNIT_ROW = {
    "path": "example.com/http",
    "module_path": "example.com",
    "version": "v1.2.0",
    "name": "http",
    "synopsis": "HTTP helpers.",
    "is_package": True,
    "is_redistributable": True,
    "num_imports": 6,
    "commit_time": datetime(2023, 1, 2, 15, 30, tzinfo=UTC),
}


def _unit_service(handlers: list[tuple[str, Any]]) -> tuple[UnitService, FakeDBClient]:
    db = FakeDBClient(handlers=handlers)
    return UnitService(config=build_test_config(), db=db), db


def test_like_patterns_escape_wildcards() -> None:
    assert like_prefix("example.com/a_b") == "example.com/a\\_b/%"
    assert like_contains("100%") == "%100\\%%"


def test_main_details_builds_directory_tree_and_counts() -> None:
    service, db = _unit_service(
        [
            (RESOLVE_UNIT, UNIT_ROW),
            (
                PACKAGES,
                [
                    {"path": "example.com/http", "name": "http", "synopsis": "HTTP helpers."},
                    {"path": "example.com/http/client", "name": "client", "synopsis": "Clients."},
                    {"path": "example.com/http/internal/wire", "name": "wire", "synopsis": ""},
                ],
            ),
            (NESTED_MODULES, [{"module_path": "example.com/http/tools"}]),
            (IMPORTER_COUNT, 2),
        ]
    )

    details = service.get_main_details(path="example.com/http", version="latest")

    assert details["unit"]["name"] == "http"
    assert details["unit"]["commit_time_display"] == "Jan 2, 2023"
    assert details["num_imports"] == 6
    assert details["imported_by_count"] == "2"
    assert details["breadcrumb"]["current"] == "http"
    assert [group["prefix"] for group in details["directories"]] == ["client", "internal", "tools"]
    client_group, internal_group, tools_group = details["directories"]
    assert client_group["root"]["url"] == "/example.com/http/client"
    assert internal_group["root"] is None
    assert internal_group["children"][0]["suffix"] == "wire"
    assert internal_group["children"][0]["is_internal"] is True
    assert tools_group["root"]["is_module"] is True

    packages_params = next(params for query, params in db.calls if PACKAGES in query)
    assert packages_params["path_prefix"] == "example.com/http/%"
    assert packages_params["version"] == "v1.2.0"


def test_main_details_links_use_requested_concrete_version() -> None:
    service, _ = _unit_service(
        [
            (RESOLVE_UNIT, UNIT_ROW),
            (PACKAGES, [{"path": "example.com/http/client", "name": "client", "synopsis": ""}]),
            (NESTED_MODULES, []),
            (IMPORTER_COUNT, 0),
        ]
    )

    details = service.get_main_details(path="example.com/http", version="v1.2.0")

    assert details["directories"][0]["root"]["url"] == "/example.com@v1.2.0/http/client"


def test_main_details_missing_unit_raises_not_found() -> None:
    service, _ = _unit_service([(RESOLVE_UNIT, None)])

    with pytest.raises(NotFoundError):
        service.get_main_details(path="example.com/missing", version="latest")


def test_imported_by_count_at_limit_uses_search_document() -> None:
    service, _ = _unit_service([(IMPORTER_COUNT, 3), (SEARCH_IMPORTED_BY, 2593)])

    assert service.get_imported_by_count(path="example.com/http", module_path="example.com") == "2000+"


def test_imported_by_count_missing_search_document_is_blank() -> None:
    service, _ = _unit_service([(IMPORTER_COUNT, 3), (SEARCH_IMPORTED_BY, None)])

    assert service.get_imported_by_count(path="example.com/http", module_path="example.com") == ""


def test_imported_by_count_without_support_is_not_available() -> None:
    service, db = _unit_service([])
    db.supports_imported_by = False

    assert service.get_imported_by_count(path="example.com/http", module_path="example.com") == "N/A"
    assert db.calls == []


def _directory_service() -> UnitService:
    service, _ = _unit_service(
        [
            (RESOLVE_MODULE, {"module_path": "example.com", "version": "v1.2.0", "commit_time": None}),
            (
                PACKAGES,
                [
                    {"path": "example.com", "name": "example", "synopsis": ""},
                    {"path": "example.com/http", "name": "http", "synopsis": "HTTP helpers."},
                    {"path": "example.com/cmd/tool", "name": "main", "synopsis": None},
                ],
            ),
        ]
    )
    return service


def test_directory_includes_module_root_when_requested() -> None:
    directory = _directory_service().get_directory(path="example.com", version="v1.2.0", include_dir_path=True)

    assert directory["url"] == "/example.com@v1.2.0"
    assert [package["path"] for package in directory["packages"]] == [
        "example.com",
        "example.com/cmd/tool",
        "example.com/http",
    ]
    root, command, http = directory["packages"]
    assert root["path_after_directory"] == "example (root)"
    assert command["name"] == "tool"
    assert command["synopsis"] == ""
    assert command["url"] == "/example.com@v1.2.0/cmd/tool"
    assert http["path_after_directory"] == "http"


def test_directory_skips_own_path_by_default() -> None:
    directory = _directory_service().get_directory(path="example.com", version="latest")

    assert [package["path"] for package in directory["packages"]] == ["example.com/cmd/tool", "example.com/http"]
    assert directory["packages"][1]["url"] == "/example.com/http"


def test_directory_include_dir_path_requires_module_path() -> None:
    with pytest.raises(InvalidArgumentError):
        _directory_service().get_directory(path="example.com/http", version="latest", include_dir_path=True)


def test_module_without_packages_lists_nothing() -> None:
    service, db = _unit_service(
        [
            (RESOLVE_MODULE, {"module_path": "example.com/empty", "version": "v0.1.0", "commit_time": None}),
            (PACKAGES, []),
        ]
    )

    directory = service.get_directory(path="example.com/empty", version="latest", include_dir_path=True)

    assert directory["packages"] == []
    assert directory["module_path"] == "example.com/empty"
    assert directory["url"] == "/example.com/empty"
    assert not any(RESOLVE_UNIT in query for query, _ in db.calls)


def test_known_directory_without_packages_lists_nothing() -> None:
    service, _ = _unit_service(
        [
            (RESOLVE_MODULE, {"module_path": "example.com", "version": "v1.2.0", "commit_time": None}),
            (PACKAGES, []),
            (RESOLVE_UNIT, {**UNIT_ROW, "path": "example.com/docs", "is_package": False}),
        ]
    )

    directory = service.get_directory(path="example.com/docs", version="latest")

    assert directory["packages"] == []


def test_unknown_directory_is_not_found() -> None:
    service, _ = _unit_service(
        [
            (RESOLVE_MODULE, {"module_path": "example.com", "version": "v1.2.0", "commit_time": None}),
            (PACKAGES, []),
            (RESOLVE_UNIT, None),
        ]
    )

    with pytest.raises(NotFoundError):
        service.get_directory(path="example.com/missing", version="latest")


def test_imports_are_split_by_origin() -> None:
    db = FakeDBClient(
        handlers=[
            (RESOLVE_UNIT, UNIT_ROW),
            (
                "SELECT DISTINCT i.to_path",
                [
                    {"to_path": "example.com/util"},
                    {"to_path": "example.community/x"},
                    {"to_path": "fmt"},
                    {"to_path": "github.com/pkg/errors"},
                    {"to_path": "net/http"},
                ],
            ),
        ]
    )

    imports = ImportsService(config=build_test_config(), db=db).get_imports(path="example.com/http", version="latest")

    assert imports["std_lib"] == ["fmt", "net/http"]
    assert imports["internal_imports"] == ["example.com/util"]
    assert imports["external_imports"] == ["example.community/x", "github.com/pkg/errors"]


def test_imported_by_truncates_at_limit_and_groups_sections() -> None:
    db = FakeDBClient(
        handlers=[
            (RESOLVE_UNIT, UNIT_ROW),
            (
                "ORDER BY i.from_path",
                [
                    {"from_path": "github.com/a/x"},
                    {"from_path": "github.com/a/y"},
                    {"from_path": "k8s.io/b"},
                    {"from_path": "k8s.io/c"},
                ],
            ),
            (SEARCH_IMPORTED_BY, 10),
        ]
    )

    result = ImportsService(config=build_test_config(), db=db).get_imported_by(path="example.com/http", version="latest")

    assert result["total"] == 4
    assert result["num_imported_by_display"] == "10 (displaying 3 packages)"
    assert [section["prefix"] for section in result["imported_by"]] == ["github.com/a/", "k8s.io/b"]
    assert result["imported_by"][0]["num_lines"] == 2


def test_imported_by_without_support_raises_not_supported() -> None:
    db = FakeDBClient()
    db.supports_imported_by = False

    with pytest.raises(NotSupportedError) as exc_info:
        ImportsService(config=build_test_config(), db=db).get_imported_by(path="example.com/http", version="latest")

    assert exc_info.value.status_code == 501
    assert exc_info.value.error_code == "NOT_SUPPORTED"


SEARCH_ROWS = [
    {
        "package_path": "example.com/cmd/tool",
        "module_path": "example.com",
        "version": "v1.0.0",
        "name": "main",
        "synopsis": None,
        "num_imported_by": 3,
        "commit_time": datetime(2023, 1, 2, tzinfo=UTC),
    },
    {
        "package_path": "net/http",
        "module_path": "std",
        "version": "go1.22.0",
        "name": "http",
        "synopsis": "Package http provides HTTP client and server implementations.",
        "num_imported_by": 90000,
        "commit_time": None,
    },
]


def test_search_with_exact_count() -> None:
    db = FakeDBClient(handlers=[("TABLESAMPLE", 0), ("LIMIT :limit OFFSET :offset", SEARCH_ROWS), ("total_count", 2)])

    result = SearchService(config=build_test_config(), db=db).search(query="http", limit=10, offset=0)

    assert result["total_count"] == 2
    assert result["approximate"] is False
    command, stdlib = result["rows"]
    assert command["name"] == "tool"
    assert command["chip_text"] == "command"
    assert command["synopsis"] == ""
    assert command["commit_time_display"] == "Jan 2, 2023"
    assert stdlib["chip_text"] == "standard library"
    assert stdlib["display_version"] == "go1.22.0"
    assert stdlib["commit_time_display"] == ""
    assert not any("TABLESAMPLE" in query for query, _ in db.calls)


def test_search_estimates_count_beyond_exact_limit() -> None:
    db = FakeDBClient(handlers=[("TABLESAMPLE", 25), ("LIMIT :limit OFFSET :offset", []), ("total_count", 1000)])

    result = SearchService(config=build_test_config(), db=db).search(query="http", limit=10, offset=0)

    assert result["approximate"] is True
    assert result["total_count"] == 2500


def test_search_estimate_never_drops_below_exact_limit() -> None:
    db = FakeDBClient(handlers=[("TABLESAMPLE", 1), ("LIMIT :limit OFFSET :offset", []), ("total_count", 1000)])

    result = SearchService(config=build_test_config(), db=db).search(query="http", limit=10, offset=0)

    assert result["total_count"] == 1000


def _redirect_service() -> SearchService:
    def resolve(params: dict[str, Any]) -> dict[str, Any] | None:
        return UNIT_ROW if params["path"] == "example.com/http" else None

    return SearchService(config=build_test_config(), db=FakeDBClient(handlers=[(RESOLVE_UNIT, resolve)]))


@pytest.mark.parametrize(
    ("query", "expected"),
    [
        ("example.com/http", "/example.com/http"),
        ("https://example.com/http/", "/example.com/http"),
        ("example.com/missing", ""),
        ("errors", ""),
    ],
)
def test_redirect_path(query: str, expected: str) -> None:
    assert _redirect_service().redirect_path(query) == expected
