# This file shapes the "Directories" section of a unit page.
# Subdirectory packages and nested modules are flattened into entries relative to the unit,
# then grouped into a two-level tree keyed by their first path element.
# The rendering layer uses `is_internal` to hide internal packages by default.

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from typing import Any

from pkgview.api.links import LATEST_VERSION, construct_unit_url, path_suffix, series_path

logger = logging.getLogger(__name__)

INTERNAL_SEGMENT = "internal"


@dataclass(frozen=True)
class DirectoryEntry:
    suffix: str
    url: str
    synopsis: str = ""
    is_module: bool = False
    is_internal: bool = False


@dataclass(frozen=True)
class DirectoryGroup:
    prefix: str
    root: DirectoryEntry | None
    children: tuple[DirectoryEntry, ...]


def is_internal_path(suffix: str) -> bool:
    """Report whether any full path element of `suffix` is `internal`."""

    return (
        suffix == INTERNAL_SEGMENT
        or suffix.startswith(INTERNAL_SEGMENT + "/")
        or suffix.endswith("/" + INTERNAL_SEGMENT)
        or f"/{INTERNAL_SEGMENT}/" in suffix
    )


def build_directory_tree(entries: Iterable[DirectoryEntry]) -> list[DirectoryGroup]:
    """Group entries by the first element of their suffix.

    An entry whose suffix is exactly the prefix (no slash) becomes the group's root; the
    rest become children with `prefix + "/"` removed, in the order supplied.
    If two entries claim the same root, the later one wins.
    """

    roots: dict[str, DirectoryEntry | None] = {}
    children: dict[str, list[DirectoryEntry]] = {}
    for entry in entries:
        prefix, sep, rest = entry.suffix.partition("/")
        if prefix not in roots:
            roots[prefix] = None
            children[prefix] = []

        internal = is_internal_path(entry.suffix)
        if not sep:
            if roots[prefix] is not None:
                logger.warning(
                    "Duplicate root entry for prefix %r: %r replaces %r",
                    prefix,
                    entry.url,
                    roots[prefix].url,
                )
            roots[prefix] = replace(entry, is_internal=internal)
        else:
            children[prefix].append(replace(entry, suffix=rest, is_internal=internal))

    return [
        DirectoryGroup(prefix=prefix, root=roots[prefix], children=tuple(children[prefix]))
        for prefix in sorted(roots)
    ]


def subdirectory_entries(
    *,
    unit_path: str,
    module_path: str,
    version: str,
    packages: Sequence[dict[str, Any]],
) -> list[DirectoryEntry]:
    """Entries for the packages below `unit_path`, sorted by suffix.

    `packages` rows need `path` and `synopsis`. The unit itself is skipped.
    """

    entries = [
        DirectoryEntry(
            suffix=path_suffix(str(row["path"]), unit_path),
            url=construct_unit_url(str(row["path"]), module_path, version),
            synopsis=str(row.get("synopsis") or ""),
        )
        for row in packages
        if row["path"] != unit_path
    ]
    entries.sort(key=lambda entry: entry.suffix)
    return entries


def nested_module_entries(
    *,
    unit_path: str,
    module_path: str,
    modules: Sequence[dict[str, Any]],
) -> list[DirectoryEntry]:
    """Entries for modules nested under `unit_path`, linked at their latest version.

    Other major versions of the unit's own module are not nested modules and are skipped.
    """

    own_series = series_path(module_path)
    entries: list[DirectoryEntry] = []
    for row in modules:
        nested_path = str(row["module_path"])
        nested_series = series_path(nested_path)
        if nested_series == own_series:
            continue
        if not nested_path.startswith(unit_path + "/"):
            continue
        entries.append(
            DirectoryEntry(
                suffix=path_suffix(nested_series, unit_path),
                url=construct_unit_url(nested_path, nested_path, LATEST_VERSION),
                is_module=True,
            )
        )
    return entries


def unit_directory_tree(
    *,
    subdirectories: Sequence[DirectoryEntry],
    nested_modules: Sequence[DirectoryEntry],
) -> list[DirectoryGroup]:
    """Combine packages and nested modules into one tree; entries are ordered by suffix first."""

    combined = sorted([*subdirectories, *nested_modules], key=lambda entry: entry.suffix)
    return build_directory_tree(combined)
