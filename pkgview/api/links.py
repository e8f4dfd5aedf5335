# This file builds the link targets and relative paths shared by unit, directory, and breadcrumb views.
# Paths are slash-separated import paths; versions are either a concrete version or "latest".

from __future__ import annotations

from dataclasses import dataclass

LATEST_VERSION = "latest"
STDLIB_MODULE_PATH = "std"


@dataclass(frozen=True)
class Link:
    href: str
    body: str


def path_suffix(full_path: str, base_path: str) -> str:
    """Return `full_path` with `base_path` and the joining slash removed.

    >>> path_suffix("github.com/a/b/c", "github.com/a/b")
    'c'
    """

    if base_path == "":
        return full_path
    if full_path == base_path:
        return ""
    prefix = base_path + "/"
    if full_path.startswith(prefix):
        return full_path[len(prefix):]
    return full_path


def is_stdlib_path(path: str) -> bool:
    """Standard library import paths have no dot in their first element."""

    return "." not in path.split("/", 1)[0]


def series_path(module_path: str) -> str:
    """Strip a trailing major-version element (`/v2`, `/v3`, ...) from a module path."""

    head, _, tail = module_path.rpartition("/")
    if head and len(tail) > 1 and tail[0] == "v" and tail[1:].isdigit() and int(tail[1:]) >= 2:
        return head
    return module_path


def construct_unit_url(full_path: str, module_path: str, version: str) -> str:
    if version == LATEST_VERSION:
        return "/" + full_path
    if full_path == module_path or module_path == STDLIB_MODULE_PATH:
        return f"/{full_path}@{version}"
    return f"/{module_path}@{version}/{path_suffix(full_path, module_path)}"


def effective_name(path: str, name: str) -> str:
    """Commands are named `main`; show the last path element for them instead."""

    if name != "main":
        return name
    return path.rstrip("/").rsplit("/", 1)[-1]
