# This file builds the breadcrumb trail shown above a unit page.
# Each parent directory down to the module root becomes a link; the current element is plain text.

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field

from pkgview.api.links import LATEST_VERSION, STDLIB_MODULE_PATH, Link


@dataclass
class Breadcrumb:
    links: list[Link] = field(default_factory=list)
    current: str = ""
    copy_data: str = ""

    def as_dict(self) -> dict[str, object]:
        return {
            "links": [{"href": link.href, "body": link.body} for link in self.links],
            "current": self.current,
            "copy_data": self.copy_data,
        }


def breadcrumb_path(pkg_path: str, mod_path: str, requested_version: str) -> Breadcrumb:
    """Links to each parent of `pkg_path`, stopping at `mod_path` (or the root for stdlib)."""

    if pkg_path == STDLIB_MODULE_PATH:
        return Breadcrumb(current="Standard library")

    min_len = 1 if mod_path == STDLIB_MODULE_PATH else len(mod_path) - 1
    dirs: list[str] = []
    directory = pkg_path
    while len(directory) > min_len and len(posixpath.dirname(directory)) < len(directory):
        dirs.append(directory)
        directory = posixpath.dirname(directory)

    current = dirs[0] if len(dirs) == 1 else posixpath.basename(dirs[0])
    links: list[Link] = []
    # dirs runs from the page itself up to the module root; links run root first.
    for i in range(len(dirs) - 1, 0, -1):
        href = "/" + dirs[i]
        if requested_version != LATEST_VERSION:
            href += "@" + requested_version
        body = dirs[i] if i == len(dirs) - 1 else posixpath.basename(dirs[i])
        links.append(Link(href=href, body=body))
    return Breadcrumb(links=links, current=current, copy_data=pkg_path)


def display_breadcrumb(pkg_path: str, mod_path: str, requested_version: str) -> Breadcrumb:
    """The breadcrumb with site-level links prepended."""

    crumb = breadcrumb_path(pkg_path, mod_path, requested_version)
    prefix_links = [Link(href="/", body="Discover Packages")]
    if mod_path == STDLIB_MODULE_PATH and pkg_path != STDLIB_MODULE_PATH:
        prefix_links.append(Link(href="/std", body="Standard library"))
    crumb.links = prefix_links + crumb.links
    return crumb
