# This file groups the importers of a package into a tree of sections by shared path prefix.
# The imported-by tab shows accounts (e.g. a GitHub org) and then repositories, each
# collapsible, instead of one flat list of thousands of import paths.

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

PrefixFunc = Callable[[str, str], str]

# Hosts whose second path element names the account that owns the rest of the path.
_SECOND_ELEMENT_ACCOUNT_HOSTS = frozenset({"github.com", "bitbucket.org", "launchpad.net", "golang.org"})
_THIRD_ELEMENT_ACCOUNT_HOSTS = frozenset({"hub.jazz.net"})


@dataclass
class Section:
    """A collection of lines with a common prefix.

    If `subs` is empty the section is a single line and `prefix` is that line.
    """

    prefix: str
    subs: list[Section] = field(default_factory=list)
    num_lines: int = 0

    def add(self, sub: Section) -> None:
        self.subs.append(sub)
        if sub.subs:
            self.num_lines += sub.num_lines
        else:
            self.num_lines += 1

    def as_dict(self) -> dict[str, object]:
        return {
            "prefix": self.prefix,
            "num_lines": self.num_lines,
            "subs": [sub.as_dict() for sub in self.subs],
        }


def build_sections(lines: Sequence[str], next_prefix: PrefixFunc) -> list[Section]:
    """Turn sorted lines into sections of contiguous lines sharing a prefix."""

    top, _ = _section("", list(lines), 0, next_prefix)
    return top.subs


def _section(prefix: str, lines: list[str], pos: int, next_prefix: PrefixFunc) -> tuple[Section, int]:
    section = Section(prefix=prefix)
    while pos < len(lines):
        line = lines[pos]
        if not line.startswith(prefix):
            break
        following = next_prefix(line, prefix)
        if following == "":
            sub = Section(prefix=line)
            pos += 1
        else:
            sub, pos = _section(following, lines, pos, next_prefix)
        section.add(sub)
    # Collapse a single-child section, except at top level.
    if len(section.subs) == 1 and prefix != "":
        section = section.subs[0]
    return section, pos


def account_prefix(parts: Sequence[str]) -> tuple[str, list[str]]:
    """Guess the prefix of a split path that identifies the owning account."""

    if parts[0] in _SECOND_ELEMENT_ACCOUNT_HOSTS:
        n = 1
    elif parts[0] in _THIRD_ELEMENT_ACCOUNT_HOSTS:
        n = 2
    else:
        n = 0
    if n >= len(parts) - 1:
        return "/".join(parts), list(parts)
    return "/".join(parts[: n + 1]) + "/", list(parts[: n + 1])


def next_prefix_account(path: str, previous: str) -> str:
    """Return the account prefix of `path`, then the repository prefix, then nothing.

    For "github.com/google/go-cmp/cmp" that is "github.com/google/" followed by
    "github.com/google/go-cmp/".
    """

    if path == previous:
        return ""
    parts = path.split("/")
    first, account_parts = account_prefix(parts)
    if previous == "":
        return first
    if previous == first:
        second = "/".join(parts[: len(account_parts) + 1])
        if second != path:
            second += "/"
        return second
    return ""
