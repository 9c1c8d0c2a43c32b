"""Version output parsers.

Each parser takes the raw text a tool printed for its version probe and
returns a version string, or None if it cannot make sense of it. Callers
turn None into UNKNOWN_VERSION; a parse failure is never an error.
"""

from __future__ import annotations

import re
from collections.abc import Callable

__all__ = [
    "UNKNOWN_VERSION",
    "VersionParser",
    "first_line",
    "parser_for_category",
    "regex",
    "semver",
]

UNKNOWN_VERSION = "Unknown"

type VersionParser = Callable[[str], str | None]

_SEMVER_RE = re.compile(r"(?<![\d.])\d+\.\d+(?:\.\d+)*(?:[-+][0-9A-Za-z.]+)?")


def first_line(text: str) -> str | None:
    """Return the first non-empty line, stripped.

    >>> first_line("\\n  git version 2.42.0\\n")
    'git version 2.42.0'
    """
    for line in text.strip().splitlines():
        stripped = line.strip()
        if stripped:
            return stripped
    return None


def semver(text: str) -> str | None:
    """Return the first dotted version number (X.Y, X.Y.Z, X.Y.Z.W...).

    >>> semver("psql (PostgreSQL) 16.1")
    '16.1'
    """
    match = _SEMVER_RE.search(text)
    return match.group(0) if match else None


def regex(pattern: str, *, flags: int = re.IGNORECASE) -> VersionParser:
    """Build a parser from a regex.

    The first capture group is returned if the pattern has one, otherwise
    the whole match.
    """
    compiled = re.compile(pattern, flags)

    def parse(text: str) -> str | None:
        match = compiled.search(text)
        if match is None:
            return None
        value = match.group(1) if compiled.groups else match.group(0)
        return value.strip() or None

    return parse


# GUI apps and servers print banners around their version; CLIs print a
# single useful line.
_CATEGORY_PARSERS: dict[str, VersionParser] = {
    "browsers": semver,
    "databases": semver,
}


def parser_for_category(category: str) -> VersionParser:
    """Return the default parser for a tool category."""
    return _CATEGORY_PARSERS.get(category, first_line)
