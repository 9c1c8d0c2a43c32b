"""Operating system detection.

Only the OS family matters here: it decides executable suffixes and
which environment-variable placeholder style appears in tool paths.
"""

from __future__ import annotations

import sys as _sys
from enum import Enum, auto
from functools import lru_cache

__all__ = [
    "Platform",
    "detect_platform",
    "is_windows",
]


class Platform(Enum):
    """Operating system platform."""

    LINUX = auto()
    MACOS = auto()
    WINDOWS = auto()
    UNKNOWN = auto()

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def is_windows(self) -> bool:
        return self == Platform.WINDOWS

    @property
    def exe_suffix(self) -> str:
        """Get executable file suffix for this platform."""
        return ".exe" if self == Platform.WINDOWS else ""

    def exe_name(self, name: str) -> str:
        """Get executable name with platform-appropriate suffix.

        Names that already carry a suffix are returned unchanged.
        Example: exe_name("git") -> "git.exe" on Windows, "git" elsewhere.
        """
        if not self.exe_suffix or name.lower().endswith(self.exe_suffix):
            return name
        return f"{name}{self.exe_suffix}"


@lru_cache(maxsize=1)
def detect_platform() -> Platform:
    """Detect the current operating system (cached)."""
    # NOTE: avoid platform.system() on Windows; it may query WMI and hang.
    system = _sys.platform.lower()
    if system.startswith("linux"):
        return Platform.LINUX
    if system.startswith("darwin"):
        return Platform.MACOS
    if system.startswith(("win32", "cygwin", "msys")):
        return Platform.WINDOWS
    return Platform.UNKNOWN


def is_windows() -> bool:
    """Check if running on Windows."""
    return detect_platform() == Platform.WINDOWS
