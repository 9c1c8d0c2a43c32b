"""Platform-aware path utilities.

Besides the user-level directories, this module expands the path
patterns used by tool descriptors. Patterns may contain:

- Windows placeholders: %LOCALAPPDATA%\\Programs\\Git\\cmd\\git.exe
- POSIX placeholders: $HOME/.cargo/bin, ${GOROOT}/bin
- A leading ~ for the home directory
- Glob wildcards: C:\\Program Files\\PostgreSQL\\*\\bin
"""

from __future__ import annotations

import glob
import os
import re
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path

from .detection import is_windows

__all__ = [
    "expand_path_pattern",
    "expand_placeholders",
    "home",
    "user_config_dir",
]

APP_NAME = "dk"

_PLACEHOLDER_RE = re.compile(
    r"%(?P<win>[A-Za-z_][A-Za-z0-9_()]*)%"
    r"|\$\{(?P<braced>[A-Za-z_][A-Za-z0-9_]*)\}"
    r"|\$(?P<bare>[A-Za-z_][A-Za-z0-9_]*)"
)

_GLOB_CHARS = frozenset("*?[")


@lru_cache(maxsize=1)
def home() -> Path:
    """Get user's home directory.

    Uses USERPROFILE on Windows, HOME on Unix, then Path.home().
    """
    if is_windows():
        userprofile = os.environ.get("USERPROFILE")
        if userprofile:
            return Path(userprofile)
    else:
        home_env = os.environ.get("HOME")
        if home_env:
            return Path(home_env)

    return Path.home()


@lru_cache(maxsize=1)
def user_config_dir() -> Path:
    """Get the user-level configuration directory.

    Location: ~/.config/dk/ (Linux/macOS) or %APPDATA%\\dk\\ (Windows)
    """
    if is_windows():
        app_data = os.environ.get("APPDATA")
        if app_data:
            return Path(app_data) / APP_NAME
        return home() / "AppData" / "Roaming" / APP_NAME

    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / APP_NAME
    return home() / ".config" / APP_NAME


def clear_caches() -> None:
    """Clear all cached paths.

    Useful for testing when environment variables change.
    """
    home.cache_clear()
    user_config_dir.cache_clear()


def _lookup(env: Mapping[str, str], name: str) -> str | None:
    value = env.get(name)
    if value is not None:
        return value
    # Windows variable names are case-insensitive.
    lowered = name.lower()
    for key, candidate in env.items():
        if key.lower() == lowered:
            return candidate
    return None


def expand_placeholders(pattern: str, env: Mapping[str, str] | None = None) -> str | None:
    """Substitute environment placeholders and a leading ~.

    Returns None if any referenced variable is unset or empty, so a
    pattern like %ProgramFiles(x86)%\\... never degrades to a relative path.
    """
    environ: Mapping[str, str] = os.environ if env is None else env
    missing = False

    def replace(match: re.Match[str]) -> str:
        nonlocal missing
        name = match.group("win") or match.group("braced") or match.group("bare")
        value = _lookup(environ, name)
        if not value:
            missing = True
            return ""
        return value

    expanded = _PLACEHOLDER_RE.sub(replace, pattern)
    if missing:
        return None

    if expanded == "~" or expanded.startswith(("~/", "~\\")):
        expanded = str(home()) + expanded[1:]
    return expanded


def _natural_key(path: str) -> list[tuple[int, int | str]]:
    """Sort key treating digit runs as numbers ("10" sorts after "9")."""
    parts = re.split(r"(\d+)", path.lower())
    return [(0, int(p)) if p.isdigit() else (1, p) for p in parts if p]


def expand_path_pattern(pattern: str, env: Mapping[str, str] | None = None) -> list[Path]:
    """Expand a path pattern into the existing paths it names.

    Wildcard matches come back in descending natural order, so the
    highest-versioned directory is first.

    Returns:
        Existing paths; empty if nothing matches or a variable is unset.
    """
    expanded = expand_placeholders(pattern, env)
    if expanded is None:
        return []

    if _GLOB_CHARS.isdisjoint(expanded):
        path = Path(expanded)
        return [path] if path.exists() else []

    matches = glob.glob(expanded)
    matches.sort(key=_natural_key, reverse=True)
    return [Path(m) for m in matches]
