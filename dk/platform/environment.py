"""Read-only access to the persisted PATH.

Installers on Windows append to the PATH stored in the registry, but a
running process keeps the PATH it was started with. Reading the persisted
values lets detection see a freshly installed tool without touching the
environment of this process or anyone else's.
"""

from __future__ import annotations

import os

from .detection import is_windows

__all__ = ["persisted_path_entries"]

_USER_KEY = r"Environment"
_MACHINE_KEY = r"SYSTEM\CurrentControlSet\Control\Session Manager\Environment"


def _read_path_value(hive: int, subkey: str) -> str:
    import winreg

    try:
        with winreg.OpenKey(hive, subkey) as key:
            value, kind = winreg.QueryValueEx(key, "Path")
    except OSError:
        return ""
    if not isinstance(value, str):
        return ""
    if kind == winreg.REG_EXPAND_SZ:
        return winreg.ExpandEnvironmentStrings(value)
    return value


def persisted_path_entries() -> list[str]:
    """Return machine then user PATH entries from the registry.

    Entries already on the current PATH are left out. Always empty on
    non-Windows hosts.
    """
    if not is_windows():
        return []

    import winreg

    raw = ";".join(
        (
            _read_path_value(winreg.HKEY_LOCAL_MACHINE, _MACHINE_KEY),
            _read_path_value(winreg.HKEY_CURRENT_USER, _USER_KEY),
        )
    )
    current = {
        os.path.normcase(p.rstrip("\\/")) for p in os.environ.get("PATH", "").split(os.pathsep)
    }

    out: list[str] = []
    for entry in raw.split(";"):
        entry = entry.strip()
        if not entry:
            continue
        key = os.path.normcase(entry.rstrip("\\/"))
        if key in current:
            continue
        current.add(key)
        out.append(entry)
    return out
