"""Bundled tool definitions.

Every descriptor lives in the module for its category; ALL_TOOLS is the
registration order used by listings and `--all`. GROUPS names static
subsets usable as a single CLI target.

Usage:
    from dk.tools.definitions import ALL_TOOLS, GROUPS

    for tool in ALL_TOOLS:
        print(f"{tool.name}: {tool.display_name}")
"""

from __future__ import annotations

from dk.tools.definitions import (
    browsers,
    containers,
    databases,
    editors,
    languages,
    package_managers,
    vcs,
)
from dk.tools.descriptor import ToolDescriptor

__all__ = ["ALL_TOOLS", "GROUPS"]


ALL_TOOLS: tuple[ToolDescriptor, ...] = (
    *package_managers.TOOLS,
    *vcs.TOOLS,
    *languages.TOOLS,
    *containers.TOOLS,
    *databases.TOOLS,
    *browsers.TOOLS,
    *editors.TOOLS,
)

GROUPS: dict[str, tuple[str, ...]] = {
    "package-managers": ("winget", "choco", "scoop"),
    "dev-tools": ("git", "gh", "vscode", "docker", "python", "nodejs", "go", "rust"),
    "languages": ("go", "rust", "python", "nodejs", "java", "dotnet"),
    "vcs": ("git", "gh"),
    "containers": ("docker", "wsl", "ubuntu", "kubectl"),
    "databases": ("postgresql", "mysql", "sqlite", "mongosh"),
    "browsers": ("chrome", "firefox", "edge"),
    "editors": ("vscode", "neovim"),
}
