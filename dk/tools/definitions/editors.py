"""Editors."""

from __future__ import annotations

from dk.tools.descriptor import SmokeTest, ToolDescriptor, VersionProbe
from dk.tools.parsers import regex

VSCODE = ToolDescriptor(
    name="vscode",
    display_name="Visual Studio Code",
    category="editors",
    executables=("code",),
    common_paths=(
        r"%LOCALAPPDATA%\Programs\Microsoft VS Code\bin\code.cmd",
        r"%ProgramFiles%\Microsoft VS Code\bin\code.cmd",
    ),
    packages={"winget": "Microsoft.VisualStudioCode", "choco": "vscode", "scoop": "vscode"},
    tests=(SmokeTest(("{exe}", "--list-extensions"), expect=""),),
    description="Code editor",
)

NEOVIM = ToolDescriptor(
    name="neovim",
    display_name="Neovim",
    category="editors",
    executables=("nvim",),
    version=VersionProbe(parser=regex(r"NVIM v?(\S+)")),
    common_paths=(r"%ProgramFiles%\Neovim\bin\nvim.exe",),
    packages={"winget": "Neovim.Neovim", "choco": "neovim", "scoop": "neovim"},
    tests=(SmokeTest(("{exe}", "--headless", "+qa"), expect=""),),
    description="Terminal editor",
)

TOOLS: tuple[ToolDescriptor, ...] = (VSCODE, NEOVIM)
