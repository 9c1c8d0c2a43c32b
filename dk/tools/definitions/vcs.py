"""Version control."""

from __future__ import annotations

from dk.tools.descriptor import SmokeTest, ToolDescriptor, VersionProbe
from dk.tools.parsers import regex

GIT = ToolDescriptor(
    name="git",
    display_name="Git",
    category="vcs",
    executables=("git",),
    common_paths=(
        r"%ProgramFiles%\Git\cmd\git.exe",
        r"%LOCALAPPDATA%\Programs\Git\cmd\git.exe",
    ),
    packages={"winget": "Git.Git", "choco": "git", "scoop": "git"},
    tests=(
        SmokeTest(("{exe}", "--version"), expect=r"git version"),
        SmokeTest(("{exe}", "config", "--list", "--show-origin"), expect=""),
    ),
    description="Distributed version control",
)

GH = ToolDescriptor(
    name="gh",
    display_name="GitHub CLI",
    category="vcs",
    executables=("gh",),
    version=VersionProbe(parser=regex(r"gh version (\S+)")),
    common_paths=(r"%ProgramFiles%\GitHub CLI\gh.exe",),
    packages={"winget": "GitHub.cli", "choco": "gh", "scoop": "gh"},
    tests=(SmokeTest(("{exe}", "--help"), expect=r"USAGE"),),
    description="GitHub on the command line",
)

TOOLS: tuple[ToolDescriptor, ...] = (GIT, GH)
