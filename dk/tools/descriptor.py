"""Static tool metadata.

A ToolDescriptor says how to find a tool (binary names, well-known
install paths), how to read its version, which package id each backend
knows it by, and how to smoke-test it. Descriptors are plain data built
at import time; see dk/tools/definitions/.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from dk.tools.parsers import VersionParser

__all__ = [
    "EXE_PLACEHOLDER",
    "SmokeTest",
    "ToolDescriptor",
    "VersionProbe",
]

# Replaced by the resolved executable path in smoke test commands.
EXE_PLACEHOLDER = "{exe}"
# "{bin:cargo}" names another binary shipped beside the executable.
_SIBLING_RE = re.compile(r"^\{bin:([A-Za-z0-9_.-]+)\}$")

_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9-]*$")


@dataclass(frozen=True, slots=True)
class VersionProbe:
    """Arguments that make a tool print its version.

    Attributes:
        args: Arguments passed to the resolved executable
        parser: Output parser; None uses the tool category's default
    """

    args: tuple[str, ...] = ("--version",)
    parser: VersionParser | None = None


@dataclass(frozen=True, slots=True)
class SmokeTest:
    """A functional check: run a command, look for a pattern.

    Attributes:
        command: Command and arguments; may contain {exe} and {bin:NAME}
        expect: Regex searched (case-insensitive) in stdout+stderr.
            Empty means exit code 0 is enough.
    """

    command: tuple[str, ...]
    expect: str = ""

    def __post_init__(self) -> None:
        if not self.command:
            raise ValueError("Smoke test command cannot be empty")
        if self.expect:
            re.compile(self.expect)

    def argv(self, exe: str, sibling: Callable[[str], str] | None = None) -> list[str]:
        """Return the command with {exe} and {bin:NAME} substituted.

        sibling maps a binary name to the path to run; without it the bare
        name is left to PATH lookup.
        """
        argv: list[str] = []
        for part in self.command:
            match = _SIBLING_RE.match(part)
            if match is None:
                argv.append(part.replace(EXE_PLACEHOLDER, exe))
            elif sibling is None:
                argv.append(match.group(1))
            else:
                argv.append(sibling(match.group(1)))
        return argv

    @property
    def display(self) -> str:
        return " ".join(_SIBLING_RE.sub(r"\1", part) for part in self.command)


def _empty_packages() -> Mapping[str, str]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class ToolDescriptor:
    """Immutable description of one installable tool.

    Attributes:
        name: Unique registry key (e.g. "git", "nodejs")
        display_name: Human-readable name (e.g. "Git", "Node.js")
        category: Listing category (e.g. "vcs", "languages")
        executables: Binary names to look for on PATH, in priority order
        version: Version probe, or None if the tool has no usable one
        common_paths: Install locations checked when PATH lookup fails
        packages: Backend name -> package id; "manual" holds an installer
            command line
        tests: Smoke tests run by the test action
        companions: Tools provisioned after this one installs
        description: One-line summary
    """

    name: str
    display_name: str
    category: str
    executables: tuple[str, ...]
    version: VersionProbe | None = VersionProbe()
    common_paths: tuple[str, ...] = ()
    packages: Mapping[str, str] = field(default_factory=_empty_packages)
    tests: tuple[SmokeTest, ...] = ()
    companions: tuple[str, ...] = ()
    description: str = ""

    def __post_init__(self) -> None:
        if not _NAME_RE.match(self.name):
            raise ValueError(f"Tool name must be lowercase letters, digits and '-': {self.name!r}")
        if not self.display_name:
            raise ValueError(f"Tool {self.name!r} needs a display name")
        if not self.executables or not all(self.executables):
            raise ValueError(f"Tool {self.name!r} needs at least one executable name")
        if self.name in self.companions:
            raise ValueError(f"Tool {self.name!r} cannot be its own companion")
        # Freeze the mapping so a shared dict literal cannot be mutated later.
        object.__setattr__(self, "packages", MappingProxyType(dict(self.packages)))

    def package_id(self, backend: str) -> str | None:
        """Get the package id for a backend, or None if it has none."""
        value = self.packages.get(backend)
        return value or None

    @property
    def primary_executable(self) -> str:
        return self.executables[0]
