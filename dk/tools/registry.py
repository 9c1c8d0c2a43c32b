"""Tool registry - lookup of tool descriptors and groups.

The registry is built once from static definitions and is read-only
afterwards. Names are matched case-insensitively.

Usage:
    registry = Registry.default()
    git = registry.get("git")
    for tool in registry.group("dev-tools"):
        print(tool.name)
"""

from __future__ import annotations

import difflib
from collections.abc import Iterable, Mapping, Sequence
from types import MappingProxyType

from dk.tools.descriptor import ToolDescriptor

__all__ = ["GroupNotFoundError", "Registry", "ToolNotFoundError"]


class ToolNotFoundError(LookupError):
    """Raised when a tool name is not registered."""

    def __init__(self, name: str, suggestions: Sequence[str] = ()) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name
        self.suggestions = tuple(suggestions)


class GroupNotFoundError(LookupError):
    """Raised when a group name is not registered."""

    def __init__(self, name: str, suggestions: Sequence[str] = ()) -> None:
        super().__init__(f"Unknown group: {name}")
        self.name = name
        self.suggestions = tuple(suggestions)


def _key(name: str) -> str:
    return name.strip().lower()


class Registry:
    """Read-only mapping of tool name to descriptor, plus named groups.

    Raises:
        ValueError: On construction, if names collide, a group or
            companion references an unknown tool, or a group is empty.
    """

    def __init__(
        self,
        tools: Iterable[ToolDescriptor],
        groups: Mapping[str, Sequence[str]] | None = None,
    ) -> None:
        by_name: dict[str, ToolDescriptor] = {}
        for tool in tools:
            if tool.name in by_name:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            by_name[tool.name] = tool

        for tool in by_name.values():
            for companion in tool.companions:
                if companion not in by_name:
                    raise ValueError(f"{tool.name}: unknown companion {companion!r}")

        resolved: dict[str, tuple[str, ...]] = {}
        for group_name, members in (groups or {}).items():
            key = _key(group_name)
            if key in by_name:
                raise ValueError(f"Group name shadows a tool: {group_name}")
            unknown = [m for m in members if m not in by_name]
            if unknown:
                raise ValueError(f"Group {group_name!r} has unknown tool(s): {', '.join(unknown)}")
            unique = tuple(dict.fromkeys(members))
            if not unique:
                raise ValueError(f"Group {group_name!r} is empty")
            resolved[key] = unique

        self._tools = MappingProxyType(by_name)
        self._groups = MappingProxyType(resolved)

    @classmethod
    def default(cls) -> Registry:
        """Build the registry from the bundled definitions."""
        from dk.tools.definitions import ALL_TOOLS, GROUPS

        return cls(ALL_TOOLS, GROUPS)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and _key(name) in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def all(self) -> tuple[ToolDescriptor, ...]:
        """All descriptors, in declaration order."""
        return tuple(self._tools.values())

    def find(self, name: str) -> ToolDescriptor | None:
        """Get a descriptor by name, or None."""
        return self._tools.get(_key(name))

    def get(self, name: str) -> ToolDescriptor:
        """Get a descriptor by name.

        Raises:
            ToolNotFoundError: If the name is not registered.
        """
        tool = self.find(name)
        if tool is None:
            raise ToolNotFoundError(name, self.suggest(name))
        return tool

    def is_group(self, name: str) -> bool:
        return _key(name) in self._groups

    def groups(self) -> dict[str, tuple[str, ...]]:
        """Group name -> member tool names."""
        return dict(self._groups)

    def group(self, name: str) -> tuple[ToolDescriptor, ...]:
        """Get the descriptors of a group, in configured order.

        Raises:
            GroupNotFoundError: If the group is not registered.
        """
        members = self._groups.get(_key(name))
        if members is None:
            close = difflib.get_close_matches(_key(name), list(self._groups), n=3)
            raise GroupNotFoundError(name, close)
        return tuple(self._tools[m] for m in members)

    def by_category(self) -> dict[str, list[ToolDescriptor]]:
        """Descriptors grouped by category, categories in first-seen order."""
        out: dict[str, list[ToolDescriptor]] = {}
        for tool in self._tools.values():
            out.setdefault(tool.category, []).append(tool)
        return out

    def suggest(self, name: str) -> list[str]:
        """Close matches among tool and group names."""
        candidates = [*self._tools, *self._groups]
        return difflib.get_close_matches(_key(name), candidates, n=3)
