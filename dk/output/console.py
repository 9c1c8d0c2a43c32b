"""Console output abstraction.

Services report progress through ConsoleProtocol and never talk to Rich
directly. RichConsole is the production backend (timestamped status
lines); MockConsole captures output for tests.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "OutputRecord",
    "RichConsole",
    "Style",
]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()
    BOLD = auto()
    HEADER = auto()

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Protocol for console output."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        """Print a message with optional styling."""
        ...

    def success(self, message: str) -> None:
        """Print a timestamped success line."""
        ...

    def error(self, message: str) -> None:
        """Print a timestamped error line."""
        ...

    def warning(self, message: str) -> None:
        """Print a timestamped warning line."""
        ...

    def info(self, message: str) -> None:
        """Print a timestamped info line."""
        ...

    def header(self, message: str) -> None:
        """Print a section header."""
        ...

    def newline(self) -> None:
        """Print an empty line."""
        ...

    def summary(self, message: str, *, ok: bool) -> None:
        """Print the final summary line. Never suppressed."""
        ...


def _clock() -> str:
    return datetime.now().strftime("%H:%M:%S")


class RichConsole:
    """Console implementation using Rich.

    Args:
        quiet: Drop plain, info, success and header output. Warnings,
            errors and the summary are always shown.
        timestamps: Prefix status lines with HH:MM:SS.
    """

    def __init__(
        self,
        *,
        quiet: bool = False,
        timestamps: bool = True,
        clock: Callable[[], str] = _clock,
    ) -> None:
        # Import Rich lazily to avoid import-time dependency
        from rich.console import Console

        self._console = Console(highlight=False)
        self._err_console = Console(stderr=True, highlight=False)
        self._quiet = quiet
        self._timestamps = timestamps
        self._clock = clock
        self._style_map = {
            Style.DEFAULT: "",
            Style.SUCCESS: "green",
            Style.ERROR: "red bold",
            Style.WARNING: "yellow",
            Style.INFO: "cyan",
            Style.DIM: "dim",
            Style.BOLD: "bold",
            Style.HEADER: "blue bold",
        }

    def _stamp(self) -> str:
        if not self._timestamps:
            return ""
        return f"[dim]{self._clock()}[/dim] "

    def _status(self, tag: str, message: str, *, err: bool = False) -> None:
        from rich.markup import escape

        target = self._err_console if err else self._console
        target.print(f"{self._stamp()}{tag} {escape(message)}")

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        if self._quiet and style not in (Style.WARNING, Style.ERROR):
            return
        rich_style = self._style_map.get(style, "")
        if rich_style:
            self._console.print(message, style=rich_style, markup=False)
        else:
            self._console.print(message, markup=False)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._status("[green]OK[/green]", message)

    def error(self, message: str) -> None:
        self._status("[red bold]error:[/red bold]", message, err=True)

    def warning(self, message: str) -> None:
        self._status("[yellow]warning:[/yellow]", message)

    def info(self, message: str) -> None:
        if not self._quiet:
            self._status("[cyan]info:[/cyan]", message)

    def header(self, message: str) -> None:
        if not self._quiet:
            from rich.markup import escape

            self._console.print(f"\n[blue bold]{escape(message)}[/blue bold]")

    def newline(self) -> None:
        if not self._quiet:
            self._console.print()

    def summary(self, message: str, *, ok: bool) -> None:
        color = "green" if ok else "red"
        self._status(f"[{color} bold]summary:[/{color} bold]", message)


@dataclass
class OutputRecord:
    """A single output record for MockConsole."""

    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    """Factory for empty outputs list (helps type inference)."""
    return []


@dataclass
class MockConsole:
    """Console implementation that captures output for testing."""

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def success(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"OK {message}", Style.SUCCESS))

    def error(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"error: {message}", Style.ERROR))

    def warning(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"warning: {message}", Style.WARNING))

    def info(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"info: {message}", Style.INFO))

    def header(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.HEADER))

    def newline(self) -> None:
        self.outputs.append(OutputRecord("", Style.DEFAULT))

    def summary(self, message: str, *, ok: bool) -> None:
        style = Style.SUCCESS if ok else Style.ERROR
        self.outputs.append(OutputRecord(f"summary: {message}", style))

    # Test helper methods

    def clear(self) -> None:
        self.outputs.clear()

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def has_warning(self) -> bool:
        return any(o.style == Style.WARNING for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        """Find all outputs containing a substring."""
        return [o for o in self.outputs if substring in o.message]
