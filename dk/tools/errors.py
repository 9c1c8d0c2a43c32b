"""Typed provisioning errors.

These are values, not exceptions: backends and the provisioner return
them inside Err(...) or attach them to results, and the CLI renders them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

__all__ = [
    "BackendExitNonZero",
    "BackendUnavailable",
    "ConfirmationFailed",
    "NotInstalled",
    "ProbeFailed",
    "ProvisionError",
    "UnknownTarget",
    "describe_error",
]


@dataclass(frozen=True, slots=True)
class ProbeFailed:
    """A read-only command (version probe, smoke test) did not run cleanly."""

    tool: str
    command: str
    reason: str


@dataclass(frozen=True, slots=True)
class BackendUnavailable:
    """No backend on this host can handle the tool.

    Attributes:
        considered: Backends that had a package id but were not usable
    """

    tool: str
    action: str
    considered: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class BackendExitNonZero:
    """A backend subprocess reported failure."""

    backend: str
    returncode: int
    detail: str = ""
    timed_out: bool = False


@dataclass(frozen=True, slots=True)
class ConfirmationFailed:
    """The backend succeeded but detection never saw the tool."""

    tool: str
    backend: str
    attempts: int


@dataclass(frozen=True, slots=True)
class NotInstalled:
    """Update requested for a tool that is not installed."""

    tool: str


@dataclass(frozen=True, slots=True)
class UnknownTarget:
    """A CLI target matched no registered tool or group."""

    name: str
    kind: Literal["tool", "group"] = "tool"
    suggestions: tuple[str, ...] = ()


ProvisionError = (
    ProbeFailed
    | BackendUnavailable
    | BackendExitNonZero
    | ConfirmationFailed
    | NotInstalled
    | UnknownTarget
)


def describe_error(error: ProvisionError) -> str:
    """Return a one-line human-readable description."""
    match error:
        case ProbeFailed(tool=tool, command=command, reason=reason):
            return f"{tool}: '{command}' failed: {reason}"
        case BackendUnavailable(tool=tool, action=action, considered=considered):
            if considered:
                return f"{tool}: no available backend to {action} (not on this host: {', '.join(considered)})"
            return f"{tool}: no backend knows how to {action} it"
        case BackendExitNonZero(backend=backend, returncode=rc, detail=detail, timed_out=timed_out):
            base = f"{backend} timed out" if timed_out else f"{backend} failed (exit {rc})"
            return f"{base}: {detail}" if detail else base
        case ConfirmationFailed(tool=tool, backend=backend, attempts=attempts):
            return (
                f"{tool}: {backend} reported success but {tool} was not detected "
                f"after {attempts} checks (open a new shell if PATH changed)"
            )
        case NotInstalled(tool=tool):
            return f"{tool}: not installed (use install)"
        case UnknownTarget(name=name, kind=kind, suggestions=suggestions):
            text = f"unknown {kind}: {name}"
            if suggestions:
                text += f" (did you mean: {', '.join(suggestions)}?)"
            return text
