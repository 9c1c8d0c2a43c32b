"""Result types for detection and provisioning."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path

from dk.tools.errors import BackendExitNonZero, ProvisionError

__all__ = [
    "Action",
    "AttemptOutcome",
    "BackendAttempt",
    "DetectionResult",
    "DetectionStatus",
    "ProvisionOptions",
    "ProvisionResult",
]


class DetectionStatus(Enum):
    NOT_CHECKED = auto()
    VERIFIED = auto()
    NOT_FOUND = auto()
    ERROR = auto()

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")


@dataclass(frozen=True, slots=True)
class DetectionResult:
    """Outcome of one detection run. Created fresh on every call.

    Attributes:
        installed: True if the tool was found
        version: Parsed version, "Unknown" if the probe failed, None if
            the tool has no version probe or was not found
        executable_path: Absolute path of the resolved binary
        install_path: Well-known install location the tool was found at
            (only set when the PATH lookup missed)
        status: Detection status
        error_message: Set when status is ERROR
    """

    installed: bool = False
    version: str | None = None
    executable_path: Path | None = None
    install_path: Path | None = None
    status: DetectionStatus = DetectionStatus.NOT_CHECKED
    error_message: str | None = None

    @classmethod
    def verified(
        cls,
        *,
        version: str | None,
        executable_path: Path | None,
        install_path: Path | None = None,
    ) -> DetectionResult:
        return cls(
            installed=True,
            version=version,
            executable_path=executable_path,
            install_path=install_path,
            status=DetectionStatus.VERIFIED,
        )

    @classmethod
    def not_found(cls) -> DetectionResult:
        return cls(installed=False, status=DetectionStatus.NOT_FOUND)

    @classmethod
    def failed(cls, message: str) -> DetectionResult:
        return cls(installed=False, status=DetectionStatus.ERROR, error_message=message)

    @property
    def location(self) -> Path | None:
        """Best path to show the user."""
        return self.executable_path or self.install_path

    def describe(self) -> str:
        """Short human-readable summary."""
        match self.status:
            case DetectionStatus.VERIFIED:
                return self.version or "installed"
            case DetectionStatus.NOT_FOUND:
                return "not installed"
            case DetectionStatus.ERROR:
                return f"detection error: {self.error_message}"
            case DetectionStatus.NOT_CHECKED:
                return "not checked"


class Action(Enum):
    """What to do with a tool."""

    INSTALL = auto()
    TEST = auto()
    UPDATE = auto()
    CHECK = auto()
    STATUS = auto()
    UNINSTALL = auto()
    HELP = auto()

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def changes_state(self) -> bool:
        return self in (Action.INSTALL, Action.UPDATE, Action.UNINSTALL)

    @property
    def verb(self) -> str:
        """Progressive form for status lines."""
        match self:
            case Action.INSTALL:
                return "installing"
            case Action.TEST:
                return "testing"
            case Action.UPDATE:
                return "updating"
            case Action.CHECK:
                return "checking"
            case Action.STATUS:
                return "inspecting"
            case Action.UNINSTALL:
                return "uninstalling"
            case Action.HELP:
                return "describing"

    @classmethod
    def parse(cls, text: str) -> Action | None:
        """Parse an action name; None if unknown."""
        try:
            return cls[text.strip().upper()]
        except KeyError:
            return None

    @classmethod
    def names(cls) -> list[str]:
        return [str(a) for a in cls]


@dataclass(frozen=True, slots=True)
class ProvisionOptions:
    """Flags for a provisioning request.

    Attributes:
        force: Reinstall even if already installed; pass force to backends
        silent: Ask backends for non-interactive, quiet runs and capture
            their output instead of streaming it
        timeout: Per-backend timeout in seconds (None uses the configured one)
    """

    force: bool = False
    silent: bool = False
    timeout: float | None = None


class AttemptOutcome(Enum):
    SUCCEEDED = auto()
    FAILED = auto()
    UNAVAILABLE = auto()

    def __str__(self) -> str:
        return self.name.lower()


@dataclass(frozen=True, slots=True)
class BackendAttempt:
    """One backend considered for a provisioning request."""

    backend: str
    outcome: AttemptOutcome
    detail: str = ""
    error: BackendExitNonZero | None = None

    @property
    def invoked(self) -> bool:
        return self.outcome != AttemptOutcome.UNAVAILABLE


@dataclass(frozen=True, slots=True)
class ProvisionResult:
    """Outcome of install/update/uninstall for one tool."""

    action: Action
    succeeded: bool
    message: str
    backend_used: str | None = None
    attempts: tuple[BackendAttempt, ...] = ()
    error: ProvisionError | None = None
    detection: DetectionResult | None = None

    @property
    def invoked_backends(self) -> list[str]:
        """Backends whose subprocess actually ran, in order."""
        return [a.backend for a in self.attempts if a.invoked]
