"""Package-manager backends.

Each backend adapts one external package manager to a common interface:
is_available / install / update / uninstall. The provisioner walks the
configured backends in priority order and never needs to know which
command line a given manager wants.

Backend output is treated as opaque text; only exit codes (plus a few
documented benign codes) decide success.
"""

from __future__ import annotations

import shlex
import shutil
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence

from dk.core.config import DEFAULT_INSTALL_TIMEOUT
from dk.core.result import Err, Ok, Result
from dk.platform.process import CommandRunner
from dk.tools.errors import BackendExitNonZero
from dk.tools.model import Action, ProvisionOptions

__all__ = [
    "BACKEND_TYPES",
    "Backend",
    "ChocoBackend",
    "ManualBackend",
    "ScoopBackend",
    "WingetBackend",
    "build_backends",
]


def _signed32(code: int) -> int:
    """Windows reports HRESULT exit codes unsigned; normalize to signed."""
    if code > 0x7FFFFFFF:
        return code - 0x1_0000_0000
    return code


def _last_line(text: str) -> str:
    lines = [line.strip() for line in text.strip().splitlines() if line.strip()]
    return lines[-1] if lines else ""


class Backend(ABC):
    """Base class for package-manager backends.

    Subclasses define `name`, `executable` and the argument lists for each
    subcommand. Running, timeouts and exit-code handling live here.
    """

    name: str
    executable: str

    def __init__(
        self,
        *,
        runner: CommandRunner,
        which: Callable[..., str | None] = shutil.which,
        timeout: float = DEFAULT_INSTALL_TIMEOUT,
    ) -> None:
        self._runner = runner
        self._which = which
        self._timeout = timeout

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    def is_available(self) -> bool:
        """Check the package manager itself is installed on this host."""
        return self._which(self.executable) is not None

    def supports(self, action: Action) -> bool:
        """Check this backend can perform an action at all."""
        return action in (Action.INSTALL, Action.UPDATE, Action.UNINSTALL)

    @abstractmethod
    def install_args(self, package_id: str, options: ProvisionOptions) -> list[str]: ...

    @abstractmethod
    def update_args(self, package_id: str, options: ProvisionOptions) -> list[str]: ...

    @abstractmethod
    def uninstall_args(self, package_id: str, options: ProvisionOptions) -> list[str]: ...

    def benign_exit_codes(self, action: Action) -> frozenset[int]:
        """Non-zero exit codes that still mean the request is satisfied."""
        return frozenset()

    def install(
        self, package_id: str, options: ProvisionOptions
    ) -> Result[None, BackendExitNonZero]:
        return self._invoke(Action.INSTALL, self.install_args(package_id, options), options)

    def update(
        self, package_id: str, options: ProvisionOptions
    ) -> Result[None, BackendExitNonZero]:
        return self._invoke(Action.UPDATE, self.update_args(package_id, options), options)

    def uninstall(
        self, package_id: str, options: ProvisionOptions
    ) -> Result[None, BackendExitNonZero]:
        return self._invoke(Action.UNINSTALL, self.uninstall_args(package_id, options), options)

    def run(
        self, action: Action, package_id: str, options: ProvisionOptions
    ) -> Result[None, BackendExitNonZero]:
        """Dispatch a state-changing action to the matching subcommand."""
        match action:
            case Action.INSTALL:
                return self.install(package_id, options)
            case Action.UPDATE:
                return self.update(package_id, options)
            case Action.UNINSTALL:
                return self.uninstall(package_id, options)
            case _:
                raise ValueError(f"{self.name} cannot {action}")

    def _argv(self, args: Sequence[str]) -> list[str]:
        exe = self._which(self.executable) or self.executable
        return [exe, *args]

    def _invoke(
        self, action: Action, args: list[str], options: ProvisionOptions
    ) -> Result[None, BackendExitNonZero]:
        return self._execute(action, self._argv(args), options)

    def _execute(
        self, action: Action, argv: list[str], options: ProvisionOptions
    ) -> Result[None, BackendExitNonZero]:
        timeout = options.timeout if options.timeout is not None else self._timeout
        result = self._runner.run(argv, timeout=timeout, capture=options.silent)
        if isinstance(result, Ok):
            return Ok(None)

        error = result.error
        if _signed32(error.returncode) in self.benign_exit_codes(action):
            return Ok(None)

        if error.timed_out:
            detail = f"no exit after {timeout:g}s"
        elif error.returncode == -1:
            detail = error.stderr.strip()
        else:
            detail = _last_line(error.text)
        return Err(
            BackendExitNonZero(
                backend=self.name,
                returncode=error.returncode,
                detail=detail,
                timed_out=error.timed_out,
            )
        )


# winget HRESULTs (APPINSTALLER_CLI_ERROR_*)
WINGET_UPDATE_NOT_APPLICABLE = -1978335189  # 0x8A15002B
WINGET_PACKAGE_ALREADY_INSTALLED = -1978335135  # 0x8A150061


class WingetBackend(Backend):
    """Windows Package Manager."""

    name = "winget"
    executable = "winget"

    _AGREEMENTS = ("--accept-source-agreements", "--accept-package-agreements")

    def _flags(self, options: ProvisionOptions) -> list[str]:
        flags = ["--disable-interactivity"]
        if options.silent:
            flags.append("--silent")
        if options.force:
            flags.append("--force")
        return flags

    def install_args(self, package_id: str, options: ProvisionOptions) -> list[str]:
        return ["install", "--id", package_id, "--exact", *self._AGREEMENTS, *self._flags(options)]

    def update_args(self, package_id: str, options: ProvisionOptions) -> list[str]:
        return ["upgrade", "--id", package_id, "--exact", *self._AGREEMENTS, *self._flags(options)]

    def uninstall_args(self, package_id: str, options: ProvisionOptions) -> list[str]:
        return [
            "uninstall",
            "--id",
            package_id,
            "--exact",
            "--accept-source-agreements",
            *self._flags(options),
        ]

    def benign_exit_codes(self, action: Action) -> frozenset[int]:
        match action:
            case Action.INSTALL:
                return frozenset({WINGET_PACKAGE_ALREADY_INSTALLED})
            case Action.UPDATE:
                return frozenset({WINGET_UPDATE_NOT_APPLICABLE})
            case _:
                return frozenset()


# Chocolatey passes through MSI "reboot required" codes on success.
CHOCO_REBOOT_CODES = frozenset({1641, 3010})


class ChocoBackend(Backend):
    """Chocolatey."""

    name = "choco"
    executable = "choco"

    def _flags(self, options: ProvisionOptions) -> list[str]:
        flags = ["-y"]
        if options.silent:
            flags.extend(["--no-progress", "--limit-output"])
        if options.force:
            flags.append("--force")
        return flags

    def install_args(self, package_id: str, options: ProvisionOptions) -> list[str]:
        return ["install", package_id, *self._flags(options)]

    def update_args(self, package_id: str, options: ProvisionOptions) -> list[str]:
        return ["upgrade", package_id, *self._flags(options)]

    def uninstall_args(self, package_id: str, options: ProvisionOptions) -> list[str]:
        return ["uninstall", package_id, *self._flags(options)]

    def benign_exit_codes(self, action: Action) -> frozenset[int]:
        return CHOCO_REBOOT_CODES


class ScoopBackend(Backend):
    """Scoop. It has no silent mode; force only applies to update."""

    name = "scoop"
    executable = "scoop"

    def install_args(self, package_id: str, options: ProvisionOptions) -> list[str]:
        return ["install", package_id]

    def update_args(self, package_id: str, options: ProvisionOptions) -> list[str]:
        args = ["update", package_id]
        if options.force:
            args.append("--force")
        if options.silent:
            args.append("--quiet")
        return args

    def uninstall_args(self, package_id: str, options: ProvisionOptions) -> list[str]:
        return ["uninstall", package_id]


_SHELL_META = frozenset({"|", "||", "&&", ";", ">", ">>", "<", "2>", "&>", "&"})


def parse_manual_command(command: str) -> list[str] | None:
    """Split a manual installer command line; None if it needs a shell."""
    try:
        argv = shlex.split(command, posix=True)
    except ValueError:
        return None
    if not argv:
        return None
    if any(tok in _SHELL_META for tok in argv):
        return None
    return argv


class ManualBackend(Backend):
    """Last-resort fallback: the tool's own installer command.

    The descriptor's "manual" package entry is a command line such as
    "wsl --install --no-distribution". It is only used for install, and
    only if it is a plain argv (no pipes, redirects or chaining).
    """

    name = "manual"
    executable = ""

    def is_available(self) -> bool:
        return True

    def supports(self, action: Action) -> bool:
        return action == Action.INSTALL

    def install_args(self, package_id: str, options: ProvisionOptions) -> list[str]:
        return parse_manual_command(package_id) or []

    def update_args(self, package_id: str, options: ProvisionOptions) -> list[str]:
        return []

    def uninstall_args(self, package_id: str, options: ProvisionOptions) -> list[str]:
        return []

    def _invoke(
        self, action: Action, args: list[str], options: ProvisionOptions
    ) -> Result[None, BackendExitNonZero]:
        if not self.supports(action):
            return Err(
                BackendExitNonZero(
                    backend=self.name,
                    returncode=-1,
                    detail=f"installer commands cannot {action}",
                )
            )
        if not args:
            return Err(
                BackendExitNonZero(
                    backend=self.name,
                    returncode=-1,
                    detail="refusing to run installer command that needs a shell",
                )
            )
        program = self._which(args[0])
        if program is None:
            return Err(
                BackendExitNonZero(
                    backend=self.name,
                    returncode=-1,
                    detail=f"installer '{args[0]}' not found",
                )
            )
        return self._execute(action, [program, *args[1:]], options)


BACKEND_TYPES: dict[str, type[Backend]] = {
    "winget": WingetBackend,
    "choco": ChocoBackend,
    "scoop": ScoopBackend,
    "manual": ManualBackend,
}


def build_backends(
    order: Sequence[str],
    *,
    runner: CommandRunner,
    timeout: float = DEFAULT_INSTALL_TIMEOUT,
) -> list[Backend]:
    """Instantiate backends in priority order.

    Raises:
        ValueError: If a name is not a known backend.
    """
    backends: list[Backend] = []
    for name in order:
        backend_type = BACKEND_TYPES.get(name)
        if backend_type is None:
            raise ValueError(f"Unknown backend: {name}")
        backends.append(backend_type(runner=runner, timeout=timeout))
    return backends
