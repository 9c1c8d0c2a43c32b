"""Subprocess execution with Result-based error handling.

Every probe, smoke test and backend call goes through a CommandRunner, so
nothing above this layer sees a subprocess exception: launch failures and
timeouts come back as Err(ProcessError) with returncode -1.

Usage:
    runner = SubprocessRunner()
    match runner.run(["git", "--version"], timeout=15):
        case Ok(out):
            print(out.stdout)
        case Err(error):
            print(f"failed: {error}")
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from dk.core.result import Err, Ok, Result

__all__ = ["CommandRunner", "ProcessError", "ProcessOutput", "SubprocessRunner"]


@dataclass(frozen=True, slots=True)
class ProcessOutput:
    """Output of a command that exited with code 0."""

    command: tuple[str, ...]
    stdout: str
    stderr: str

    @property
    def text(self) -> str:
        """stdout and stderr combined; some tools print versions on stderr."""
        return f"{self.stdout}\n{self.stderr}".strip()


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: Exit code, or -1 if the process never ran or timed out.
        stdout: Standard output (may be empty).
        stderr: Standard error, or the launch/timeout reason.
        timed_out: True if the timeout elapsed.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def text(self) -> str:
        return f"{self.stdout}\n{self.stderr}".strip()

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        if self.timed_out:
            return f"{cmd_str} timed out"
        if self.returncode == -1:
            return f"{cmd_str} could not be started ({self.stderr})"
        return f"{cmd_str} failed (exit {self.returncode})"


class CommandRunner(Protocol):
    """Protocol for running external commands.

    This abstraction allows faking subprocess calls in tests.
    """

    def run(
        self,
        cmd: Sequence[str],
        *,
        timeout: float | None = None,
        capture: bool = True,
    ) -> Result[ProcessOutput, ProcessError]:
        """Run a command.

        Args:
            cmd: Command and arguments
            timeout: Maximum seconds to wait (None for no limit)
            capture: Capture output; when False it streams to the terminal

        Returns:
            Ok(ProcessOutput) on exit code 0, Err(ProcessError) otherwise
        """
        ...


def _decode(value: str | bytes | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


class SubprocessRunner:
    """Default command runner using subprocess.run."""

    def run(
        self,
        cmd: Sequence[str],
        *,
        timeout: float | None = None,
        capture: bool = True,
    ) -> Result[ProcessOutput, ProcessError]:
        argv = list(cmd)
        try:
            proc = subprocess.run(
                argv,
                capture_output=capture,
                stdin=subprocess.DEVNULL,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            return Err(
                ProcessError(
                    command=tuple(argv),
                    returncode=-1,
                    stdout=_decode(e.stdout),
                    stderr=f"Command timed out after {timeout}s",
                    timed_out=True,
                )
            )
        except OSError as e:
            return Err(
                ProcessError(
                    command=tuple(argv),
                    returncode=-1,
                    stdout="",
                    stderr=str(e),
                )
            )

        stdout = proc.stdout or ""
        stderr = proc.stderr or ""
        if proc.returncode != 0:
            return Err(
                ProcessError(
                    command=tuple(argv),
                    returncode=proc.returncode,
                    stdout=stdout,
                    stderr=stderr,
                )
            )
        return Ok(ProcessOutput(command=tuple(argv), stdout=stdout, stderr=stderr))
