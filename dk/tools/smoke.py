"""Functional smoke tests for installed tools.

Detection proves a binary exists; smoke tests prove it runs. Each test is
a read-only command whose output must match a pattern.
"""

from __future__ import annotations

import re
import shutil
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from dk.core.config import DEFAULT_PROBE_TIMEOUT
from dk.core.result import Err
from dk.platform.process import CommandRunner
from dk.tools.descriptor import SmokeTest, ToolDescriptor
from dk.tools.errors import ProbeFailed
from dk.tools.model import DetectionResult
from dk.tools.parsers import first_line

__all__ = ["SmokeTestResult", "SmokeTester"]


@dataclass(frozen=True, slots=True)
class SmokeTestResult:
    """Outcome of one smoke test.

    Attributes:
        test: The test that ran
        passed: Exit code 0 and the expected pattern matched
        output: First line of output, for reports
        error: Why the command failed, if it did
    """

    test: SmokeTest
    passed: bool
    output: str = ""
    error: ProbeFailed | None = None


class SmokeTester:
    def __init__(
        self,
        *,
        runner: CommandRunner,
        timeout: float = DEFAULT_PROBE_TIMEOUT,
        which: Callable[..., str | None] = shutil.which,
    ) -> None:
        self._runner = runner
        self._timeout = timeout
        self._which = which

    def run(self, descriptor: ToolDescriptor, detection: DetectionResult) -> list[SmokeTestResult]:
        """Run every smoke test for a detected tool, in order."""
        exe = str(detection.executable_path or descriptor.primary_executable)
        sibling = self._sibling_resolver(detection.executable_path)
        return [
            self._run_one(descriptor, test, test.argv(exe, sibling)) for test in descriptor.tests
        ]

    def _sibling_resolver(self, executable: Path | None) -> Callable[[str], str]:
        """Resolve {bin:NAME} in the detected executable's directory first.

        A tool found through a common path or the persisted PATH may not
        be on this process's PATH, and neither are the binaries next to it.
        """

        def resolve(name: str) -> str:
            if executable is not None:
                found = self._which(name, path=str(executable.parent))
                if found is not None:
                    return found
            return name

        return resolve

    def _run_one(
        self, descriptor: ToolDescriptor, test: SmokeTest, argv: list[str]
    ) -> SmokeTestResult:
        result = self._runner.run(argv, timeout=self._timeout)
        if isinstance(result, Err):
            return SmokeTestResult(
                test=test,
                passed=False,
                output=first_line(result.error.text) or "",
                error=ProbeFailed(
                    tool=descriptor.name,
                    command=test.display,
                    reason=str(result.error),
                ),
            )

        text = result.value.text
        if test.expect and re.search(test.expect, text, re.IGNORECASE) is None:
            return SmokeTestResult(
                test=test,
                passed=False,
                output=first_line(text) or "",
                error=ProbeFailed(
                    tool=descriptor.name,
                    command=test.display,
                    reason=f"output did not match /{test.expect}/",
                ),
            )
        return SmokeTestResult(test=test, passed=True, output=first_line(text) or "")
