"""Tests for dk.platform.process module."""

from __future__ import annotations

import subprocess
import sys
from unittest.mock import patch

import pytest

from dk.core.result import Err, Ok
from dk.platform.process import ProcessError, ProcessOutput, SubprocessRunner


class TestProcessError:
    def test_str_short_command(self) -> None:
        error = ProcessError(("git", "status"), 1, "", "fatal")
        assert str(error) == "git status failed (exit 1)"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(("winget", "install", "--id", "Git.Git"), 1, "", "")
        assert str(error) == "winget install --id ... failed (exit 1)"

    def test_str_timeout(self) -> None:
        error = ProcessError(("choco",), -1, "", "late", timed_out=True)
        assert str(error) == "choco timed out"

    def test_str_not_started(self) -> None:
        error = ProcessError(("nope",), -1, "", "No such file")
        assert "could not be started" in str(error)

    def test_text_combines_streams(self) -> None:
        error = ProcessError(("x",), 2, "out\n", "err\n")
        assert error.text == "out\nerr"


class TestProcessOutput:
    def test_text_includes_stderr(self) -> None:
        # java prints its version on stderr
        out = ProcessOutput(("java", "-version"), "", 'openjdk version "21.0.1"\n')
        assert out.text == 'openjdk version "21.0.1"'


class TestSubprocessRunner:
    def test_success(self) -> None:
        result = SubprocessRunner().run([sys.executable, "-c", "print('hello')"], timeout=30)

        assert isinstance(result, Ok)
        assert result.value.stdout.strip() == "hello"

    def test_non_zero_exit(self) -> None:
        result = SubprocessRunner().run(
            [sys.executable, "-c", "import sys; sys.stderr.write('bad'); sys.exit(3)"],
            timeout=30,
        )

        assert isinstance(result, Err)
        assert result.error.returncode == 3
        assert "bad" in result.error.stderr

    def test_command_not_found(self) -> None:
        result = SubprocessRunner().run(["nonexistent_command_12345"])

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert not result.error.timed_out

    def test_timeout(self) -> None:
        expired = subprocess.TimeoutExpired(cmd=["slow"], timeout=1.0, output=b"partial")
        with patch("subprocess.run", side_effect=expired):
            result = SubprocessRunner().run(["slow"], timeout=1.0)

        assert isinstance(result, Err)
        assert result.error.timed_out
        assert result.error.returncode == -1
        assert result.error.stdout == "partial"

    @pytest.mark.parametrize("capture", [True, False])
    def test_capture_flag_is_forwarded(self, capture: bool) -> None:
        completed = subprocess.CompletedProcess(["x"], 0, None, None)
        with patch("subprocess.run", return_value=completed) as run:
            result = SubprocessRunner().run(["x"], capture=capture)

        assert isinstance(result, Ok)
        assert run.call_args.kwargs["capture_output"] is capture
        assert run.call_args.kwargs["stdin"] is subprocess.DEVNULL
