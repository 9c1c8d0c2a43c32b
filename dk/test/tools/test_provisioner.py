"""Tests for dk.tools.provisioner module."""

from __future__ import annotations

from pathlib import Path

import pytest

from dk.core.config import SettleConfig
from dk.core.result import Err, Ok, Result
from dk.output.console import MockConsole
from dk.tools.descriptor import ToolDescriptor
from dk.tools.errors import (
    BackendExitNonZero,
    BackendUnavailable,
    ConfirmationFailed,
    NotInstalled,
)
from dk.tools.model import (
    Action,
    AttemptOutcome,
    DetectionResult,
    ProvisionOptions,
)
from dk.tools.provisioner import Provisioner

INSTALLED = DetectionResult.verified(version="2.42.0", executable_path=Path("/bin/git"))
MISSING = DetectionResult.not_found()


class FakeBackend:
    """Backend double that records invocations."""

    def __init__(self, name: str, *, exit_code: int = 0, available: bool = True):
        self.name = name
        self.exit_code = exit_code
        self.available = available
        self.calls: list[tuple[Action, str, ProvisionOptions]] = []

    def is_available(self) -> bool:
        return self.available

    def supports(self, action: Action) -> bool:
        return action.changes_state

    def run(
        self, action: Action, package_id: str, options: ProvisionOptions
    ) -> Result[None, BackendExitNonZero]:
        self.calls.append((action, package_id, options))
        if self.exit_code == 0:
            return Ok(None)
        return Err(BackendExitNonZero(self.name, self.exit_code, "installer failed"))


class ScriptedDetector:
    """Returns queued results per tool; the last one repeats."""

    def __init__(self, script: dict[str, list[DetectionResult]]):
        self.script = {name: list(results) for name, results in script.items()}
        self.calls: list[str] = []

    def detect(self, descriptor: ToolDescriptor) -> DetectionResult:
        self.calls.append(descriptor.name)
        queue = self.script.get(descriptor.name, [MISSING])
        if len(queue) > 1:
            return queue.pop(0)
        return queue[0]


def _tool(name: str = "git", **overrides: object) -> ToolDescriptor:
    fields: dict[str, object] = {
        "name": name,
        "display_name": name.title(),
        "category": "vcs",
        "executables": (name,),
        "packages": {"winget": f"Vendor.{name}", "choco": name},
    }
    fields.update(overrides)
    return ToolDescriptor(**fields)  # type: ignore[arg-type]


class Harness:
    def __init__(
        self,
        script: dict[str, list[DetectionResult]],
        backends: list[FakeBackend],
        tools: list[ToolDescriptor] | None = None,
        settle: SettleConfig | None = None,
    ):
        self.detector = ScriptedDetector(script)
        self.backends = backends
        self.console = MockConsole()
        self.sleeps: list[float] = []
        by_name = {t.name: t for t in tools or []}
        self.provisioner = Provisioner(
            detector=self.detector,  # type: ignore[arg-type]
            backends=backends,  # type: ignore[arg-type]
            console=self.console,
            settle=settle or SettleConfig(attempts=3, delay=2.0, backoff=2.0),
            lookup=by_name.get,
            sleep=self.sleeps.append,
        )


class TestInstall:
    def test_already_installed_is_noop(self) -> None:
        winget = FakeBackend("winget")
        h = Harness({"git": [INSTALLED]}, [winget])

        result = h.provisioner.provision(_tool(), Action.INSTALL)

        assert result.succeeded
        assert "already installed" in result.message
        assert result.backend_used is None
        assert winget.calls == []

    def test_force_uses_first_backend(self) -> None:
        winget, choco = FakeBackend("winget"), FakeBackend("choco")
        h = Harness({"git": [INSTALLED]}, [winget, choco])

        result = h.provisioner.provision(_tool(), Action.INSTALL, ProvisionOptions(force=True))

        assert result.succeeded
        assert result.backend_used == "winget"
        assert winget.calls[0][1] == "Vendor.git"
        assert winget.calls[0][2].force
        assert choco.calls == []

    def test_failure_falls_through_to_next_backend(self) -> None:
        winget, choco = FakeBackend("winget", exit_code=1), FakeBackend("choco")
        h = Harness({"git": [MISSING, INSTALLED]}, [winget, choco])

        result = h.provisioner.provision(_tool(), Action.INSTALL, ProvisionOptions(force=True))

        assert result.succeeded
        assert result.backend_used == "choco"
        assert [a.outcome for a in result.attempts] == [
            AttemptOutcome.FAILED,
            AttemptOutcome.SUCCEEDED,
        ]
        assert result.invoked_backends == ["winget", "choco"]
        assert h.console.has_warning()

    def test_backends_without_package_or_host_support_are_skipped(self) -> None:
        scoop = FakeBackend("scoop")
        winget = FakeBackend("winget", available=False)
        choco = FakeBackend("choco")
        h = Harness({"git": [MISSING, INSTALLED]}, [scoop, winget, choco])

        result = h.provisioner.provision(_tool(), Action.INSTALL)

        assert result.backend_used == "choco"
        assert scoop.calls == []
        assert winget.calls == []
        assert [(a.backend, a.outcome) for a in result.attempts] == [
            ("winget", AttemptOutcome.UNAVAILABLE),
            ("choco", AttemptOutcome.SUCCEEDED),
        ]
        assert result.invoked_backends == ["choco"]

    def test_all_backends_fail(self) -> None:
        winget = FakeBackend("winget", exit_code=1)
        choco = FakeBackend("choco", exit_code=2)
        h = Harness({"git": [MISSING]}, [winget, choco])

        result = h.provisioner.provision(_tool(), Action.INSTALL)

        assert not result.succeeded
        assert isinstance(result.error, BackendExitNonZero)
        assert result.error.backend == "choco"
        assert "exit 1" in result.message
        assert "exit 2" in result.message

    def test_no_eligible_backend(self) -> None:
        h = Harness({"git": [MISSING]}, [FakeBackend("winget", available=False)])

        result = h.provisioner.provision(_tool(), Action.INSTALL)

        assert not result.succeeded
        assert isinstance(result.error, BackendUnavailable)
        assert result.error.considered == ("winget",)

    def test_no_package_ids_at_all(self) -> None:
        h = Harness({"git": [MISSING]}, [FakeBackend("winget")])

        result = h.provisioner.provision(_tool(packages={}), Action.INSTALL)

        assert isinstance(result.error, BackendUnavailable)
        assert result.error.considered == ()


class TestConfirmation:
    def test_retries_until_detected(self) -> None:
        h = Harness({"git": [MISSING, MISSING, INSTALLED]}, [FakeBackend("winget")])

        result = h.provisioner.provision(_tool(), Action.INSTALL)

        assert result.succeeded
        assert h.sleeps == [2.0]
        assert h.detector.calls.count("git") == 3

    def test_unconfirmed_install_fails(self) -> None:
        h = Harness({"git": [MISSING]}, [FakeBackend("winget"), FakeBackend("choco")])

        result = h.provisioner.provision(_tool(), Action.INSTALL)

        assert not result.succeeded
        assert isinstance(result.error, ConfirmationFailed)
        assert result.error.attempts == 3
        assert result.backend_used == "winget"
        assert h.sleeps == [2.0, 4.0]
        # A confirmed success elsewhere never triggers lower backends.
        assert h.backends[1].calls == []


class TestUpdate:
    def test_not_installed(self) -> None:
        winget = FakeBackend("winget")
        h = Harness({"git": [MISSING]}, [winget])

        result = h.provisioner.provision(_tool(), Action.UPDATE)

        assert not result.succeeded
        assert isinstance(result.error, NotInstalled)
        assert "not installed" in result.message
        assert winget.calls == []

    def test_reports_version_change(self) -> None:
        newer = DetectionResult.verified(version="2.43.0", executable_path=Path("/bin/git"))
        winget = FakeBackend("winget")
        h = Harness({"git": [INSTALLED, newer]}, [winget])

        result = h.provisioner.provision(_tool(), Action.UPDATE)

        assert result.succeeded
        assert "2.42.0 -> 2.43.0" in result.message
        assert winget.calls[0][0] == Action.UPDATE


class TestUninstall:
    def test_not_installed_is_success(self) -> None:
        winget = FakeBackend("winget")
        h = Harness({"git": [MISSING]}, [winget])

        result = h.provisioner.provision(_tool(), Action.UNINSTALL)

        assert result.succeeded
        assert "not installed" in result.message
        assert winget.calls == []

    def test_removed(self) -> None:
        h = Harness({"git": [INSTALLED, MISSING]}, [FakeBackend("winget")])

        result = h.provisioner.provision(_tool(), Action.UNINSTALL)

        assert result.succeeded
        assert result.message == "Git uninstalled via winget"
        assert h.sleeps == []

    def test_shadowed_installation_is_noted(self) -> None:
        h = Harness({"git": [INSTALLED]}, [FakeBackend("winget")])

        result = h.provisioner.provision(_tool(), Action.UNINSTALL)

        assert result.succeeded
        assert "still found" in result.message


class TestCompanions:
    def test_companion_installed_after_parent(self) -> None:
        wsl = _tool("wsl", companions=("ubuntu",))
        ubuntu = _tool("ubuntu")
        winget = FakeBackend("winget")
        h = Harness(
            {"wsl": [MISSING, INSTALLED], "ubuntu": [MISSING, INSTALLED]},
            [winget],
            tools=[wsl, ubuntu],
        )

        result = h.provisioner.provision(wsl, Action.INSTALL, ProvisionOptions(force=True))

        assert result.succeeded
        assert [c[1] for c in winget.calls] == ["Vendor.wsl", "Vendor.ubuntu"]
        assert winget.calls[1][2].force is False

    def test_companion_failure_is_a_warning(self) -> None:
        wsl = _tool("wsl", companions=("ubuntu",))
        ubuntu = _tool("ubuntu", packages={})
        h = Harness({"wsl": [MISSING, INSTALLED]}, [FakeBackend("winget")], tools=[wsl, ubuntu])

        result = h.provisioner.provision(wsl, Action.INSTALL)

        assert result.succeeded
        assert "companion(s) failed: ubuntu" in result.message
        assert h.console.has_warning()

    def test_cycles_terminate(self) -> None:
        a = _tool("a", companions=("b",))
        b = _tool("b", companions=("a",))
        winget = FakeBackend("winget")
        h = Harness({"a": [MISSING, INSTALLED], "b": [MISSING, INSTALLED]}, [winget], tools=[a, b])

        result = h.provisioner.provision(a, Action.INSTALL)

        assert result.succeeded
        assert len(winget.calls) == 2


def test_read_only_action_rejected() -> None:
    h = Harness({}, [])
    with pytest.raises(ValueError):
        h.provisioner.provision(_tool(), Action.CHECK)
