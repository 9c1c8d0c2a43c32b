"""Tests for dk.services.dispatcher module."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pytest

from dk.core.config import Config, SettleConfig
from dk.core.errors import ErrorCode
from dk.core.result import Err, Ok, Result
from dk.output.console import MockConsole
from dk.platform.process import ProcessError, ProcessOutput
from dk.services.dispatcher import Dispatcher, Target, ToolOutcome
from dk.tools.descriptor import ToolDescriptor
from dk.tools.errors import BackendExitNonZero, UnknownTarget
from dk.tools.model import Action, DetectionResult, DetectionStatus, ProvisionOptions
from dk.tools.provisioner import Provisioner
from dk.tools.registry import Registry
from dk.tools.smoke import SmokeTester


class StaticDetector:
    def __init__(self, results: dict[str, DetectionResult]):
        self.results = results

    def detect(self, descriptor: ToolDescriptor) -> DetectionResult:
        return self.results.get(descriptor.name, DetectionResult.not_found())


class FakeBackend:
    name = "winget"

    def __init__(self) -> None:
        self.calls: list[str] = []

    def is_available(self) -> bool:
        return True

    def supports(self, action: Action) -> bool:
        return True

    def run(
        self, action: Action, package_id: str, options: ProvisionOptions
    ) -> Result[None, BackendExitNonZero]:
        self.calls.append(package_id)
        return Err(BackendExitNonZero("winget", 1, "no network"))


class MockCommandRunner:
    def __init__(self, ok: bool = True):
        self.ok = ok
        self.calls: list[list[str]] = []

    def run(
        self, cmd: Sequence[str], *, timeout: float | None = None, capture: bool = True
    ) -> Result[ProcessOutput, ProcessError]:
        argv = list(cmd)
        self.calls.append(argv)
        if self.ok:
            return Ok(ProcessOutput(tuple(argv), "git version 2.42.0", ""))
        return Err(ProcessError(tuple(argv), 1, "", "broken"))


def _found(version: str = "1.0") -> DetectionResult:
    return DetectionResult.verified(version=version, executable_path=Path("/bin/tool"))


def _dispatcher(
    installed: dict[str, DetectionResult],
    *,
    runner: MockCommandRunner | None = None,
    backend: FakeBackend | None = None,
) -> Dispatcher:
    registry = Registry.default()
    detector = StaticDetector(installed)
    provisioner = Provisioner(
        detector=detector,  # type: ignore[arg-type]
        backends=[backend or FakeBackend()],  # type: ignore[list-item]
        console=MockConsole(),
        settle=SettleConfig(attempts=2, delay=0.0),
        lookup=registry.find,
        sleep=lambda _s: None,
    )
    return Dispatcher(
        registry=registry,
        detector=detector,  # type: ignore[arg-type]
        provisioner=provisioner,
        smoke=SmokeTester(runner=runner or MockCommandRunner()),
    )


class TestResolve:
    def test_names_deduplicated_in_order(self) -> None:
        resolution = _dispatcher({}).resolve(Target.tools("gh", "git", "GH"))
        assert [t.name for t in resolution.tools] == ["gh", "git"]
        assert resolution.unknown == ()

    def test_group_name_in_list_expands(self) -> None:
        resolution = _dispatcher({}).resolve(Target.tools("git", "vcs"))
        assert [t.name for t in resolution.tools] == ["git", "gh"]

    def test_dev_tools_group(self) -> None:
        resolution = _dispatcher({}).resolve(Target.of_group("dev-tools"))
        names = [t.name for t in resolution.tools]
        assert names == ["git", "gh", "vscode", "docker", "python", "nodejs", "go", "rust"]

    def test_unknown_group(self) -> None:
        resolution = _dispatcher({}).resolve(Target.of_group("dev-tool"))
        assert resolution.tools == ()
        assert resolution.unknown[0].kind == "group"
        assert "dev-tools" in resolution.unknown[0].suggestions

    def test_all(self) -> None:
        dispatcher = _dispatcher({})
        assert dispatcher.resolve(Target.all()).tools == dispatcher.registry.all()


class TestBatch:
    def test_mixed_batch_with_unknown_name(self) -> None:
        dispatcher = _dispatcher({"git": _found("2.42.0"), "rust": _found("1.74.1")})

        report = dispatcher.run(Target.tools("git", "rust", "nonexistent"), Action.INSTALL)

        tool_outcomes = [o for o in report.outcomes if not o.is_usage_error]
        unknown = [o for o in report.outcomes if o.is_usage_error]
        assert [o.name for o in tool_outcomes] == ["git", "rust"]
        assert all("already installed" in o.message for o in tool_outcomes)
        assert len(unknown) == 1
        assert isinstance(unknown[0].error, UnknownTarget)
        assert report.attempted == 2
        assert report.succeeded == 2
        assert report.failed == 0
        assert report.usage_errors == 1
        assert not report.ok
        assert report.exit_code == ErrorCode.FAILURE

    def test_failure_does_not_stop_batch(self) -> None:
        backend = FakeBackend()
        dispatcher = _dispatcher({}, backend=backend)

        report = dispatcher.run(Target.tools("git", "gh"), Action.INSTALL)

        assert report.attempted == 2
        assert report.failed == 2
        assert backend.calls == ["Git.Git", "GitHub.cli"]

    def test_on_outcome_streams_results(self) -> None:
        seen: list[ToolOutcome] = []
        dispatcher = _dispatcher({"git": _found()})

        report = dispatcher.run(Target.tools("git", "gh"), Action.CHECK, on_outcome=seen.append)

        assert seen == report.outcomes

    def test_unexpected_exception_becomes_failed_outcome(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        dispatcher = _dispatcher({})

        def explode(*_args: object) -> object:
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(dispatcher, "_apply", explode)
        report = dispatcher.run(Target.tools("git", "gh"), Action.STATUS)

        assert report.failed == 2
        assert "disk on fire" in report.outcomes[0].message


class TestActions:
    def test_check(self) -> None:
        report = _dispatcher({"git": _found()}).run(Target.tools("git", "gh"), Action.CHECK)
        assert [o.ok for o in report.outcomes] == [True, False]
        assert report.exit_code == ErrorCode.FAILURE

    def test_status_is_informational(self) -> None:
        report = _dispatcher({"git": _found()}).run(Target.tools("git", "gh"), Action.STATUS)
        assert report.ok
        assert report.outcomes[1].message == "not installed"

    def test_status_fails_on_detection_error(self) -> None:
        dispatcher = _dispatcher({"git": DetectionResult.failed("boom")})
        report = dispatcher.run(Target.tools("git"), Action.STATUS)
        assert not report.ok
        assert report.outcomes[0].detection is not None
        assert report.outcomes[0].detection.status == DetectionStatus.ERROR

    def test_test_runs_smoke_tests(self) -> None:
        runner = MockCommandRunner()
        report = _dispatcher({"git": _found()}, runner=runner).run(Target.tools("git"), Action.TEST)

        outcome = report.outcomes[0]
        assert outcome.ok
        assert len(outcome.tests) == 2
        assert "2/2" in outcome.message

    def test_test_fails_when_smoke_test_fails(self) -> None:
        report = _dispatcher({"git": _found()}, runner=MockCommandRunner(ok=False)).run(
            Target.tools("git"), Action.TEST
        )
        assert not report.outcomes[0].ok
        assert report.outcomes[0].error is not None

    def test_test_requires_installation(self) -> None:
        runner = MockCommandRunner()
        report = _dispatcher({}, runner=runner).run(Target.tools("git"), Action.TEST)
        assert not report.ok
        assert runner.calls == []

    def test_test_without_smoke_tests_passes_on_detection(self) -> None:
        report = _dispatcher({"chrome": _found("120.0")}).run(Target.tools("chrome"), Action.TEST)
        assert report.ok
        assert "no smoke tests" in report.outcomes[0].message

    def test_help_always_ok(self) -> None:
        report = _dispatcher({}).run(Target.tools("git"), Action.HELP)
        assert report.ok
        assert report.outcomes[0].descriptor is not None

    def test_update_not_installed(self) -> None:
        report = _dispatcher({}).run(Target.tools("git"), Action.UPDATE)
        assert not report.ok
        assert "not installed" in report.outcomes[0].message


class TestFromConfig:
    def test_wires_backends_in_configured_order(self) -> None:
        config = Config.from_dict({"backends": {"order": ["scoop", "winget"]}})
        dispatcher = Dispatcher.from_config(
            config,
            registry=Registry.default(),
            console=MockConsole(),
            runner=MockCommandRunner(),
        )
        assert [b.name for b in dispatcher._provisioner.backends] == ["scoop", "winget"]
