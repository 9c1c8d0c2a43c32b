"""Apply one action to a batch of tools.

The dispatcher resolves a target (tool names, a group, or everything) into
an ordered, duplicate-free list of descriptors, runs the action on each in
turn and aggregates the outcomes. A failing tool never stops the batch;
unknown names are collected as usage errors alongside the real results.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from dk.core.config import Config
from dk.core.errors import ErrorCode
from dk.output.console import ConsoleProtocol
from dk.platform.process import CommandRunner, SubprocessRunner
from dk.tools.backends import build_backends
from dk.tools.descriptor import ToolDescriptor
from dk.tools.detector import Detector
from dk.tools.errors import ProvisionError, UnknownTarget, describe_error
from dk.tools.model import (
    Action,
    DetectionResult,
    DetectionStatus,
    ProvisionOptions,
    ProvisionResult,
)
from dk.tools.provisioner import Provisioner
from dk.tools.registry import GroupNotFoundError, Registry
from dk.tools.smoke import SmokeTester, SmokeTestResult

__all__ = ["BatchReport", "Dispatcher", "Resolution", "Target", "ToolOutcome"]


@dataclass(frozen=True, slots=True)
class Target:
    """What a command applies to.

    Exactly one of names / group / everything is meaningful. Names may
    also be group names, which expand in place.
    """

    names: tuple[str, ...] = ()
    group: str | None = None
    everything: bool = False

    @classmethod
    def tools(cls, *names: str) -> Target:
        return cls(names=tuple(names))

    @classmethod
    def of_group(cls, name: str) -> Target:
        return cls(group=name)

    @classmethod
    def all(cls) -> Target:
        return cls(everything=True)


@dataclass(frozen=True, slots=True)
class Resolution:
    tools: tuple[ToolDescriptor, ...]
    unknown: tuple[UnknownTarget, ...] = ()


@dataclass(frozen=True, slots=True)
class ToolOutcome:
    """Result of one action on one tool (or one unresolvable name)."""

    name: str
    action: Action
    ok: bool
    message: str
    descriptor: ToolDescriptor | None = None
    detection: DetectionResult | None = None
    provision: ProvisionResult | None = None
    tests: tuple[SmokeTestResult, ...] = ()
    error: ProvisionError | None = None

    @property
    def is_usage_error(self) -> bool:
        return isinstance(self.error, UnknownTarget)


def _empty_outcomes() -> list[ToolOutcome]:
    return []


@dataclass
class BatchReport:
    """Aggregated outcomes of a dispatch."""

    action: Action
    outcomes: list[ToolOutcome] = field(default_factory=_empty_outcomes)

    @property
    def attempted(self) -> int:
        return sum(1 for o in self.outcomes if not o.is_usage_error)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if not o.ok and not o.is_usage_error)

    @property
    def usage_errors(self) -> int:
        return sum(1 for o in self.outcomes if o.is_usage_error)

    @property
    def ok(self) -> bool:
        return self.failed == 0 and self.usage_errors == 0

    @property
    def exit_code(self) -> ErrorCode:
        return ErrorCode.from_success(self.ok)


class Dispatcher:
    def __init__(
        self,
        *,
        registry: Registry,
        detector: Detector,
        provisioner: Provisioner,
        smoke: SmokeTester,
    ) -> None:
        self._registry = registry
        self._detector = detector
        self._provisioner = provisioner
        self._smoke = smoke

    @classmethod
    def from_config(
        cls,
        config: Config,
        *,
        registry: Registry,
        console: ConsoleProtocol,
        runner: CommandRunner | None = None,
    ) -> Dispatcher:
        """Wire the detection and provisioning stack from a Config."""
        runner = runner or SubprocessRunner()
        detector = Detector(runner=runner, probe_timeout=config.timeouts.probe)
        backends = build_backends(
            config.backends.order,
            runner=runner,
            timeout=config.timeouts.install,
        )
        provisioner = Provisioner(
            detector=detector,
            backends=backends,
            console=console,
            settle=config.settle,
            lookup=registry.find,
        )
        return cls(
            registry=registry,
            detector=detector,
            provisioner=provisioner,
            smoke=SmokeTester(runner=runner, timeout=config.timeouts.probe),
        )

    @property
    def registry(self) -> Registry:
        return self._registry

    def resolve(self, target: Target) -> Resolution:
        """Turn a target into descriptors, keeping first-seen order."""
        if target.everything:
            return Resolution(tools=self._registry.all())

        if target.group is not None:
            try:
                return Resolution(tools=self._registry.group(target.group))
            except GroupNotFoundError as e:
                return Resolution(
                    tools=(),
                    unknown=(UnknownTarget(target.group, "group", e.suggestions),),
                )

        seen: dict[str, ToolDescriptor] = {}
        unknown: list[UnknownTarget] = []
        for name in target.names:
            descriptor = self._registry.find(name)
            if descriptor is not None:
                seen.setdefault(descriptor.name, descriptor)
            elif self._registry.is_group(name):
                for member in self._registry.group(name):
                    seen.setdefault(member.name, member)
            else:
                unknown.append(UnknownTarget(name, "tool", tuple(self._registry.suggest(name))))
        return Resolution(tools=tuple(seen.values()), unknown=tuple(unknown))

    def run(
        self,
        target: Target,
        action: Action,
        options: ProvisionOptions | None = None,
        *,
        on_outcome: Callable[[ToolOutcome], None] | None = None,
    ) -> BatchReport:
        """Apply an action to every resolved tool, sequentially.

        on_outcome is called as each outcome is produced, so callers can
        render progress while long installs run.
        """
        opts = options or ProvisionOptions()
        resolution = self.resolve(target)
        report = BatchReport(action=action)

        def emit(outcome: ToolOutcome) -> None:
            report.outcomes.append(outcome)
            if on_outcome is not None:
                on_outcome(outcome)

        for error in resolution.unknown:
            emit(
                ToolOutcome(
                    name=error.name,
                    action=action,
                    ok=False,
                    message=describe_error(error),
                    error=error,
                )
            )
        for descriptor in resolution.tools:
            emit(self.apply(descriptor, action, opts))
        return report

    def apply(
        self, descriptor: ToolDescriptor, action: Action, options: ProvisionOptions
    ) -> ToolOutcome:
        """Apply an action to one tool. Never raises."""
        try:
            return self._apply(descriptor, action, options)
        except Exception as e:  # noqa: BLE001
            return ToolOutcome(
                name=descriptor.name,
                action=action,
                ok=False,
                message=f"{action} failed: {type(e).__name__}: {e}",
                descriptor=descriptor,
            )

    def _apply(
        self, descriptor: ToolDescriptor, action: Action, options: ProvisionOptions
    ) -> ToolOutcome:
        match action:
            case Action.CHECK:
                detection = self._detector.detect(descriptor)
                return self._outcome(descriptor, action, detection.installed, detection)
            case Action.STATUS:
                detection = self._detector.detect(descriptor)
                ok = detection.status != DetectionStatus.ERROR
                return self._outcome(descriptor, action, ok, detection)
            case Action.TEST:
                return self._test(descriptor)
            case Action.INSTALL | Action.UPDATE | Action.UNINSTALL:
                result = self._provisioner.provision(descriptor, action, options)
                return ToolOutcome(
                    name=descriptor.name,
                    action=action,
                    ok=result.succeeded,
                    message=result.message,
                    descriptor=descriptor,
                    detection=result.detection,
                    provision=result,
                    error=result.error,
                )
            case Action.HELP:
                return ToolOutcome(
                    name=descriptor.name,
                    action=action,
                    ok=True,
                    message=descriptor.description or descriptor.display_name,
                    descriptor=descriptor,
                )

    def _outcome(
        self,
        descriptor: ToolDescriptor,
        action: Action,
        ok: bool,
        detection: DetectionResult,
    ) -> ToolOutcome:
        return ToolOutcome(
            name=descriptor.name,
            action=action,
            ok=ok,
            message=detection.describe(),
            descriptor=descriptor,
            detection=detection,
        )

    def _test(self, descriptor: ToolDescriptor) -> ToolOutcome:
        detection = self._detector.detect(descriptor)
        if not detection.installed:
            return self._outcome(descriptor, Action.TEST, False, detection)

        tests = tuple(self._smoke.run(descriptor, detection))
        passed = sum(1 for t in tests if t.passed)
        if not tests:
            message = f"{detection.describe()} (no smoke tests)"
        else:
            message = f"{passed}/{len(tests)} smoke tests passed"
        failure = next((t.error for t in tests if t.error is not None), None)
        return ToolOutcome(
            name=descriptor.name,
            action=Action.TEST,
            ok=passed == len(tests),
            message=message,
            descriptor=descriptor,
            detection=detection,
            tests=tests,
            error=failure,
        )
