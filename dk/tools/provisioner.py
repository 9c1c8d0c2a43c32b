"""Install, update and uninstall tools through package-manager backends.

For every state-changing request the provisioner:
1. Detects the tool (install short-circuits if it is already there)
2. Tries each eligible backend once, in priority order, until one succeeds
3. Confirms the result by re-detecting inside a bounded settle window

A backend failure falls through to the next backend; a success stops the
walk, so lower-priority backends never run after a higher one succeeded.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from dataclasses import replace

from dk.core.config import SettleConfig
from dk.core.result import Ok
from dk.output.console import ConsoleProtocol, Style
from dk.tools.backends import Backend
from dk.tools.descriptor import ToolDescriptor
from dk.tools.detector import Detector
from dk.tools.errors import (
    BackendUnavailable,
    ConfirmationFailed,
    NotInstalled,
    ProvisionError,
    describe_error,
)
from dk.tools.model import (
    Action,
    AttemptOutcome,
    BackendAttempt,
    DetectionResult,
    ProvisionOptions,
    ProvisionResult,
)

__all__ = ["Provisioner"]


class Provisioner:
    """Performs state-changing actions for one tool at a time.

    Args:
        detector: Used for the pre-check and for confirmation
        backends: Backends in priority order (highest first)
        console: Progress output
        settle: Confirmation retry window
        lookup: Resolves companion names to descriptors
        sleep: Injected for tests
    """

    def __init__(
        self,
        *,
        detector: Detector,
        backends: Sequence[Backend],
        console: ConsoleProtocol,
        settle: SettleConfig | None = None,
        lookup: Callable[[str], ToolDescriptor | None] | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._detector = detector
        self._backends = tuple(backends)
        self._console = console
        self._settle = settle or SettleConfig()
        self._lookup = lookup
        self._sleep = sleep

    @property
    def backends(self) -> tuple[Backend, ...]:
        return self._backends

    def provision(
        self,
        descriptor: ToolDescriptor,
        action: Action,
        options: ProvisionOptions | None = None,
    ) -> ProvisionResult:
        """Run a state-changing action.

        Raises:
            ValueError: If the action does not change state.
        """
        opts = options or ProvisionOptions()
        match action:
            case Action.INSTALL:
                return self._install(descriptor, opts, visited=set())
            case Action.UPDATE:
                return self._update(descriptor, opts)
            case Action.UNINSTALL:
                return self._uninstall(descriptor, opts)
            case _:
                raise ValueError(f"{action} does not change state")

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def _install(
        self, descriptor: ToolDescriptor, options: ProvisionOptions, *, visited: set[str]
    ) -> ProvisionResult:
        visited.add(descriptor.name)

        before = self._detector.detect(descriptor)
        if before.installed and not options.force:
            return ProvisionResult(
                action=Action.INSTALL,
                succeeded=True,
                message=f"{descriptor.display_name} already installed ({before.describe()})",
                detection=before,
            )

        attempts, backend = self._run_backends(descriptor, Action.INSTALL, options)
        if backend is None:
            return self._backends_failed(descriptor, Action.INSTALL, attempts, before)

        after = self._confirm(descriptor, expect_installed=True)
        if not after.installed:
            return self._unconfirmed(descriptor, Action.INSTALL, backend, attempts, after)

        message = f"{descriptor.display_name} installed via {backend} ({after.describe()})"
        failed = self._install_companions(descriptor, options, visited)
        if failed:
            message += f"; companion(s) failed: {', '.join(failed)}"

        return ProvisionResult(
            action=Action.INSTALL,
            succeeded=True,
            message=message,
            backend_used=backend,
            attempts=tuple(attempts),
            detection=after,
        )

    def _update(self, descriptor: ToolDescriptor, options: ProvisionOptions) -> ProvisionResult:
        before = self._detector.detect(descriptor)
        if not before.installed:
            error = NotInstalled(tool=descriptor.name)
            return ProvisionResult(
                action=Action.UPDATE,
                succeeded=False,
                message=describe_error(error),
                error=error,
                detection=before,
            )

        attempts, backend = self._run_backends(descriptor, Action.UPDATE, options)
        if backend is None:
            return self._backends_failed(descriptor, Action.UPDATE, attempts, before)

        after = self._confirm(descriptor, expect_installed=True)
        if not after.installed:
            return self._unconfirmed(descriptor, Action.UPDATE, backend, attempts, after)

        if before.version and after.version and before.version != after.version:
            change = f"{before.version} -> {after.version}"
        else:
            change = after.describe()
        return ProvisionResult(
            action=Action.UPDATE,
            succeeded=True,
            message=f"{descriptor.display_name} updated via {backend} ({change})",
            backend_used=backend,
            attempts=tuple(attempts),
            detection=after,
        )

    def _uninstall(
        self, descriptor: ToolDescriptor, options: ProvisionOptions
    ) -> ProvisionResult:
        before = self._detector.detect(descriptor)
        if not before.installed and not options.force:
            return ProvisionResult(
                action=Action.UNINSTALL,
                succeeded=True,
                message=f"{descriptor.display_name} not installed",
                detection=before,
            )

        attempts, backend = self._run_backends(descriptor, Action.UNINSTALL, options)
        if backend is None:
            return self._backends_failed(descriptor, Action.UNINSTALL, attempts, before)

        after = self._confirm(descriptor, expect_installed=False)
        message = f"{descriptor.display_name} uninstalled via {backend}"
        if after.installed:
            # Another installation (different manager, manual copy) shadows it.
            message += f"; still found at {after.location}"
        return ProvisionResult(
            action=Action.UNINSTALL,
            succeeded=True,
            message=message,
            backend_used=backend,
            attempts=tuple(attempts),
            detection=after,
        )

    # -------------------------------------------------------------------------
    # Backend walk
    # -------------------------------------------------------------------------

    def _run_backends(
        self, descriptor: ToolDescriptor, action: Action, options: ProvisionOptions
    ) -> tuple[list[BackendAttempt], str | None]:
        """Try eligible backends in order until one succeeds.

        Returns:
            The attempt trail and the name of the backend that succeeded
            (None if all failed or none was eligible).
        """
        attempts: list[BackendAttempt] = []
        for backend in self._backends:
            package_id = descriptor.package_id(backend.name)
            if package_id is None or not backend.supports(action):
                continue
            if not backend.is_available():
                attempts.append(
                    BackendAttempt(backend.name, AttemptOutcome.UNAVAILABLE, "not installed")
                )
                continue

            self._console.info(f"{descriptor.name}: {action.verb} via {backend.name} ({package_id})")
            result = backend.run(action, package_id, options)
            if isinstance(result, Ok):
                attempts.append(BackendAttempt(backend.name, AttemptOutcome.SUCCEEDED))
                return attempts, backend.name

            detail = describe_error(result.error)
            attempts.append(
                BackendAttempt(backend.name, AttemptOutcome.FAILED, detail, error=result.error)
            )
            self._console.warning(f"{descriptor.name}: {detail}")

        return attempts, None

    def _backends_failed(
        self,
        descriptor: ToolDescriptor,
        action: Action,
        attempts: list[BackendAttempt],
        detection: DetectionResult,
    ) -> ProvisionResult:
        error: ProvisionError
        failures = [a.error for a in attempts if a.error is not None]
        if failures:
            error = failures[-1]
            details = "; ".join(a.detail for a in attempts if a.outcome == AttemptOutcome.FAILED)
            message = f"{action} failed for {descriptor.name}: {details}"
        else:
            error = BackendUnavailable(
                tool=descriptor.name,
                action=str(action),
                considered=tuple(a.backend for a in attempts),
            )
            message = describe_error(error)

        return ProvisionResult(
            action=action,
            succeeded=False,
            message=message,
            attempts=tuple(attempts),
            error=error,
            detection=detection,
        )

    # -------------------------------------------------------------------------
    # Confirmation
    # -------------------------------------------------------------------------

    def _confirm(self, descriptor: ToolDescriptor, *, expect_installed: bool) -> DetectionResult:
        """Re-detect until the expected state shows up or the window closes."""
        result = self._detector.detect(descriptor)
        for delay in self._settle.delays():
            if result.installed == expect_installed:
                break
            self._console.print(
                f"  waiting {delay:g}s for {descriptor.name} to settle", Style.DIM
            )
            self._sleep(delay)
            result = self._detector.detect(descriptor)
        return result

    def _unconfirmed(
        self,
        descriptor: ToolDescriptor,
        action: Action,
        backend: str,
        attempts: list[BackendAttempt],
        detection: DetectionResult,
    ) -> ProvisionResult:
        error = ConfirmationFailed(
            tool=descriptor.name,
            backend=backend,
            attempts=len(self._settle.delays()) + 1,
        )
        return ProvisionResult(
            action=action,
            succeeded=False,
            message=describe_error(error),
            backend_used=backend,
            attempts=tuple(attempts),
            error=error,
            detection=detection,
        )

    # -------------------------------------------------------------------------
    # Companions
    # -------------------------------------------------------------------------

    def _install_companions(
        self, descriptor: ToolDescriptor, options: ProvisionOptions, visited: set[str]
    ) -> list[str]:
        """Install sub-tools after a parent install. Returns names that failed."""
        if not descriptor.companions or self._lookup is None:
            return []

        failed: list[str] = []
        companion_options = replace(options, force=False)
        for name in descriptor.companions:
            if name in visited:
                continue
            companion = self._lookup(name)
            if companion is None:
                failed.append(name)
                continue
            self._console.info(f"{descriptor.name}: provisioning companion {name}")
            result = self._install(companion, companion_options, visited=visited)
            if result.succeeded:
                self._console.success(result.message)
            else:
                self._console.warning(f"{name}: {result.message}")
                failed.append(name)
        return failed
