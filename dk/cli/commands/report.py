"""Rendering of dispatch outcomes, tool help and listings."""

from __future__ import annotations

from dk.output.console import ConsoleProtocol, Style
from dk.services.dispatcher import BatchReport, ToolOutcome
from dk.tools.descriptor import ToolDescriptor
from dk.tools.model import Action, AttemptOutcome, DetectionStatus
from dk.tools.registry import Registry


def print_outcome(console: ConsoleProtocol, outcome: ToolOutcome, *, detailed: bool = False) -> None:
    """Print one per-tool line, plus detail lines in detailed mode."""
    if outcome.is_usage_error or outcome.descriptor is None:
        console.error(outcome.message)
        return

    descriptor = outcome.descriptor
    if outcome.action == Action.HELP:
        print_help(console, descriptor)
        return

    line = f"{descriptor.name}: {outcome.message}"
    if outcome.action == Action.STATUS:
        _print_status_line(console, outcome, line)
    elif outcome.ok:
        console.success(line)
    else:
        console.error(line)

    if detailed:
        _print_details(console, outcome)


def _print_status_line(console: ConsoleProtocol, outcome: ToolOutcome, line: str) -> None:
    detection = outcome.detection
    if detection is None or detection.status == DetectionStatus.ERROR:
        console.error(line)
    elif detection.installed:
        console.success(line)
    else:
        console.print(f"  {line}", Style.DIM)


def _print_details(console: ConsoleProtocol, outcome: ToolOutcome) -> None:
    detection = outcome.detection
    if detection is not None:
        if detection.executable_path is not None:
            console.print(f"    executable: {detection.executable_path}", Style.DIM)
        if detection.install_path is not None:
            console.print(f"    install path: {detection.install_path}", Style.DIM)

    descriptor = outcome.descriptor
    if outcome.action == Action.STATUS and descriptor is not None and descriptor.packages:
        console.print(f"    packages: {_format_packages(descriptor)}", Style.DIM)

    if outcome.provision is not None:
        for attempt in outcome.provision.attempts:
            style = Style.DIM if attempt.outcome == AttemptOutcome.SUCCEEDED else Style.WARNING
            text = f"    {attempt.backend}: {attempt.outcome}"
            if attempt.detail:
                text += f" ({attempt.detail})"
            console.print(text, style)

    for result in outcome.tests:
        mark = "pass" if result.passed else "FAIL"
        text = f"    {mark} {result.test.display}"
        if result.error is not None:
            text += f": {result.error.reason}"
        elif result.output:
            text += f" -> {result.output}"
        console.print(text, Style.DIM if result.passed else Style.WARNING)


def _format_packages(descriptor: ToolDescriptor) -> str:
    return ", ".join(f"{backend}={pkg}" for backend, pkg in descriptor.packages.items())


def print_help(console: ConsoleProtocol, descriptor: ToolDescriptor) -> None:
    console.header(f"{descriptor.display_name} ({descriptor.name})")
    if descriptor.description:
        console.print(descriptor.description)
    console.print(f"category: {descriptor.category}", Style.DIM)
    console.print(f"executables: {', '.join(descriptor.executables)}", Style.DIM)
    if descriptor.version is not None:
        console.print(f"version probe: {' '.join(descriptor.version.args)}", Style.DIM)
    if descriptor.packages:
        console.print(f"packages: {_format_packages(descriptor)}", Style.DIM)
    else:
        console.print("packages: none (detection only)", Style.DIM)
    for test in descriptor.tests:
        console.print(f"test: {test.display}", Style.DIM)
    if descriptor.companions:
        console.print(f"companions: {', '.join(descriptor.companions)}", Style.DIM)
    console.print(f"actions: {', '.join(Action.names())}", Style.DIM)


def print_listing(console: ConsoleProtocol, registry: Registry) -> None:
    """List every tool by category, then the groups."""
    for category, tools in registry.by_category().items():
        console.header(category)
        width = max(len(t.name) for t in tools)
        for tool in tools:
            backends = ", ".join(tool.packages) or "-"
            console.print(f"  {tool.name:<{width}}  {tool.display_name} [{backends}]")

    console.header("groups")
    for name, members in registry.groups().items():
        console.print(f"  {name}: {', '.join(members)}")


def print_summary(console: ConsoleProtocol, report: BatchReport) -> None:
    parts = [f"{report.succeeded}/{report.attempted} ok"]
    if report.failed:
        parts.append(f"{report.failed} failed")
    if report.usage_errors:
        parts.append(f"{report.usage_errors} unknown")
    console.summary(f"{report.action}: {', '.join(parts)}", ok=report.ok)
