from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer

from dk import __version__
from dk.cli.commands.report import print_listing, print_outcome, print_summary
from dk.cli.context import CLIContext, build_context
from dk.core.errors import ErrorCode
from dk.output.console import Style
from dk.services.dispatcher import Target
from dk.tools.model import Action, ProvisionOptions


def tool(
    target: str | None = typer.Argument(
        None,
        help="Tool name, comma-separated names, or a group name.",
        show_default=False,
    ),
    action: str | None = typer.Argument(
        None,
        help=f"One of: {', '.join(Action.names())} (default: status).",
        show_default=False,
    ),
    all_tools: bool = typer.Option(False, "--all", help="Apply the action to every tool."),
    group: str | None = typer.Option(None, "--group", help="Apply the action to a tool group."),
    status: bool = typer.Option(False, "--status", help="Show the status of every tool."),
    module: str | None = typer.Option(
        None, "--module", help="With --status: only this tool or group."
    ),
    list_tools: bool = typer.Option(False, "--list", help="List tools and groups."),
    force: bool = typer.Option(False, "--force", help="Reinstall even if already installed."),
    silent: bool = typer.Option(False, "--silent", help="Ask backends for silent installs."),
    detailed: bool = typer.Option(False, "--detailed", help="Show paths, backends and tests."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only warnings, errors and summary."),
    config: Path | None = typer.Option(None, "--config", help="Config file path."),
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    """Detect, install, test and update developer tools.

    Examples: dk git install, dk git,gh check, dk --group dev-tools status,
    dk --all check, dk --status --module languages
    """
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    ctx = build_context(config_path=config, quiet=quiet)

    positionals = [arg for arg in (target, action) if arg is not None]
    if module is not None and not status:
        _usage_error(ctx, "--module requires --status")
    if list_tools and (positionals or status or all_tools or group is not None):
        _usage_error(ctx, "--list takes no tool, action or other mode")
    if status and (positionals or all_tools or group is not None):
        extra = positionals[0] if positionals else ("--all" if all_tools else "--group")
        _usage_error(ctx, f"--status takes no {extra} (use --module)")

    if list_tools:
        print_listing(ctx.console, ctx.registry)
        return

    if status:
        selected = Target.tools(module) if module else Target.all()
        _dispatch(ctx, selected, Action.STATUS, ProvisionOptions(), detailed=detailed)
        return

    if all_tools and group is not None:
        _usage_error(ctx, "--all and --group are mutually exclusive")

    if all_tools or group is not None:
        # The single positional is the action here: `dk --all install`.
        if action is not None and target is not None:
            _usage_error(ctx, f"unexpected argument: {target}")
        action_text = action if action is not None else target
        selected = Target.all() if all_tools else Target.of_group(group or "")
    else:
        if target is None:
            _usage_error(ctx, "missing tool name (see --list)")
        names = [n.strip() for n in (target or "").split(",") if n.strip()]
        if not names:
            _usage_error(ctx, "missing tool name (see --list)")
        action_text = action
        selected = Target.tools(*names)

    parsed = Action.parse(action_text) if action_text is not None else Action.STATUS
    if parsed is None:
        _usage_error(ctx, f"unknown action: {action_text} (expected {', '.join(Action.names())})")

    options = ProvisionOptions(force=force, silent=silent)
    _dispatch(ctx, selected, parsed, options, detailed=detailed)


def _dispatch(
    ctx: CLIContext,
    target: Target,
    action: Action,
    options: ProvisionOptions,
    *,
    detailed: bool,
) -> None:
    if detailed:
        ctx.console.print(f"platform: {ctx.platform}", Style.DIM)
        ctx.console.print(f"backends: {', '.join(ctx.config.backends.order)}", Style.DIM)

    dispatcher = ctx.dispatcher()
    report = dispatcher.run(
        target,
        action,
        options,
        on_outcome=lambda outcome: print_outcome(ctx.console, outcome, detailed=detailed),
    )
    print_summary(ctx.console, report)
    if not report.ok:
        raise typer.Exit(code=int(report.exit_code))


def _usage_error(ctx: CLIContext, message: str) -> NoReturn:
    ctx.console.error(message)
    raise typer.Exit(code=int(ErrorCode.FAILURE))
