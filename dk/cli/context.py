from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from dk.core.config import Config, default_config_path, load_config, load_config_or_default
from dk.core.errors import ErrorCode
from dk.core.result import Err
from dk.output.console import ConsoleProtocol, RichConsole
from dk.platform.detection import Platform, detect_platform
from dk.platform.process import CommandRunner, SubprocessRunner
from dk.services.dispatcher import Dispatcher
from dk.tools.registry import Registry


@dataclass(frozen=True, slots=True)
class CLIContext:
    platform: Platform
    config: Config
    console: ConsoleProtocol
    registry: Registry
    runner: CommandRunner

    def dispatcher(self) -> Dispatcher:
        return Dispatcher.from_config(
            self.config,
            registry=self.registry,
            console=self.console,
            runner=self.runner,
        )


def build_context(*, config_path: Path | None = None, quiet: bool = False) -> CLIContext:
    """Load config and wire the console, registry and process runner.

    An explicit --config must exist; the default location may be absent.
    """
    if config_path is not None:
        config_result = load_config(config_path.expanduser())
    else:
        config_result = load_config_or_default(default_config_path())

    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.FAILURE))

    return CLIContext(
        platform=detect_platform(),
        config=config_result.value,
        console=RichConsole(quiet=quiet),
        registry=Registry.default(),
        runner=SubprocessRunner(),
    )
