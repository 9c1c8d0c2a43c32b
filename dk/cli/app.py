from __future__ import annotations

import typer

from dk.cli.commands.tool import tool

app = typer.Typer(
    add_completion=False,
    rich_markup_mode="rich",
)

app.command(no_args_is_help=True)(tool)


def main() -> None:
    app()
