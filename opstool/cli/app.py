from __future__ import annotations

import os
from pathlib import Path

import typer

from opstool import __version__
from opstool.cli.commands.tools import tools
from opstool.cli.commands.versions import (
    activate,
    install,
    list_versions,
    status,
    use,
    which,
)
from opstool.cli.context import CONFIG_ENV
from opstool.core.config import BASE_DIR_ENV
from opstool.core.errors import ErrorCode


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(use)
app.command()(install)
app.command()(activate)
app.command("list")(list_versions)
app.command()(which)
app.command()(status)
app.command()(tools)


@app.callback(invoke_without_command=True)
def _main(  # pyright: ignore[reportUnusedFunction]
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    base_dir: Path | None = typer.Option(
        None,
        "--base-dir",
        help="Directory holding the tool links (overrides OPSTOOL_BASE_DIR and config).",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="Config file (default: ~/.config/opstool/config.toml).",
    ),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if base_dir is not None:
        try:
            root = base_dir.expanduser().resolve()
        except OSError as e:
            typer.echo(f"error: invalid --base-dir: {e}", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))

        if not root.is_dir():
            typer.echo(f"error: --base-dir '{root}' is not a directory", err=True)
            raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

        os.environ[BASE_DIR_ENV] = str(root)

    if config is not None:
        os.environ[CONFIG_ENV] = str(config.expanduser())

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)


def main() -> None:
    app()
