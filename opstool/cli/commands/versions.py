"""Version commands: install, use, activate, list, which, status."""

from __future__ import annotations

import typer

from opstool.cli.commands._helpers import exit_on_error
from opstool.cli.context import build_context
from opstool.output.console import Style
from opstool.tools.resolver import LATEST

_TOOL = typer.Argument(..., help="Tool name (see `opstool tools`).")
_FORCE = typer.Option(False, "--force", help="Download again even if already installed.")


def install(
    tool: str = _TOOL,
    version: str = typer.Argument(LATEST, help="Exact version, or 'latest'."),
    force: bool = _FORCE,
) -> None:
    """Download and install a version without activating it."""
    ctx = build_context()
    outcome = exit_on_error(ctx.manager.install(tool, version, force=force), ctx)
    ctx.console.print(str(outcome.installed.binary_path), Style.DIM)


def use(
    tool: str = _TOOL,
    version: str = typer.Argument(LATEST, help="Exact version, or 'latest'."),
    force: bool = _FORCE,
) -> None:
    """Install a version if needed and make it the active one."""
    ctx = build_context()
    outcome = exit_on_error(ctx.manager.use(tool, version, force=force), ctx)
    ctx.console.print(f"{outcome.link.link_path} -> {outcome.link.target}", Style.DIM)


def activate(
    tool: str = _TOOL,
    version: str = typer.Argument(..., help="Installed version, or 'latest' for the newest."),
) -> None:
    """Switch the active version to an installed one (never downloads)."""
    ctx = build_context()
    exit_on_error(ctx.manager.activate(tool, version), ctx)


def list_versions(tool: str = _TOOL) -> None:
    """List installed versions of a tool, oldest first."""
    ctx = build_context()
    entries = exit_on_error(ctx.manager.list_installed(tool), ctx)
    if not entries:
        ctx.console.print(f"no versions of {tool} installed", Style.DIM)
        return

    [current] = exit_on_error(ctx.manager.status(tool), ctx)
    for entry in entries:
        if entry.version == current.active_version:
            ctx.console.print(f"* {entry.version}", Style.SUCCESS)
        else:
            ctx.console.print(f"  {entry.version}")


def which(
    tool: str = _TOOL,
    version: str | None = typer.Argument(None, help="Installed version (default: active)."),
) -> None:
    """Print the binary path of an installed version."""
    ctx = build_context()
    path = exit_on_error(ctx.manager.which(tool, version), ctx)
    ctx.console.print(str(path))


def status(
    tool: str | None = typer.Argument(None, help="Only show this tool."),
) -> None:
    """Show installed and active versions."""
    ctx = build_context()
    statuses = exit_on_error(ctx.manager.status(tool), ctx)

    ctx.console.print(f"base: {ctx.base_dir}", Style.DIM)
    ctx.console.print(f"platform: {ctx.platform}", Style.DIM)
    if not statuses:
        ctx.console.print("nothing installed", Style.DIM)
        return

    for entry in statuses:
        ctx.console.header(entry.tool)
        if entry.active is None:
            ctx.console.print("active: none", Style.DIM)
        elif entry.active.is_dangling:
            ctx.console.warning(f"active link is dangling: {entry.active.target}")
        else:
            ctx.console.print(f"active: {entry.active.target_version}", Style.SUCCESS)

        versions = ", ".join(e.version for e in entry.installed) or "none"
        ctx.console.print(f"installed: {versions}")
