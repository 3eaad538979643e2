"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

import typer

from opstool.core.result import Err, Result
from opstool.output.errors import engine_error_exit_code, print_engine_error

if TYPE_CHECKING:
    from opstool.cli.context import CLIContext
    from opstool.tools.errors import EngineError


def exit_on_error[T](result: Result[T, EngineError], ctx: CLIContext) -> T:
    """Return the value of an Ok result, or report the error and exit.

    This helper reduces boilerplate for the common pattern:
        match result:
            case Err(e):
                print_engine_error(e, ctx.console)
                raise typer.Exit(code=engine_error_exit_code(e))
            case Ok(value):
                ...

    The exit code depends on the failing stage and error kind.
    """
    if isinstance(result, Err):
        error = result.error
        print_engine_error(error, ctx.console)
        raise typer.Exit(code=engine_error_exit_code(error))
    return result.value
