"""Error presentation utilities.

Centralized engine error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from opstool.core.errors import ErrorCode
from opstool.output.console import Style
from opstool.tools.errors import ActivationError, FetchError, ResolutionError, StoreError

if TYPE_CHECKING:
    from opstool.output.console import ConsoleProtocol
    from opstool.tools.errors import EngineError

__all__ = ["print_engine_error", "engine_error_exit_code"]


def print_engine_error(error: EngineError, console: ConsoleProtocol) -> None:
    """Print an engine error with the stage it failed in."""
    console.error(f"{error.message} [{error.stage}: {error.kind}]")
    match error:
        case FetchError(url=url, attempts=attempts) if attempts > 1:
            console.print(f"url: {url} ({attempts} attempts)", Style.DIM)
        case FetchError(url=url):
            console.print(f"url: {url}", Style.DIM)
        case _:
            pass
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def engine_error_exit_code(error: EngineError) -> int:
    """Get exit code for an engine error."""
    match error:
        case ResolutionError(kind="unknown_tool" | "version_not_found"):
            return int(ErrorCode.USER_ERROR)
        case ResolutionError(kind="unsupported_platform"):
            return int(ErrorCode.ENV_ERROR)
        case ResolutionError(kind="latest_lookup_failed"):
            return int(ErrorCode.NETWORK_ERROR)
        case FetchError(kind="io"):
            return int(ErrorCode.IO_ERROR)
        case FetchError():
            return int(ErrorCode.NETWORK_ERROR)
        case StoreError(kind="not_installed") | ActivationError(kind="not_installed" | "not_a_link"):
            return int(ErrorCode.USER_ERROR)
        case StoreError(kind="base_dir_missing") | ActivationError(
            kind="base_dir_missing" | "permission_denied"
        ):
            return int(ErrorCode.ENV_ERROR)
        case StoreError() | ActivationError():
            return int(ErrorCode.IO_ERROR)
    return int(ErrorCode.USER_ERROR)
