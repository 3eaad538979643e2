"""Error codes for CLI exit status.

The numeric values are process exit codes and must stay stable:
- 0: Success
- 1: User error (unknown tool, malformed version)
- 2: Environment error (unsupported platform, missing base directory)
- 4: Network error (download failed, release API unreachable)
- 5: I/O error (store or link could not be written)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands."""

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        """Check if this code indicates success."""
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        """Check if this code indicates an error."""
        return self != ErrorCode.OK
