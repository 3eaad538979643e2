"""Application services for opstool.

Services coordinate the engine (tools/) and report progress through the
output layer; the CLI only parses arguments and maps errors to exit codes.
"""

from opstool.services.versions import (
    InstallOutcome,
    ToolStatus,
    UseOutcome,
    VersionManager,
    create_manager,
)

__all__ = [
    "InstallOutcome",
    "ToolStatus",
    "UseOutcome",
    "VersionManager",
    "create_manager",
]
