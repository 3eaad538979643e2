"""Output abstraction layer."""

from .console import (
    ConsoleProtocol,
    MockConsole,
    ProgressCallback,
    RichConsole,
    Style,
)

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "ProgressCallback",
    "RichConsole",
    "Style",
]
