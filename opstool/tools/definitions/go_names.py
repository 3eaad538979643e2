"""OS/arch spellings shared by tools built with Go's release conventions."""

from __future__ import annotations

__all__ = ["GO_ARCH_NAMES", "GO_OS_NAMES"]

# Keys are str(Platform) / str(Arch).
GO_OS_NAMES: dict[str, str] = {
    "linux": "linux",
    "macos": "darwin",
}

GO_ARCH_NAMES: dict[str, str] = {
    "x64": "amd64",
    "arm64": "arm64",
}
