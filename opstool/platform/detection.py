"""Host platform and architecture detection.

Each tool descriptor spells operating systems and architectures its own way
("darwin" vs "macos", "amd64" vs "x86_64"). Detection here only yields the
neutral enums; the per-tool spelling lives in the descriptor alias tables.
"""

from __future__ import annotations

import os as _os
import platform as _platform
import sys as _sys
from dataclasses import dataclass
from enum import Enum, auto
from functools import lru_cache

__all__ = [
    "Platform",
    "Arch",
    "PlatformInfo",
    "detect",
    "detect_arch",
    "detect_platform",
    "is_windows",
]


class Platform(Enum):
    """Operating system; ``str()`` is the alias-table key."""

    LINUX = auto()
    MACOS = auto()
    WINDOWS = auto()
    UNKNOWN = auto()

    def __str__(self) -> str:
        return self.name.lower()


class Arch(Enum):
    """CPU architecture; ``str()`` is the alias-table key."""

    X64 = auto()
    ARM64 = auto()
    X86 = auto()
    UNKNOWN = auto()

    def __str__(self) -> str:
        return self.name.lower()


@dataclass(frozen=True, slots=True)
class PlatformInfo:
    """Host platform as an (os, arch) pair.

    Use ``detect()`` for the running host; tests build instances directly.
    """

    platform: Platform
    arch: Arch

    def __str__(self) -> str:
        return f"{self.platform}-{self.arch}"


# sys.platform prefixes, checked in order.
_SYS_PLATFORMS: tuple[tuple[str, Platform], ...] = (
    ("linux", Platform.LINUX),
    ("darwin", Platform.MACOS),
    ("win32", Platform.WINDOWS),
    ("cygwin", Platform.WINDOWS),
    ("msys", Platform.WINDOWS),
)

_MACHINES: dict[str, Arch] = {
    "x86_64": Arch.X64,
    "amd64": Arch.X64,
    "x64": Arch.X64,
    "aarch64": Arch.ARM64,
    "arm64": Arch.ARM64,
    "armv8l": Arch.ARM64,
    "i386": Arch.X86,
    "i486": Arch.X86,
    "i586": Arch.X86,
    "i686": Arch.X86,
    "x86": Arch.X86,
}


@lru_cache(maxsize=1)
def detect_platform() -> Platform:
    """Operating system of this process (cached)."""
    # sys.platform rather than platform.system(): the latter may query WMI on Windows.
    system = _sys.platform.lower()
    for prefix, found in _SYS_PLATFORMS:
        if system.startswith(prefix):
            return found
    return Platform.UNKNOWN


@lru_cache(maxsize=1)
def detect_arch() -> Arch:
    """CPU architecture of this process (cached)."""
    if detect_platform() is Platform.WINDOWS:
        # WOW64 processes see the native arch only in PROCESSOR_ARCHITEW6432.
        machine = _os.environ.get("PROCESSOR_ARCHITEW6432") or _os.environ.get(
            "PROCESSOR_ARCHITECTURE", ""
        )
    else:
        machine = _platform.machine()
    return _MACHINES.get(machine.lower(), Arch.UNKNOWN)


@lru_cache(maxsize=1)
def detect() -> PlatformInfo:
    """Detect the host platform (cached)."""
    return PlatformInfo(platform=detect_platform(), arch=detect_arch())


def is_windows() -> bool:
    return detect_platform() is Platform.WINDOWS
