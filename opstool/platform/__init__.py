"""Platform abstraction layer."""

from .detection import (
    Arch,
    Platform,
    PlatformInfo,
    detect,
    is_windows,
)
from .files import atomic_write_text, make_executable, sha256_file
from .paths import (
    executable_dir,
    home,
    user_config_dir,
)

__all__ = [
    # detection
    "Arch",
    "Platform",
    "PlatformInfo",
    "detect",
    "is_windows",
    # files
    "atomic_write_text",
    "make_executable",
    "sha256_file",
    # paths
    "executable_dir",
    "home",
    "user_config_dir",
]
