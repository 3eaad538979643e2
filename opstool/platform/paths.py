"""Platform-aware path utilities.

This module locates the user-level directories the engine needs:
- the executable directory that conventionally holds stable tool links
- the user configuration directory holding config.toml
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from .detection import is_windows

__all__ = [
    "APP_NAME",
    "home",
    "executable_dir",
    "user_config_dir",
    "clear_caches",
]

# Application name used for directory naming
APP_NAME = "opstool"


@lru_cache(maxsize=1)
def home() -> Path:
    """Get user's home directory.

    Uses USERPROFILE on Windows, HOME on Unix.
    Falls back to Path.home() which handles edge cases.
    """
    # Check env vars first for CI/container scenarios
    if is_windows():
        userprofile = os.environ.get("USERPROFILE")
        if userprofile:
            return Path(userprofile)
    else:
        home_env = os.environ.get("HOME")
        if home_env:
            return Path(home_env)

    return Path.home()


@lru_cache(maxsize=1)
def executable_dir() -> Path:
    """Get the user's executable directory.

    Location: $XDG_BIN_HOME, else ~/.local/bin. On Windows there is no such
    convention, so ~/AppData/Local/opstool/bin is used.

    The directory is not created here; the engine requires it to exist.
    """
    if is_windows():
        local = os.environ.get("LOCALAPPDATA")
        base = Path(local) if local else home() / "AppData" / "Local"
        return base / APP_NAME / "bin"

    xdg_bin = os.environ.get("XDG_BIN_HOME")
    if xdg_bin:
        return Path(xdg_bin)
    return home() / ".local" / "bin"


@lru_cache(maxsize=1)
def user_config_dir() -> Path:
    """Get the user-level configuration directory.

    Location: ~/.config/opstool/ (Linux/macOS) or ~/AppData/Roaming/opstool/ (Windows)
    """
    if is_windows():
        app_data = os.environ.get("APPDATA")
        if app_data:
            return Path(app_data) / APP_NAME
        return home() / "AppData" / "Roaming" / APP_NAME

    # Unix: XDG_CONFIG_HOME or ~/.config
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / APP_NAME
    return home() / ".config" / APP_NAME


def clear_caches() -> None:
    """Clear all cached paths.

    Useful for testing when environment variables change.
    """
    home.cache_clear()
    executable_dir.cache_clear()
    user_config_dir.cache_clear()
