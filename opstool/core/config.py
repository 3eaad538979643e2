"""Typed configuration loading and access.

The user config lives in ``<user config dir>/config.toml``:

    [settings]
    base_dir = "~/bin"
    timeout = 300      # seconds per attempt
    retries = 4        # attempts per request
    backoff = 0.5      # first retry delay, doubled each time
    min_size = 1024    # bytes, for tools without checksums

    [tools.mytool]
    url = "https://example.com/mytool/{version}/mytool-{os}-{arch}"
    ...

``[tools.*]`` tables are kept raw here and turned into descriptors by
``opstool.tools.custom``.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_float, get_int, get_str, get_table

__all__ = [
    "BASE_DIR_ENV",
    "Config",
    "ConfigError",
    "Settings",
    "DEFAULT_TIMEOUT",
    "DEFAULT_RETRIES",
    "DEFAULT_BACKOFF",
    "DEFAULT_MIN_SIZE",
    "load_config",
    "load_config_or_default",
]

BASE_DIR_ENV = "OPSTOOL_BASE_DIR"

DEFAULT_TIMEOUT = 300.0
DEFAULT_RETRIES = 4
DEFAULT_BACKOFF = 0.5
DEFAULT_MIN_SIZE = 1024


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None

    def __str__(self) -> str:
        if self.path is not None:
            return f"{self.message} ({self.path})"
        return self.message


@dataclass(frozen=True, slots=True)
class Settings:
    """Engine settings from ``[settings]``."""

    base_dir: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    retries: int = DEFAULT_RETRIES
    backoff: float = DEFAULT_BACKOFF
    min_size: int = DEFAULT_MIN_SIZE

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ValueError("settings.timeout must be > 0")
        if self.retries < 1:
            raise ValueError("settings.retries must be >= 1")
        if self.backoff < 0:
            raise ValueError("settings.backoff must be >= 0")
        if self.min_size < 0:
            raise ValueError("settings.min_size must be >= 0")


def _no_tools() -> dict[str, StrDict]:
    return {}


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    settings: Settings = field(default_factory=Settings)
    tools: dict[str, StrDict] = field(default_factory=_no_tools)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML)."""
        settings: StrDict = get_table(data, "settings") or {}
        tools_table: StrDict = get_table(data, "tools") or {}

        tools: dict[str, StrDict] = {}
        for name, raw in tools_table.items():
            table = as_str_dict(raw)
            if table is None:
                raise ValueError(f"[tools.{name}] must be a table")
            tools[name] = table

        timeout = get_float(settings, "timeout")
        retries = get_int(settings, "retries")
        backoff = get_float(settings, "backoff")
        min_size = get_int(settings, "min_size")

        return cls(
            settings=Settings(
                base_dir=get_str(settings, "base_dir"),
                timeout=DEFAULT_TIMEOUT if timeout is None else timeout,
                retries=DEFAULT_RETRIES if retries is None else retries,
                backoff=DEFAULT_BACKOFF if backoff is None else backoff,
                min_size=DEFAULT_MIN_SIZE if min_size is None else min_size,
            ),
            tools=tools,
        )

    def base_dir(self, default: Path, override: Path | None = None) -> Path:
        """Effective base directory: flag, then environment, then config, then default."""
        if override is not None:
            return override.expanduser()
        env = os.environ.get(BASE_DIR_ENV)
        if env:
            return Path(env).expanduser()
        if self.settings.base_dir:
            return Path(os.path.expandvars(self.settings.base_dir)).expanduser()
        return default


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to config.toml file

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        config = Config.from_dict(result.value)
        return Ok(config)
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Load config if the file exists; a missing file yields the defaults.

    A file that exists but is invalid is still an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)
