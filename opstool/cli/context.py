from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from opstool.core.config import Config, load_config_or_default
from opstool.core.errors import ErrorCode
from opstool.core.result import Err
from opstool.output.console import ConsoleProtocol, RichConsole
from opstool.platform.detection import PlatformInfo, detect
from opstool.platform.paths import executable_dir, user_config_dir
from opstool.services.versions import VersionManager, create_manager

CONFIG_ENV = "OPSTOOL_CONFIG"


@dataclass(frozen=True, slots=True)
class CLIContext:
    platform: PlatformInfo
    config: Config
    config_path: Path
    base_dir: Path
    console: ConsoleProtocol
    manager: VersionManager


def config_path() -> Path:
    env = os.environ.get(CONFIG_ENV)
    if env:
        return Path(env).expanduser()
    return user_config_dir() / "config.toml"


def build_context() -> CLIContext:
    console = RichConsole()
    path = config_path()

    config_result = load_config_or_default(path)
    if isinstance(config_result, Err):
        console.error(str(config_result.error))
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))
    config = config_result.value

    platform = detect()
    base_dir = config.base_dir(executable_dir())

    manager_result = create_manager(
        config=config,
        base_dir=base_dir,
        console=console,
        platform=platform,
    )
    if isinstance(manager_result, Err):
        console.error(f"{manager_result.error} ({path})")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    return CLIContext(
        platform=platform,
        config=config,
        config_path=path,
        base_dir=base_dir,
        console=console,
        manager=manager_result.value,
    )
