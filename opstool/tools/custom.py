"""Tool descriptors defined in the user config.

A ``[tools.<name>]`` table has the same shape as a built-in definition:

    [tools.k9s]
    url = "https://github.com/derailed/k9s/releases/download/v{version}/k9s_{os}_{arch}.tar.gz"
    executable = "k9s"
    checksum = "embedded-manifest"
    checksum_url = "https://github.com/derailed/k9s/releases/download/v{version}/checksums.sha256"
    repo = "derailed/k9s"
    version_prefix = "v"
    os = { linux = "Linux", macos = "Darwin" }
    arch = { x64 = "amd64", arm64 = "arm64" }
"""

from __future__ import annotations

from collections.abc import Mapping

from opstool.core.config import ConfigError
from opstool.core.result import Err, Ok, Result
from opstool.core.structured import StrDict, get_str, get_str_map
from opstool.tools.base import DEFAULT_VERSION_PATTERN, ChecksumStrategy, ToolDescriptor
from opstool.tools.definitions.go_names import GO_ARCH_NAMES, GO_OS_NAMES

__all__ = ["descriptor_from_table", "parse_custom_tools"]

_KNOWN_KEYS = frozenset(
    {
        "url",
        "executable",
        "checksum",
        "checksum_url",
        "repo",
        "version_prefix",
        "version_pattern",
        "os",
        "arch",
    }
)


def descriptor_from_table(name: str, table: StrDict) -> ToolDescriptor:
    """Build a descriptor from one config table.

    Raises:
        ValueError: On missing or malformed keys
    """
    unknown = set(table) - _KNOWN_KEYS
    if unknown:
        raise ValueError(f"unknown keys: {', '.join(sorted(unknown))}")

    url = get_str(table, "url")
    if url is None:
        raise ValueError("missing 'url'")

    checksum_raw = get_str(table, "checksum") or ChecksumStrategy.NONE.value
    try:
        strategy = ChecksumStrategy(checksum_raw)
    except ValueError:
        choices = ", ".join(s.value for s in ChecksumStrategy)
        raise ValueError(f"checksum must be one of: {choices}") from None

    os_names = _alias_table(table, "os", GO_OS_NAMES)
    arch_names = _alias_table(table, "arch", GO_ARCH_NAMES)

    prefix = table.get("version_prefix", "")
    if not isinstance(prefix, str):
        raise ValueError("'version_prefix' must be a string")

    return ToolDescriptor(
        name=name,
        url_template=url,
        executable_name=get_str(table, "executable") or name,
        checksum_strategy=strategy,
        checksum_url_template=get_str(table, "checksum_url"),
        os_names=os_names,
        arch_names=arch_names,
        version_prefix=prefix,
        release_repo=get_str(table, "repo"),
        version_pattern=get_str(table, "version_pattern") or DEFAULT_VERSION_PATTERN,
    )


def _alias_table(table: StrDict, key: str, default: Mapping[str, str]) -> Mapping[str, str]:
    if key not in table:
        return default
    aliases = get_str_map(table, key)
    if aliases is None:
        raise ValueError(f"'{key}' must be a table of strings")
    return aliases


def parse_custom_tools(
    tables: Mapping[str, StrDict],
) -> Result[tuple[ToolDescriptor, ...], ConfigError]:
    """Turn every ``[tools.<name>]`` table into a descriptor."""
    tools: list[ToolDescriptor] = []
    for name, table in tables.items():
        try:
            tools.append(descriptor_from_table(name, table))
        except ValueError as e:
            return Err(ConfigError(f"[tools.{name}]: {e}"))
    return Ok(tuple(tools))
