"""Tool catalog - the immutable name -> descriptor table.

The catalog is built once per process from the built-in definitions plus
any ``[tools.<name>]`` entries of the user config, and never changes after.

Usage:
    from opstool.tools.registry import ToolCatalog

    catalog = ToolCatalog.create(extra=custom_tools)
    kubectl = catalog.get("kubectl")
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from opstool.tools.base import ToolDescriptor
from opstool.tools.definitions import BUILTIN_TOOLS

__all__ = ["ToolCatalog"]


class ToolCatalog:
    """Read-only lookup of tool descriptors by name.

    Later descriptors replace earlier ones with the same name, so extension
    entries override built-ins explicitly rather than being merged.
    """

    __slots__ = ("_tools",)

    def __init__(self, tools: Iterable[ToolDescriptor]) -> None:
        table: dict[str, ToolDescriptor] = {}
        for tool in tools:
            table[tool.name] = tool
        self._tools: Mapping[str, ToolDescriptor] = MappingProxyType(dict(sorted(table.items())))

    @classmethod
    def create(cls, extra: Iterable[ToolDescriptor] = ()) -> ToolCatalog:
        """Built-in tools extended (or overridden) by ``extra``."""
        return cls((*BUILTIN_TOOLS, *extra))

    def get(self, name: str) -> ToolDescriptor | None:
        """Get a descriptor by tool name."""
        return self._tools.get(name)

    def names(self) -> tuple[str, ...]:
        """All tool names, sorted."""
        return tuple(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[ToolDescriptor]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)
