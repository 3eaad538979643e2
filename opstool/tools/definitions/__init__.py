"""Built-in tool definitions.

Usage:
    from opstool.tools.definitions import BUILTIN_TOOLS, get_builtin

    for tool in BUILTIN_TOOLS:
        print(f"{tool.name}: {tool.url_template}")
"""

from __future__ import annotations

from opstool.tools.base import ToolDescriptor
from opstool.tools.definitions.helm import HELM
from opstool.tools.definitions.kops import KOPS
from opstool.tools.definitions.kubectl import KUBECTL
from opstool.tools.definitions.terraform import TERRAFORM

__all__ = [
    "HELM",
    "KOPS",
    "KUBECTL",
    "TERRAFORM",
    "BUILTIN_TOOLS",
    "get_builtin",
]


BUILTIN_TOOLS: tuple[ToolDescriptor, ...] = (
    HELM,
    KOPS,
    KUBECTL,
    TERRAFORM,
)

_BUILTIN_BY_NAME: dict[str, ToolDescriptor] = {tool.name: tool for tool in BUILTIN_TOOLS}


def get_builtin(name: str) -> ToolDescriptor | None:
    """Get a built-in descriptor by tool name."""
    return _BUILTIN_BY_NAME.get(name)
