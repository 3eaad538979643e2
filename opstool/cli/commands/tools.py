from __future__ import annotations

from opstool.cli.context import build_context
from opstool.output.console import Style


def tools() -> None:
    """List known tools, their download URL and checksum strategy."""
    ctx = build_context()
    host = ctx.platform
    for tool in ctx.manager.catalog:
        supported = str(host.platform) in tool.os_names and str(host.arch) in tool.arch_names
        mark = "" if supported else "  (unsupported here)"
        ctx.console.print(f"{tool.name:<12} {tool.checksum_strategy}{mark}")
        ctx.console.print(f"  {tool.url_template}", Style.DIM)
    ctx.console.print(f"config: {ctx.config_path}", Style.DIM)
