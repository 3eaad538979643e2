"""Version management service.

Wires the engine stages together for the CLI:

    resolve -> (already installed?) -> fetch -> install -> activate

Every operation returns ``Err`` with the error of the stage it failed in,
so callers can tell how far it got. Nothing here caches store state; each
call re-reads the disk.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from opstool.core.config import Config, ConfigError
from opstool.core.result import Err, Ok, Result
from opstool.output.console import ConsoleProtocol, Style
from opstool.platform.detection import PlatformInfo
from opstool.tools.custom import parse_custom_tools
from opstool.tools.errors import ActivationError, EngineError, ResolutionError
from opstool.tools.http import HttpClient, HttpError, RealHttpClient
from opstool.tools.links import ActiveLink, LinkManager
from opstool.tools.registry import ToolCatalog
from opstool.tools.resolver import LATEST, GitHubLatestSource, ResolvedVersion, VersionResolver
from opstool.tools.retriever import Retriever
from opstool.tools.retry import RetryPolicy
from opstool.tools.store import InstalledVersion, VersionStore

__all__ = [
    "InstallOutcome",
    "UseOutcome",
    "ToolStatus",
    "VersionManager",
    "create_manager",
]


@dataclass(frozen=True, slots=True)
class InstallOutcome:
    """Result of an install request.

    Attributes:
        resolved: Resolution of the request
        installed: The verified store entry
        fetched: False when the version was already installed
    """

    resolved: ResolvedVersion
    installed: InstalledVersion
    fetched: bool


@dataclass(frozen=True, slots=True)
class UseOutcome:
    install: InstallOutcome
    link: ActiveLink


@dataclass(frozen=True, slots=True)
class ToolStatus:
    """Installed versions of one tool and the one its link points at."""

    tool: str
    installed: tuple[InstalledVersion, ...]
    active: ActiveLink | None

    @property
    def active_version(self) -> str | None:
        return self.active.target_version if self.active else None


class VersionManager:
    """Install, activate and inspect per-tool binary versions."""

    def __init__(
        self,
        *,
        resolver: VersionResolver,
        store: VersionStore,
        links: LinkManager,
        retriever: Retriever,
        console: ConsoleProtocol,
        platform: PlatformInfo,
    ) -> None:
        self._resolver = resolver
        self._store = store
        self._links = links
        self._retriever = retriever
        self._console = console
        self._platform = platform

    @property
    def catalog(self) -> ToolCatalog:
        return self._resolver.catalog

    @property
    def store(self) -> VersionStore:
        return self._store

    def install(
        self,
        tool: str,
        request: str,
        *,
        force: bool = False,
    ) -> Result[InstallOutcome, EngineError]:
        """Make ``tool`` at ``request`` available in the store.

        An installed version is never downloaded again unless ``force``.
        """
        resolved = self._resolver.resolve(tool, request, self._platform)
        if isinstance(resolved, Err):
            return resolved
        rv = resolved.value
        version = rv.canonical_version

        if not force:
            existing = self._store.get(tool, version)
            if existing is not None:
                self._console.print(f"{tool} {version} already installed", Style.DIM)
                return Ok(InstallOutcome(resolved=rv, installed=existing, fetched=False))

        base = self._store.check_base(tool)
        if isinstance(base, Err):
            return base

        self._console.print(f"Downloading {tool} {version} ({rv.platform})", Style.INFO)
        with self._console.progress(rv.artifact_name) as progress:
            fetched = self._retriever.fetch(rv, progress=progress)
        if isinstance(fetched, Err):
            return fetched

        artifact = fetched.value
        if not artifact.checksum_verified:
            self._console.warning(f"{tool} publishes no checksum; only the size was checked")

        try:
            installed = self._store.install(
                tool,
                version,
                artifact.path,
                executable_name=rv.executable_name,
                sha256=artifact.sha256,
                source_url=rv.download_url,
                replace=force,
            )
        finally:
            artifact.discard()
        if isinstance(installed, Err):
            return installed

        self._console.success(f"installed {tool} {version}")
        return Ok(InstallOutcome(resolved=rv, installed=installed.value, fetched=True))

    def use(
        self,
        tool: str,
        request: str,
        *,
        force: bool = False,
    ) -> Result[UseOutcome, EngineError]:
        """Install (if needed) and activate in one step."""
        installed = self.install(tool, request, force=force)
        if isinstance(installed, Err):
            return installed

        outcome = installed.value
        link = self._links.activate(tool, outcome.installed.version)
        if isinstance(link, Err):
            return link

        self._console.success(f"{tool} -> {outcome.installed.version}")
        return Ok(UseOutcome(install=outcome, link=link.value))

    def activate(self, tool: str, version: str) -> Result[ActiveLink, EngineError]:
        """Point the stable link at an already installed version.

        ``latest`` selects the newest installed version; nothing is fetched.
        """
        descriptor = self.catalog.get(tool)
        if descriptor is None:
            return Err(self._unknown_tool(tool))

        if version.strip().lower() == LATEST:
            entries = self._store.list_installed(tool)
            if not entries:
                return Err(
                    ActivationError(
                        kind="not_installed",
                        tool=tool,
                        version=version,
                        message=f"no installed versions of {tool}",
                        hint=f"run: opstool install {tool} {LATEST}",
                    )
                )
            canonical = entries[-1].version
        else:
            canonical = descriptor.canonical_version(version)

        link = self._links.activate(tool, canonical)
        if isinstance(link, Err):
            return link

        self._console.success(f"{tool} -> {canonical}")
        return Ok(link.value)

    def which(self, tool: str, version: str | None = None) -> Result[Path, EngineError]:
        """Binary path of ``version``, or of the active version if omitted."""
        descriptor = self.catalog.get(tool)
        if descriptor is None:
            return Err(self._unknown_tool(tool))

        if version is None:
            active = self._links.current(tool)
            if active is None:
                return Err(
                    ActivationError(
                        kind="not_installed",
                        tool=tool,
                        message=f"{tool} has no active version",
                        hint=f"run: opstool use {tool} <version>",
                    )
                )
            canonical = active.target_version
        else:
            canonical = descriptor.canonical_version(version)

        return self._store.resolve_path(tool, canonical)

    def list_installed(self, tool: str) -> Result[list[InstalledVersion], ResolutionError]:
        if tool not in self.catalog:
            return Err(self._unknown_tool(tool))
        return Ok(self._store.list_installed(tool))

    def status(self, tool: str | None = None) -> Result[list[ToolStatus], ResolutionError]:
        """Per-tool installed versions and active link.

        Without ``tool``, every catalog tool that has something installed or
        linked is reported.
        """
        if tool is not None and tool not in self.catalog:
            return Err(self._unknown_tool(tool))

        names = [tool] if tool is not None else self.catalog.names()
        statuses: list[ToolStatus] = []
        for name in names:
            entry = ToolStatus(
                tool=name,
                installed=tuple(self._store.list_installed(name)),
                active=self._links.current(name),
            )
            if tool is not None or entry.installed or entry.active is not None:
                statuses.append(entry)
        return Ok(statuses)

    def _unknown_tool(self, tool: str) -> ResolutionError:
        return ResolutionError(
            kind="unknown_tool",
            tool=tool,
            message=f"unknown tool: {tool}",
            hint=f"known tools: {', '.join(self.catalog.names())}",
        )


def create_manager(
    *,
    config: Config,
    base_dir: Path,
    console: ConsoleProtocol,
    platform: PlatformInfo,
    http: HttpClient | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Result[VersionManager, ConfigError]:
    """Build a VersionManager from configuration."""
    custom = parse_custom_tools(config.tools)
    if isinstance(custom, Err):
        return custom

    settings = config.settings
    client = http or RealHttpClient(timeout=settings.timeout)
    policy = RetryPolicy(attempts=settings.retries, backoff=settings.backoff)

    def on_retry(attempt: int, error: HttpError) -> None:
        console.warning(f"{error}; retrying (attempt {attempt + 1}/{policy.attempts})")

    catalog = ToolCatalog.create(extra=custom.value)
    store = VersionStore(base_dir)
    resolver = VersionResolver(catalog, GitHubLatestSource(client, policy=policy, sleep=sleep))
    retriever = Retriever(
        client,
        store,
        policy=policy,
        min_size=settings.min_size,
        sleep=sleep,
        on_retry=on_retry,
    )
    return Ok(
        VersionManager(
            resolver=resolver,
            store=store,
            links=LinkManager(store),
            retriever=retriever,
            console=console,
            platform=platform,
        )
    )
