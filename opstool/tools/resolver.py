"""Version resolution - turning (tool, version request, host) into a URL.

This module provides:
- ResolvedVersion: The fully-qualified download description of one version
- LatestVersionSource: "given a tool, return its newest known version"
- GitHubLatestSource: LatestVersionSource backed by GitHub releases
- VersionResolver: Catalog lookup, latest lookup and pure URL rendering

Rendering never touches the network, so the same triple always yields the
same URL and resolution is cheap to retry. Only the "latest" sentinel needs
a release lookup.
"""

from __future__ import annotations

import re
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from opstool.core.result import Err, Ok, Result
from opstool.tools.api import github_latest_release
from opstool.tools.base import ArtifactKind, ChecksumStrategy, ToolDescriptor
from opstool.tools.errors import ResolutionError
from opstool.tools.http import HttpError
from opstool.tools.retry import RetryPolicy, with_retry

if TYPE_CHECKING:
    from opstool.platform.detection import PlatformInfo
    from opstool.tools.http import HttpClient
    from opstool.tools.registry import ToolCatalog

__all__ = [
    "LATEST",
    "ResolvedVersion",
    "LatestVersionSource",
    "GitHubLatestSource",
    "VersionResolver",
]

LATEST = "latest"

# Canonical versions become directory names.
_SAFE_VERSION_RE = re.compile(r"[0-9A-Za-z][0-9A-Za-z.+_\-]*")


@dataclass(frozen=True, slots=True)
class ResolvedVersion:
    """Everything the Retriever needs for one (tool, version, platform).

    Attributes:
        tool_name: Tool identifier
        canonical_version: Normalized version (directory name, sort key)
        download_url: Fully rendered artifact URL
        artifact_kind: Raw binary or archive
        executable_name: Binary (or archive member) name
        checksum_strategy: How to verify the artifact
        checksum_url: Companion file or manifest URL, None for NONE
        platform: Host platform the URL was rendered for
    """

    tool_name: str
    canonical_version: str
    download_url: str
    artifact_kind: ArtifactKind
    executable_name: str
    checksum_strategy: ChecksumStrategy
    checksum_url: str | None
    platform: PlatformInfo

    @property
    def artifact_name(self) -> str:
        """File name of the artifact as published."""
        return self.download_url.rsplit("?", 1)[0].rstrip("/").rsplit("/", 1)[-1]


class LatestVersionSource(Protocol):
    """Shared interface for "newest known version" lookups."""

    def latest(self, tool: ToolDescriptor) -> Result[str, HttpError]:
        """Return the newest released version of ``tool`` (bare or prefixed)."""
        ...


class GitHubLatestSource:
    """Latest version from the GitHub "latest release" endpoint.

    Uses the same bounded retry policy as downloads, since the lookup is an
    idempotent read.
    """

    def __init__(
        self,
        http: HttpClient,
        *,
        policy: RetryPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._http = http
        self._policy = policy or RetryPolicy()
        self._sleep = sleep

    def latest(self, tool: ToolDescriptor) -> Result[str, HttpError]:
        repo = tool.release_repo
        if not repo:
            return Err(
                HttpError(
                    url="",
                    status=0,
                    message=f"{tool.name} has no release source",
                    retryable=False,
                )
            )
        attempted = with_retry(
            lambda: github_latest_release(self._http, repo),
            self._policy,
            sleep=self._sleep,
        )
        return attempted.result


class VersionResolver:
    """Resolves version requests against the tool catalog.

    Usage:
        resolver = VersionResolver(catalog, GitHubLatestSource(http))
        result = resolver.resolve("terraform", "1.5.0", detect())
        if is_ok(result):
            print(result.value.download_url)
    """

    def __init__(self, catalog: ToolCatalog, latest: LatestVersionSource | None = None) -> None:
        self._catalog = catalog
        self._latest = latest

    @property
    def catalog(self) -> ToolCatalog:
        return self._catalog

    def resolve(
        self,
        tool_name: str,
        request: str,
        host: PlatformInfo,
    ) -> Result[ResolvedVersion, ResolutionError]:
        """Resolve a version request ("latest" or exact) for the host."""
        tool = self._catalog.get(tool_name)
        if tool is None:
            return Err(
                ResolutionError(
                    kind="unknown_tool",
                    tool=tool_name,
                    message=f"unknown tool: {tool_name}",
                    hint=f"known tools: {', '.join(self._catalog.names())}",
                )
            )

        # Platform support does not depend on the version: fail before any lookup.
        names = _platform_names(tool, host)
        if isinstance(names, Err):
            return names

        version = request.strip()
        if version.lower() == LATEST:
            latest = self._lookup_latest(tool)
            if isinstance(latest, Err):
                return latest
            version = latest.value

        return self.render(tool, version, host)

    def render(
        self,
        tool: ToolDescriptor,
        version: str,
        host: PlatformInfo,
    ) -> Result[ResolvedVersion, ResolutionError]:
        """Fill the descriptor's templates for an exact version. Pure."""
        names = _platform_names(tool, host)
        if isinstance(names, Err):
            return names
        os_name, arch_name = names.value

        if not version.strip() or not tool.matches_version(version):
            return Err(
                ResolutionError(
                    kind="version_not_found",
                    tool=tool.name,
                    message=f"{tool.name}: {version!r} does not look like a release version",
                    hint=f"expected a version matching {tool.version_pattern} or '{LATEST}'",
                )
            )

        bare = tool.bare_version(version)
        canonical = tool.canonical_version(bare)
        if _SAFE_VERSION_RE.fullmatch(canonical) is None:
            return Err(
                ResolutionError(
                    kind="version_not_found",
                    tool=tool.name,
                    message=f"{tool.name}: {canonical!r} is not a usable version name",
                )
            )

        fields = {"version": bare, "os": os_name, "arch": arch_name}
        url = tool.url_template.format_map(fields)

        checksum_url: str | None = None
        if tool.checksum_strategy is not ChecksumStrategy.NONE and tool.checksum_url_template:
            file_name = url.rsplit("?", 1)[0].rsplit("/", 1)[-1]
            checksum_url = tool.checksum_url_template.format_map(
                {**fields, "url": url, "file": file_name}
            )

        return Ok(
            ResolvedVersion(
                tool_name=tool.name,
                canonical_version=canonical,
                download_url=url,
                artifact_kind=tool.artifact_kind,
                executable_name=tool.executable_name,
                checksum_strategy=tool.checksum_strategy,
                checksum_url=checksum_url,
                platform=host,
            )
        )

    def _lookup_latest(self, tool: ToolDescriptor) -> Result[str, ResolutionError]:
        if self._latest is None:
            return Err(
                ResolutionError(
                    kind="latest_lookup_failed",
                    tool=tool.name,
                    message=f"{tool.name}: no release source configured for '{LATEST}'",
                    hint="request an exact version instead",
                )
            )

        result = self._latest.latest(tool)
        if isinstance(result, Err):
            return Err(
                ResolutionError(
                    kind="latest_lookup_failed",
                    tool=tool.name,
                    message=f"{tool.name}: could not determine the latest version",
                    hint=str(result.error),
                )
            )
        return Ok(result.value)


def _platform_names(
    tool: ToolDescriptor, host: PlatformInfo
) -> Result[tuple[str, str], ResolutionError]:
    os_name = tool.os_names.get(str(host.platform))
    arch_name = tool.arch_names.get(str(host.arch))
    if os_name is None or arch_name is None:
        supported = ", ".join(
            f"{os_key}-{arch_key}" for os_key in tool.os_names for arch_key in tool.arch_names
        )
        return Err(
            ResolutionError(
                kind="unsupported_platform",
                tool=tool.name,
                message=f"{tool.name} has no release for {host}",
                hint=f"supported: {supported}" if supported else None,
            )
        )
    return Ok((os_name, arch_name))
