"""Base definitions for the tools system.

This module defines the core data types shared by every stage:
- ChecksumStrategy: How a tool publishes artifact digests
- ArtifactKind: Whether the download is the binary itself or an archive
- ToolDescriptor: Immutable description of one managed tool
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

__all__ = [
    "ArtifactKind",
    "ChecksumStrategy",
    "DEFAULT_VERSION_PATTERN",
    "ToolDescriptor",
    "artifact_kind_for_url",
]

# Bare release version: 1.29.0, 1.6.0-beta1, 1.30.0-rc.2
DEFAULT_VERSION_PATTERN = r"\d+\.\d+\.\d+(?:[-+][0-9A-Za-z.\-]+)?"

_ARCHIVE_SUFFIXES = (".zip", ".tar.gz", ".tgz", ".tar.xz", ".txz")
_PLACEHOLDERS = frozenset({"version", "os", "arch"})
_PLACEHOLDER_RE = re.compile(r"\{([^{}]*)\}")


class ChecksumStrategy(Enum):
    """How the integrity of a downloaded artifact is established.

    NONE: Minimum-size sanity check only
    COMPANION_FILE: ``<artifact>.sha256``-style file holding the digest
    EMBEDDED_MANIFEST: A per-release SHA256SUMS manifest listing every asset
    """

    NONE = "none"
    COMPANION_FILE = "companion-file"
    EMBEDDED_MANIFEST = "embedded-manifest"

    def __str__(self) -> str:
        return self.value


class ArtifactKind(Enum):
    """Shape of the downloaded artifact."""

    RAW_BINARY = "raw-binary"
    ARCHIVE = "archive"

    def __str__(self) -> str:
        return self.value


def artifact_kind_for_url(url: str) -> ArtifactKind:
    """Infer the artifact kind from the URL's file name."""
    name = url.rsplit("?", 1)[0].lower()
    if name.endswith(_ARCHIVE_SUFFIXES):
        return ArtifactKind.ARCHIVE
    return ArtifactKind.RAW_BINARY


def _frozen(mapping: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(mapping))


def _template_fields(template: str) -> set[str]:
    return set(_PLACEHOLDER_RE.findall(template))


@dataclass(frozen=True, slots=True)
class ToolDescriptor:
    """Immutable tool metadata.

    Templates use ``{version}`` (bare version, never prefixed), ``{os}`` and
    ``{arch}``; the latter two are spelled through ``os_names`` and
    ``arch_names``, which are keyed by ``str(Platform)`` / ``str(Arch)``.
    A host whose OS or arch is missing from those tables is unsupported.

    Attributes:
        name: Tool identifier, also the stable link file name
        url_template: Download URL template
        executable_name: Binary name on disk (and archive member name)
        checksum_strategy: How integrity is verified
        checksum_url_template: Companion file or manifest URL template
        os_names: Per-tool OS spelling
        arch_names: Per-tool architecture spelling
        version_prefix: Prefix of the canonical version ("v" for kubectl)
        release_repo: GitHub "owner/repo" used to look up the latest release
        version_pattern: Regex a bare version must fully match
    """

    name: str
    url_template: str
    executable_name: str
    checksum_strategy: ChecksumStrategy = ChecksumStrategy.NONE
    checksum_url_template: str | None = None
    os_names: Mapping[str, str] = field(default_factory=lambda: _frozen({}))
    arch_names: Mapping[str, str] = field(default_factory=lambda: _frozen({}))
    version_prefix: str = ""
    release_repo: str | None = None
    version_pattern: str = DEFAULT_VERSION_PATTERN

    def __post_init__(self) -> None:
        """Validate the descriptor and freeze its alias tables."""
        if not self.name:
            raise ValueError("Tool name cannot be empty")
        if "/" in self.name or "\\" in self.name or self.name.startswith("."):
            raise ValueError(f"Tool name must be a plain file name: {self.name!r}")
        if self.name.endswith("-versions"):
            raise ValueError(f"Tool name clashes with a versions directory: {self.name!r}")
        if not self.executable_name:
            raise ValueError(f"{self.name}: executable name cannot be empty")
        exe = self.executable_name
        if "/" in exe or "\\" in exe or exe.startswith("."):
            raise ValueError(f"{self.name}: executable name must be a plain file name: {exe!r}")

        unknown = _template_fields(self.url_template) - _PLACEHOLDERS
        if unknown:
            raise ValueError(f"{self.name}: unknown URL placeholders: {sorted(unknown)}")

        if self.checksum_strategy is not ChecksumStrategy.NONE:
            if not self.checksum_url_template:
                raise ValueError(
                    f"{self.name}: checksum strategy {self.checksum_strategy} needs a checksum URL"
                )
            unknown = (
                _template_fields(self.checksum_url_template) - _PLACEHOLDERS - {"url", "file"}
            )
            if unknown:
                raise ValueError(
                    f"{self.name}: unknown checksum URL placeholders: {sorted(unknown)}"
                )

        try:
            re.compile(self.version_pattern)
        except re.error as e:
            raise ValueError(f"{self.name}: invalid version pattern: {e}") from e

        object.__setattr__(self, "os_names", _frozen(self.os_names))
        object.__setattr__(self, "arch_names", _frozen(self.arch_names))

    @property
    def artifact_kind(self) -> ArtifactKind:
        return artifact_kind_for_url(self.url_template)

    def bare_version(self, version: str) -> str:
        """Strip any leading "v" so requests like "v1.5.0" and "1.5.0" agree."""
        version = version.strip()
        if version[:1] in ("v", "V") and version[1:2].isdigit():
            return version[1:]
        return version

    def canonical_version(self, version: str) -> str:
        """Canonical form used as directory name and comparison key."""
        return f"{self.version_prefix}{self.bare_version(version)}"

    def matches_version(self, version: str) -> bool:
        """Check a bare version against the tool's release pattern."""
        return re.fullmatch(self.version_pattern, self.bare_version(version)) is not None
