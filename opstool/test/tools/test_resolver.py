"""Tests for tools/resolver.py - version resolution."""

from __future__ import annotations

import pytest

from opstool.core.result import Err, Ok
from opstool.platform.detection import Arch, Platform, PlatformInfo
from opstool.tools.base import ArtifactKind, ChecksumStrategy
from opstool.tools.definitions import TERRAFORM
from opstool.tools.http import HttpError, MockHttpClient
from opstool.tools.registry import ToolCatalog
from opstool.tools.resolver import GitHubLatestSource, VersionResolver
from opstool.tools.retry import RetryPolicy

LINUX_X64 = PlatformInfo(Platform.LINUX, Arch.X64)
MACOS_ARM64 = PlatformInfo(Platform.MACOS, Arch.ARM64)
WINDOWS_X64 = PlatformInfo(Platform.WINDOWS, Arch.X64)

K8S_LATEST = "https://api.github.com/repos/kubernetes/kubernetes/releases/latest"


def _resolver(client: MockHttpClient | None = None) -> VersionResolver:
    client = client or MockHttpClient()
    source = GitHubLatestSource(client, policy=RetryPolicy(attempts=3), sleep=lambda _s: None)
    return VersionResolver(ToolCatalog.create(), source)


# =============================================================================
# Exact versions
# =============================================================================


class TestResolveExact:
    """Exact versions render URLs without touching the network."""

    def test_terraform(self) -> None:
        client = MockHttpClient()
        result = _resolver(client).resolve("terraform", "1.5.0", LINUX_X64)

        assert isinstance(result, Ok)
        rv = result.value
        assert rv.download_url == (
            "https://releases.hashicorp.com/terraform/1.5.0/terraform_1.5.0_linux_amd64.zip"
        )
        assert rv.canonical_version == "1.5.0"
        assert rv.artifact_kind is ArtifactKind.ARCHIVE
        assert rv.artifact_name == "terraform_1.5.0_linux_amd64.zip"
        assert rv.checksum_strategy is ChecksumStrategy.EMBEDDED_MANIFEST
        assert rv.checksum_url == (
            "https://releases.hashicorp.com/terraform/1.5.0/terraform_1.5.0_SHA256SUMS"
        )
        assert client.calls == []

    def test_kubectl_prefix(self) -> None:
        """kubectl canonical versions carry a "v" whether or not it was typed."""
        resolver = _resolver()
        plain = resolver.resolve("kubectl", "1.29.0", MACOS_ARM64)
        prefixed = resolver.resolve("kubectl", "v1.29.0", MACOS_ARM64)

        assert isinstance(plain, Ok)
        assert plain == prefixed
        assert plain.value.canonical_version == "v1.29.0"
        assert plain.value.download_url == (
            "https://dl.k8s.io/release/v1.29.0/bin/darwin/arm64/kubectl"
        )
        assert plain.value.checksum_url == plain.value.download_url + ".sha256"
        assert plain.value.artifact_kind is ArtifactKind.RAW_BINARY

    def test_is_deterministic(self) -> None:
        resolver = _resolver()
        first = resolver.resolve("helm", "3.14.0", LINUX_X64)
        second = resolver.resolve("helm", "3.14.0", LINUX_X64)
        assert first == second

    def test_render_is_pure(self) -> None:
        client = MockHttpClient()
        result = _resolver(client).render(TERRAFORM, "1.6.0", LINUX_X64)
        assert isinstance(result, Ok)
        assert client.calls == []


# =============================================================================
# Failures
# =============================================================================


class TestResolveErrors:
    def test_unknown_tool(self) -> None:
        result = _resolver().resolve("kubeclt", "1.29.0", LINUX_X64)
        assert isinstance(result, Err)
        assert result.error.kind == "unknown_tool"
        assert result.error.hint is not None and "kubectl" in result.error.hint

    def test_unsupported_platform(self) -> None:
        result = _resolver().resolve("helm", "3.14.0", WINDOWS_X64)
        assert isinstance(result, Err)
        assert result.error.kind == "unsupported_platform"
        assert result.error.hint is not None and "linux-x64" in result.error.hint

    def test_unsupported_platform_before_latest_lookup(self) -> None:
        client = MockHttpClient()
        result = _resolver(client).resolve("kubectl", "latest", WINDOWS_X64)
        assert isinstance(result, Err)
        assert result.error.kind == "unsupported_platform"
        assert client.calls == []

    @pytest.mark.parametrize("version", ["1.29", "", "banana", "1.29.0/../../x"])
    def test_malformed_versions(self, version: str) -> None:
        result = _resolver().resolve("kubectl", version, LINUX_X64)
        assert isinstance(result, Err)
        assert result.error.kind == "version_not_found"


# =============================================================================
# "latest"
# =============================================================================


class TestResolveLatest:
    def test_latest_uses_release_source(self) -> None:
        client = MockHttpClient()
        client.set_json(K8S_LATEST, {"tag_name": "v1.30.1"})

        result = _resolver(client).resolve("kubectl", "latest", LINUX_X64)

        assert isinstance(result, Ok)
        assert result.value.canonical_version == "v1.30.1"
        assert "/v1.30.1/bin/linux/amd64/" in result.value.download_url

    def test_latest_retries_transient_errors(self) -> None:
        client = MockHttpClient()
        client.set_json(
            K8S_LATEST,
            [HttpError(url=K8S_LATEST, status=502, message="bad gateway"), {"tag_name": "v1.30.1"}],
        )

        result = _resolver(client).resolve("kubectl", "LATEST", LINUX_X64)

        assert isinstance(result, Ok)
        assert client.count("get_json") == 2

    def test_latest_lookup_failed(self) -> None:
        client = MockHttpClient()
        client.set_json(K8S_LATEST, HttpError(url=K8S_LATEST, status=503, message="busy"))

        result = _resolver(client).resolve("kubectl", "latest", LINUX_X64)

        assert isinstance(result, Err)
        assert result.error.kind == "latest_lookup_failed"
        assert client.count("get_json") == 3

    def test_latest_without_source(self) -> None:
        resolver = VersionResolver(ToolCatalog.create())
        result = resolver.resolve("terraform", "latest", LINUX_X64)
        assert isinstance(result, Err)
        assert result.error.kind == "latest_lookup_failed"
