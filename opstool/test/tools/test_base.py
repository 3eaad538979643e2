"""Tests for tools/base.py - tool descriptors."""

from __future__ import annotations

import pytest

from opstool.tools.base import (
    ArtifactKind,
    ChecksumStrategy,
    ToolDescriptor,
    artifact_kind_for_url,
)


def _tool(**overrides: object) -> ToolDescriptor:
    fields: dict[str, object] = {
        "name": "demo",
        "url_template": "https://example.com/{version}/demo-{os}-{arch}",
        "executable_name": "demo",
        "os_names": {"linux": "linux"},
        "arch_names": {"x64": "amd64"},
    }
    fields.update(overrides)
    return ToolDescriptor(**fields)  # type: ignore[arg-type]


class TestArtifactKind:
    @pytest.mark.parametrize(
        ("url", "kind"),
        [
            ("https://x/kubectl", ArtifactKind.RAW_BINARY),
            ("https://x/terraform_1.5.0_linux_amd64.zip", ArtifactKind.ARCHIVE),
            ("https://x/helm-v3.14.0-linux-amd64.tar.gz", ArtifactKind.ARCHIVE),
            ("https://x/tool.tgz?download=1", ArtifactKind.ARCHIVE),
            ("https://x/tool.tar.xz", ArtifactKind.ARCHIVE),
        ],
    )
    def test_from_url(self, url: str, kind: ArtifactKind) -> None:
        assert artifact_kind_for_url(url) is kind


class TestToolDescriptor:
    """Tests for ToolDescriptor validation and version helpers."""

    def test_alias_tables_are_read_only(self) -> None:
        tool = _tool()
        with pytest.raises(TypeError):
            tool.os_names["windows"] = "windows"  # type: ignore[index]

    def test_is_frozen(self) -> None:
        tool = _tool()
        with pytest.raises(AttributeError):
            tool.name = "other"  # type: ignore[misc]

    def test_source_mapping_is_copied(self) -> None:
        os_names = {"linux": "linux"}
        tool = _tool(os_names=os_names)
        os_names["macos"] = "darwin"
        assert "macos" not in tool.os_names

    @pytest.mark.parametrize("name", ["", "a/b", ".hidden", "demo-versions"])
    def test_rejects_bad_names(self, name: str) -> None:
        with pytest.raises(ValueError):
            _tool(name=name)

    @pytest.mark.parametrize("exe", ["bin/demo", "..\\demo", ".", "..", ".demo"])
    def test_rejects_executable_paths(self, exe: str) -> None:
        with pytest.raises(ValueError, match="executable name must be a plain file name"):
            _tool(executable_name=exe)

    def test_accepts_windows_executable(self) -> None:
        assert _tool(executable_name="demo.exe").executable_name == "demo.exe"

    def test_rejects_unknown_placeholder(self) -> None:
        with pytest.raises(ValueError, match="placeholders"):
            _tool(url_template="https://example.com/{release}/demo")

    def test_checksum_strategy_needs_url(self) -> None:
        with pytest.raises(ValueError, match="checksum URL"):
            _tool(checksum_strategy=ChecksumStrategy.COMPANION_FILE)

    def test_checksum_url_may_use_url_and_file(self) -> None:
        tool = _tool(
            checksum_strategy=ChecksumStrategy.COMPANION_FILE,
            checksum_url_template="{url}.sha256",
        )
        assert tool.checksum_url_template == "{url}.sha256"

    def test_rejects_bad_version_pattern(self) -> None:
        with pytest.raises(ValueError, match="version pattern"):
            _tool(version_pattern="(")

    def test_bare_and_canonical_versions(self) -> None:
        prefixed = _tool(version_prefix="v")
        assert prefixed.bare_version("v1.29.0") == "1.29.0"
        assert prefixed.canonical_version("1.29.0") == "v1.29.0"
        assert prefixed.canonical_version("v1.29.0") == "v1.29.0"

        plain = _tool()
        assert plain.canonical_version("v1.5.0") == "1.5.0"

    def test_matches_version(self) -> None:
        tool = _tool()
        assert tool.matches_version("1.29.0")
        assert tool.matches_version("v1.30.0-rc.2")
        assert not tool.matches_version("1.29")
        assert not tool.matches_version("latest")
        assert not tool.matches_version("../1.0.0")
