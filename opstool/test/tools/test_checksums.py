"""Tests for tools/checksums.py - published digest parsing."""

from __future__ import annotations

from opstool.tools.base import ChecksumStrategy
from opstool.tools.checksums import is_sha256, parse_checksum

A = "a" * 64
B = "b" * 64
C = "0123456789abcdef" * 4

COMPANION = ChecksumStrategy.COMPANION_FILE
MANIFEST = ChecksumStrategy.EMBEDDED_MANIFEST


class TestIsSha256:
    def test_valid(self) -> None:
        assert is_sha256(C)

    def test_invalid(self) -> None:
        assert not is_sha256("a" * 63)
        assert not is_sha256("g" * 64)
        assert not is_sha256("")


class TestCompanionFile:
    """kubectl/kops style ``<hex>`` and helm style ``<hex>  <file>``."""

    def test_bare_digest(self) -> None:
        assert parse_checksum(f"{C}\n", "kubectl", COMPANION) == C

    def test_uppercase_is_normalized(self) -> None:
        assert parse_checksum(C.upper(), "kubectl", COMPANION) == C

    def test_digest_with_name(self) -> None:
        text = f"{A}  helm-v3.14.0-linux-amd64.tar.gz\n"
        assert parse_checksum(text, "helm-v3.14.0-linux-amd64.tar.gz", COMPANION) == A

    def test_named_entry_wins(self) -> None:
        text = f"{A}  other.tar.gz\n{B}  helm.tar.gz\n"
        assert parse_checksum(text, "helm.tar.gz", COMPANION) == B

    def test_falls_back_to_first_digest(self) -> None:
        assert parse_checksum(f"{A}  renamed.tar.gz\n", "helm.tar.gz", COMPANION) == A

    def test_garbage(self) -> None:
        assert parse_checksum("<html>404</html>", "kubectl", COMPANION) is None


class TestManifest:
    """terraform style SHA256SUMS."""

    def test_finds_artifact(self) -> None:
        text = (
            f"{A}  terraform_1.5.0_darwin_arm64.zip\n"
            f"{B}  terraform_1.5.0_linux_amd64.zip\n"
        )
        assert parse_checksum(text, "terraform_1.5.0_linux_amd64.zip", MANIFEST) == B

    def test_binary_mode_marker_and_paths(self) -> None:
        text = f"{B} *dist/terraform_1.5.0_linux_amd64.zip\n"
        assert parse_checksum(text, "terraform_1.5.0_linux_amd64.zip", MANIFEST) == B

    def test_artifact_missing(self) -> None:
        text = f"{A}  terraform_1.5.0_darwin_arm64.zip\n"
        assert parse_checksum(text, "terraform_1.5.0_linux_amd64.zip", MANIFEST) is None

    def test_bare_digest_not_accepted(self) -> None:
        assert parse_checksum(A, "terraform_1.5.0_linux_amd64.zip", MANIFEST) is None
