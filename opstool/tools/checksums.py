"""Parsing of published SHA-256 digests.

Two layouts are in use:
- companion files: a single digest, optionally followed by the file name
  (``<hex>`` or ``<hex>  <file>``)
- manifests: one ``<hex>  <file>`` line per release asset (SHA256SUMS)
"""

from __future__ import annotations

from opstool.tools.base import ChecksumStrategy

__all__ = ["is_sha256", "parse_checksum"]


def is_sha256(value: str) -> bool:
    if len(value) != 64:
        return False
    return all(ch in "0123456789abcdef" for ch in value)


def parse_checksum(text: str, artifact_name: str, strategy: ChecksumStrategy) -> str | None:
    """Return the expected lowercase hex digest for ``artifact_name``, or None.

    Manifests must list the artifact by name. Companion files may carry a
    bare digest; if they name files, the artifact's entry wins.
    """
    bare: str | None = None
    for line in text.splitlines():
        tokens = line.split()
        if not tokens:
            continue
        digest = tokens[0].lower()
        if not is_sha256(digest):
            continue
        if len(tokens) == 1:
            if bare is None:
                bare = digest
            continue
        # "*name" marks binary mode in sha256sum output
        name = tokens[-1].lstrip("*")
        if name.rsplit("/", 1)[-1] == artifact_name:
            return digest
        if strategy is ChecksumStrategy.COMPANION_FILE and bare is None:
            bare = digest

    if strategy is ChecksumStrategy.COMPANION_FILE:
        return bare
    return None
