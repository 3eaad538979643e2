"""Artifact retrieval: download, verify, extract.

The Retriever turns a ResolvedVersion into a TempArtifact: a validated,
executable file sitting in the tool's staging directory, ready for the
Version Store to rename into place. It:
- streams the download into a uniquely named file in the staging
  directory (same volume as the store, never the system temp dir)
- retries transient failures with exponential backoff, never 4xx
- verifies the artifact against the published SHA-256, or falls back to a
  minimum-size check for tools without checksums
- extracts exactly one executable member from archives

Whatever happens, including KeyboardInterrupt, temporary files are removed
unless a TempArtifact is handed back.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from opstool.core.result import Err, Ok, Result
from opstool.platform.files import make_executable, mkstemp_in, remove_quietly, sha256_file
from opstool.tools.archive import ArchiveExtractor
from opstool.tools.base import ArtifactKind, ChecksumStrategy
from opstool.tools.checksums import parse_checksum
from opstool.tools.errors import FetchError, StoreError
from opstool.tools.http import HttpError
from opstool.tools.retry import RetryPolicy, with_retry

if TYPE_CHECKING:
    from opstool.tools.http import HttpClient
    from opstool.tools.resolver import ResolvedVersion

__all__ = [
    "DEFAULT_MIN_SIZE",
    "StagingArea",
    "TempArtifact",
    "Retriever",
]

# An HTML error page served with 200 is typically well under this.
DEFAULT_MIN_SIZE = 1024


class StagingArea(Protocol):
    """Where in-flight artifacts are written (implemented by VersionStore)."""

    def staging_dir(self, tool: str) -> Result[Path, StoreError]: ...


@dataclass(frozen=True, slots=True)
class TempArtifact:
    """A validated executable awaiting installation.

    Attributes:
        resolved: The version this artifact was fetched for
        path: Executable file inside the staging directory
        sha256: Digest of the downloaded artifact (archive or binary)
        size: Size of the downloaded artifact in bytes
        checksum_verified: True if a published digest was compared
    """

    resolved: ResolvedVersion
    path: Path
    sha256: str
    size: int
    checksum_verified: bool

    def discard(self) -> None:
        """Remove the staged file if it was not installed."""
        remove_quietly(self.path)


def _fetch_error(error: HttpError, attempts: int, what: str) -> FetchError:
    if error.status == 404:
        return FetchError(
            kind="not_found",
            url=error.url,
            message=f"{what} not found",
            hint=str(error),
            attempts=attempts,
        )
    if error.status in (401, 403):
        return FetchError(
            kind="forbidden",
            url=error.url,
            message=f"access to {what} was refused",
            hint=str(error),
            attempts=attempts,
        )
    if error.is_transient:
        return FetchError(
            kind="transient",
            url=error.url,
            message=f"{what} failed after {attempts} attempt(s)",
            hint=str(error),
            attempts=attempts,
        )
    return FetchError(
        kind="http",
        url=error.url,
        message=f"{what} failed",
        hint=str(error),
        attempts=attempts,
    )


class Retriever:
    """Fetches and validates artifacts for resolved versions.

    Usage:
        retriever = Retriever(RealHttpClient(timeout=30), store)
        result = retriever.fetch(resolved)
        if is_ok(result):
            store.install(..., result.value.path, ...)
    """

    def __init__(
        self,
        http: HttpClient,
        staging: StagingArea,
        *,
        policy: RetryPolicy | None = None,
        min_size: int = DEFAULT_MIN_SIZE,
        sleep: Callable[[float], None] = time.sleep,
        extractor: ArchiveExtractor | None = None,
        on_retry: Callable[[int, HttpError], None] | None = None,
    ) -> None:
        self._http = http
        self._staging = staging
        self._policy = policy or RetryPolicy()
        self._min_size = min_size
        self._sleep = sleep
        self._extractor = extractor or ArchiveExtractor()
        self._on_retry = on_retry

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    def fetch(
        self,
        resolved: ResolvedVersion,
        *,
        progress: Callable[[int, int], None] | None = None,
    ) -> Result[TempArtifact, FetchError]:
        """Download and validate the artifact of ``resolved``."""
        staging = self._staging.staging_dir(resolved.tool_name)
        if isinstance(staging, Err):
            return Err(
                FetchError(
                    kind="io",
                    url=resolved.download_url,
                    message=staging.error.message,
                    hint=staging.error.hint,
                )
            )
        staging_dir = staging.value

        download: Path | None = None
        binary: Path | None = None
        handed_over = False
        try:
            part = mkstemp_in(staging_dir, prefix=f".{resolved.artifact_name}.", suffix=".part")
            download = part

            attempted = with_retry(
                lambda: self._http.download(resolved.download_url, part, progress),
                self._policy,
                sleep=self._sleep,
                on_retry=self._on_retry,
            )
            if isinstance(attempted.result, Err):
                return Err(_fetch_error(attempted.result.error, attempted.attempts, "download"))

            digest = sha256_file(part)
            size = part.stat().st_size

            verified = self._verify(resolved, digest, size)
            if isinstance(verified, Err):
                return verified

            if resolved.artifact_kind is ArtifactKind.ARCHIVE:
                binary = mkstemp_in(
                    staging_dir, prefix=f".{resolved.executable_name}.", suffix=".part"
                )
                extracted = self._extractor.extract(
                    part,
                    resolved.artifact_name,
                    resolved.executable_name,
                    binary,
                    url=resolved.download_url,
                )
                if isinstance(extracted, Err):
                    return extracted
            else:
                make_executable(part)
                binary, download = part, None

            handed_over = True
            return Ok(
                TempArtifact(
                    resolved=resolved,
                    path=binary,
                    sha256=digest,
                    size=size,
                    checksum_verified=verified.value,
                )
            )
        except OSError as e:
            return Err(
                FetchError(
                    kind="io",
                    url=resolved.download_url,
                    message=f"failed to stage artifact: {e}",
                )
            )
        finally:
            remove_quietly(download)
            if not handed_over:
                remove_quietly(binary)

    def _verify(
        self, resolved: ResolvedVersion, digest: str, size: int
    ) -> Result[bool, FetchError]:
        """Ok(True) if a published checksum matched, Ok(False) if only size was checked."""
        if resolved.checksum_strategy is ChecksumStrategy.NONE or resolved.checksum_url is None:
            if size < self._min_size:
                return Err(
                    FetchError(
                        kind="integrity_check_failed",
                        url=resolved.download_url,
                        message=f"download is only {size} bytes, expected a binary",
                        hint="the server probably returned an error page",
                    )
                )
            return Ok(False)

        checksum_url = resolved.checksum_url
        attempted = with_retry(
            lambda: self._http.get_text(checksum_url),
            self._policy,
            sleep=self._sleep,
            on_retry=self._on_retry,
        )
        if isinstance(attempted.result, Err):
            return Err(_fetch_error(attempted.result.error, attempted.attempts, "checksum"))

        expected = parse_checksum(
            attempted.result.value, resolved.artifact_name, resolved.checksum_strategy
        )
        if expected is None:
            return Err(
                FetchError(
                    kind="integrity_check_failed",
                    url=checksum_url,
                    message=f"no sha256 for {resolved.artifact_name} in {checksum_url}",
                )
            )
        if expected != digest:
            return Err(
                FetchError(
                    kind="integrity_check_failed",
                    url=resolved.download_url,
                    message=f"checksum mismatch for {resolved.artifact_name}",
                    hint=f"expected {expected}, got {digest}",
                )
            )
        return Ok(True)
