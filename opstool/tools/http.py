"""HTTP client abstraction for release lookups and downloads.

This module provides:
- HttpClient: Protocol for HTTP operations (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Mock implementation for testing

Clients make exactly one attempt per call; retry policy lives in the
Retriever, which is the only place that knows which calls are idempotent.
"""

from __future__ import annotations

import http.client
import json
import ssl
import time
import urllib.error
import urllib.request
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, cast, runtime_checkable

from opstool import __version__
from opstool.core.result import Err, Ok, Result
from opstool.core.structured import as_str_dict

if TYPE_CHECKING:
    from collections.abc import Callable

__all__ = [
    "HttpClient",
    "RealHttpClient",
    "MockHttpClient",
    "HttpError",
]

_CHUNK_SIZE = 64 * 1024
_SOCKET_TIMEOUT = 30.0


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Human-readable error message
        retryable: False for failures a retry cannot fix (malformed URL, bad JSON)
    """

    url: str
    status: int
    message: str
    retryable: bool = True

    @property
    def is_transient(self) -> bool:
        """Connection resets, timeouts and 5xx responses are worth retrying."""
        if not self.retryable:
            return False
        return self.status == 0 or 500 <= self.status < 600

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP operations.

    This abstraction allows injecting mock clients for testing,
    avoiding real network calls in unit tests.
    """

    def get_json(self, url: str) -> Result[dict[str, Any], HttpError]:
        """Fetch URL and parse as a JSON object."""
        ...

    def get_text(self, url: str) -> Result[str, HttpError]:
        """Fetch URL and return as text."""
        ...

    def download(
        self,
        url: str,
        dest: Path,
        progress: Callable[[int, int], None] | None = None,
    ) -> Result[Path, HttpError]:
        """Stream URL into ``dest``, truncating it first.

        Args:
            url: URL to download
            dest: Destination path (must already be writable)
            progress: Optional callback(downloaded, total) for progress

        Returns:
            Ok with dest path, or Err with HttpError

        Raises:
            OSError: If ``dest`` cannot be opened or written
        """
        ...


class RealHttpClient:
    """Real HTTP client using urllib.

    Handles:
    - HTTPS with system certificates
    - Redirects (GitHub release assets redirect to object storage)
    - Per-attempt deadline covering connect and the whole body
    - Truncated bodies (Content-Length mismatch is a transient error)
    """

    def __init__(self, timeout: float = 300.0, user_agent: str = f"opstool/{__version__}") -> None:
        """Initialize HTTP client.

        Args:
            timeout: Seconds allowed for one attempt, including the body
            user_agent: User-Agent header value (GitHub's API requires one)
        """
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def _open(self, url: str) -> http.client.HTTPResponse:
        req = urllib.request.Request(url, headers={"User-Agent": self.user_agent})
        return cast(
            http.client.HTTPResponse,
            urllib.request.urlopen(
                req, timeout=min(self.timeout, _SOCKET_TIMEOUT), context=self._ssl_context
            ),
        )

    def _read_chunk(self, response: http.client.HTTPResponse, deadline: float) -> bytes:
        # read1 returns what has arrived; the deadline bounds the whole attempt.
        if time.monotonic() > deadline:
            raise TimeoutError
        return response.read1(_CHUNK_SIZE)

    def _to_error(self, url: str, e: Exception) -> HttpError:
        if isinstance(e, urllib.error.HTTPError):
            return HttpError(url=url, status=e.code, message=str(e.reason))
        if isinstance(e, urllib.error.URLError):
            return HttpError(url=url, status=0, message=str(e.reason))
        if isinstance(e, TimeoutError):
            return HttpError(
                url=url, status=0, message=f"Attempt timed out after {self.timeout:g}s"
            )
        if isinstance(e, http.client.HTTPException):
            return HttpError(url=url, status=0, message=f"Connection broken: {e!r}")
        if isinstance(e, ValueError):
            return HttpError(url=url, status=0, message=str(e), retryable=False)
        return HttpError(url=url, status=0, message=str(e))

    def _request(self, url: str) -> Result[bytes, HttpError]:
        deadline = time.monotonic() + self.timeout
        body = bytearray()
        try:
            with self._open(url) as response:
                while chunk := self._read_chunk(response, deadline):
                    body += chunk
                if response.length:
                    raise http.client.IncompleteRead(bytes(body), response.length)
        except (OSError, ValueError, http.client.HTTPException) as e:
            return Err(self._to_error(url, e))
        return Ok(bytes(body))

    def get_json(self, url: str) -> Result[dict[str, Any], HttpError]:
        """Fetch URL and parse as JSON."""
        result = self._request(url)
        if isinstance(result, Err):
            return result

        try:
            data_obj: object = json.loads(result.value.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return Err(
                HttpError(url=url, status=0, message=f"JSON parse error: {e}", retryable=False)
            )
        data = as_str_dict(data_obj)
        if data is None:
            return Err(HttpError(url=url, status=0, message="Expected JSON object", retryable=False))
        return Ok(cast(dict[str, Any], data))

    def get_text(self, url: str) -> Result[str, HttpError]:
        """Fetch URL and return as text."""
        result = self._request(url)
        if isinstance(result, Err):
            return result

        try:
            return Ok(result.value.decode("utf-8"))
        except UnicodeDecodeError as e:
            return Err(HttpError(url=url, status=0, message=f"Decode error: {e}", retryable=False))

    def download(
        self,
        url: str,
        dest: Path,
        progress: Callable[[int, int], None] | None = None,
    ) -> Result[Path, HttpError]:
        """Download URL to file with optional progress callback.

        Only network failures become HttpError; errors opening or writing
        ``dest`` propagate as OSError.
        """
        deadline = time.monotonic() + self.timeout
        with open(dest, "wb") as f:
            try:
                response = self._open(url)
            except (OSError, ValueError, http.client.HTTPException) as e:
                return Err(self._to_error(url, e))

            with response:
                total = int(response.headers.get("Content-Length", 0) or 0)
                downloaded = 0
                while True:
                    try:
                        chunk = self._read_chunk(response, deadline)
                    except (OSError, http.client.HTTPException) as e:
                        return Err(self._to_error(url, e))
                    if not chunk:
                        break
                    f.write(chunk)
                    downloaded += len(chunk)
                    if progress:
                        progress(downloaded, total)
            f.flush()

        if total and downloaded != total:
            return Err(
                HttpError(
                    url=url,
                    status=0,
                    message=f"Truncated download: got {downloaded} of {total} bytes",
                )
            )
        return Ok(dest)


type _Scripted[T] = T | HttpError | Sequence[T | HttpError]


class MockHttpClient:
    """Mock HTTP client for testing.

    Responses are set per URL. A list scripts successive calls (the last
    entry repeats), which is how retry behaviour is exercised.

    Usage:
        client = MockHttpClient()
        client.set_download(url, [HttpError(url, 503, "busy"), b"binary"])
        result = client.download(url, dest)   # first call -> Err(503)
    """

    def __init__(self) -> None:
        self._json_responses: dict[str, list[dict[str, Any] | HttpError]] = {}
        self._text_responses: dict[str, list[str | HttpError]] = {}
        self._download_responses: dict[str, list[bytes | HttpError]] = {}
        self.calls: list[tuple[str, str]] = []

    @staticmethod
    def _script[T](response: _Scripted[T]) -> list[T | HttpError]:
        if isinstance(response, (list, tuple)):
            return list(cast(Sequence[T | HttpError], response))
        return [cast(T | HttpError, response)]

    @staticmethod
    def _next[T](script: list[T | HttpError]) -> T | HttpError:
        if len(script) > 1:
            return script.pop(0)
        return script[0]

    def set_json(self, url: str, response: _Scripted[dict[str, Any]]) -> None:
        """Set JSON response(s) for URL."""
        self._json_responses[url] = self._script(response)

    def set_text(self, url: str, response: _Scripted[str]) -> None:
        """Set text response(s) for URL."""
        self._text_responses[url] = self._script(response)

    def set_download(self, url: str, response: _Scripted[bytes]) -> None:
        """Set download content(s) for URL."""
        self._download_responses[url] = self._script(response)

    def count(self, method: str, url: str | None = None) -> int:
        """Number of recorded calls for a method (optionally a single URL)."""
        return sum(1 for m, u in self.calls if m == method and (url is None or u == url))

    def get_json(self, url: str) -> Result[dict[str, Any], HttpError]:
        """Get mocked JSON response."""
        self.calls.append(("get_json", url))

        if url not in self._json_responses:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))

        response = self._next(self._json_responses[url])
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def get_text(self, url: str) -> Result[str, HttpError]:
        """Get mocked text response."""
        self.calls.append(("get_text", url))

        if url not in self._text_responses:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))

        response = self._next(self._text_responses[url])
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def download(
        self,
        url: str,
        dest: Path,
        progress: Callable[[int, int], None] | None = None,
    ) -> Result[Path, HttpError]:
        """Mock download - writes predefined content to dest."""
        self.calls.append(("download", url))

        if url not in self._download_responses:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))

        response = self._next(self._download_responses[url])
        if isinstance(response, HttpError):
            return Err(response)

        dest.write_bytes(response)
        if progress:
            progress(len(response), len(response))

        return Ok(dest)
