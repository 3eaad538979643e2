"""Release metadata lookups used to answer "latest".

GitHub's ``/releases/latest`` endpoint already skips drafts and
prereleases, so its ``tag_name`` is the newest stable release.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from opstool.core.result import Err, Ok, Result
from opstool.tools.http import HttpError

if TYPE_CHECKING:
    from opstool.tools.http import HttpClient

__all__ = ["GITHUB_API", "github_latest_release"]

GITHUB_API = "https://api.github.com"


def github_latest_release(http: HttpClient, repo: str) -> Result[str, HttpError]:
    """Return the newest release tag of ``repo`` ("owner/name"), minus any "v".

    A response without a usable ``tag_name`` is a permanent error; transport
    failures keep their ``HttpError`` so the caller's retry policy applies.
    """
    url = f"{GITHUB_API}/repos/{repo}/releases/latest"
    fetched = http.get_json(url)
    if isinstance(fetched, Err):
        return fetched

    tag = fetched.value.get("tag_name")
    if not isinstance(tag, str) or not tag.strip():
        return Err(
            HttpError(url=url, status=0, message="release has no tag_name", retryable=False)
        )
    return Ok(tag.strip().removeprefix("v"))
