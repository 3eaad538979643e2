"""Version ordering.

Version strings are not lexicographically monotonic ("v1.9.0" < "v1.10.0"),
so installed versions are sorted with semantic-version precedence:
- numeric release components compare as integers
- a pre-release sorts before its release (1.6.0-rc.1 < 1.6.0)
- pre-release identifiers compare numerically when both are numbers,
  numbers sort before words
- build metadata ("+...") is ignored for ordering
Strings that are not versions at all sort after every real version.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

__all__ = ["ParsedVersion", "parse_version", "version_sort_key"]

_VERSION_RE = re.compile(
    r"^[vV]?(?P<release>\d+(?:\.\d+)*)(?:-(?P<pre>[0-9A-Za-z.\-]+))?(?:\+[0-9A-Za-z.\-]+)?$"
)

type _Ident = tuple[int, int, str]


@dataclass(frozen=True, slots=True, order=True)
class ParsedVersion:
    release: tuple[int, ...]
    is_final: bool
    pre: tuple[_Ident, ...]


def _ident(part: str) -> _Ident:
    if part.isdigit():
        return (0, int(part), "")
    return (1, 0, part)


def parse_version(text: str) -> ParsedVersion | None:
    m = _VERSION_RE.match(text.strip())
    if m is None:
        return None
    release = tuple(int(p) for p in m.group("release").split("."))
    # 1.2 and 1.2.0 are the same release
    while len(release) > 1 and release[-1] == 0:
        release = release[:-1]
    pre_text = m.group("pre")
    pre = tuple(_ident(p) for p in pre_text.split(".")) if pre_text else ()
    return ParsedVersion(release=release, is_final=not pre, pre=pre)


def version_sort_key(text: str) -> tuple[int, ParsedVersion, str]:
    """Sort key placing versions in ascending semantic order."""
    parsed = parse_version(text)
    if parsed is None:
        return (1, ParsedVersion(release=(), is_final=False, pre=()), text)
    return (0, parsed, text)
