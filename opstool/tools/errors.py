"""Typed error payloads for each engine stage.

Every stage returns ``Err(...)`` with one of these frozen dataclasses. They
all expose ``kind``, ``message``, ``hint`` and a class-level ``stage`` so the
CLI can report how far an operation got before failing.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Literal

__all__ = [
    "Stage",
    "ResolutionError",
    "FetchError",
    "StoreError",
    "ActivationError",
    "EngineError",
    "ActivationKind",
]


type ActivationKind = Literal[
    "not_installed",
    "rename_failed",
    "permission_denied",
    "not_a_link",
    "base_dir_missing",
]


class Stage(Enum):
    """Pipeline stage an operation reached."""

    RESOLVE = "resolve"
    FETCH = "fetch"
    INSTALL = "install"
    ACTIVATE = "activate"

    def __str__(self) -> str:
        return self.value


def _pretty(stage: Stage, message: str, hint: str | None) -> str:
    text = f"[{stage}] {message}"
    if hint:
        return f"{text} (hint: {hint})"
    return text


@dataclass(frozen=True, slots=True)
class ResolutionError:
    """A tool/version/platform triple could not be turned into a URL."""

    kind: Literal[
        "unknown_tool",
        "unsupported_platform",
        "version_not_found",
        "latest_lookup_failed",
    ]
    tool: str
    message: str
    hint: str | None = None

    stage: ClassVar[Stage] = Stage.RESOLVE

    def pretty(self) -> str:
        return _pretty(self.stage, self.message, self.hint)


@dataclass(frozen=True, slots=True)
class FetchError:
    """Download, verification or extraction of an artifact failed.

    Attributes:
        kind: ``transient`` only surfaces once the retry budget is spent
        url: URL being fetched when the failure happened
        attempts: Number of attempts made for the failing request
    """

    kind: Literal[
        "transient",
        "not_found",
        "forbidden",
        "http",
        "integrity_check_failed",
        "artifact_layout",
        "io",
    ]
    url: str
    message: str
    hint: str | None = None
    attempts: int = 1

    stage: ClassVar[Stage] = Stage.FETCH

    def pretty(self) -> str:
        return _pretty(self.stage, self.message, self.hint)


@dataclass(frozen=True, slots=True)
class StoreError:
    """The version store could not satisfy a lookup or an install."""

    kind: Literal["not_installed", "base_dir_missing", "io"]
    tool: str
    message: str
    hint: str | None = None
    version: str | None = None

    stage: ClassVar[Stage] = Stage.INSTALL

    def pretty(self) -> str:
        return _pretty(self.stage, self.message, self.hint)


@dataclass(frozen=True, slots=True)
class ActivationError:
    """The stable link could not be repointed; the previous link is intact."""

    kind: ActivationKind
    tool: str
    message: str
    hint: str | None = None
    version: str | None = None

    stage: ClassVar[Stage] = Stage.ACTIVATE

    def pretty(self) -> str:
        return _pretty(self.stage, self.message, self.hint)


type EngineError = ResolutionError | FetchError | StoreError | ActivationError
