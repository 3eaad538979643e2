"""Activation links - the stable per-tool executable path.

``<base>/<tool>`` is a symlink to ``<tool>-versions/<version>/<executable>``
(relative to the base directory). Repointing it is a two-step swap that is
atomic from the outside: a new symlink is created under a unique temporary
name next to the stable path, then renamed over it with ``os.replace``.
Readers resolving the stable path see the old link or the new one, never a
missing or half-made link. The old link is never removed first.
"""

from __future__ import annotations

import os
import uuid
from dataclasses import dataclass
from pathlib import Path, PurePath

from opstool.core.result import Err, Ok, Result
from opstool.platform.files import remove_quietly
from opstool.tools.errors import ActivationError, ActivationKind
from opstool.tools.store import VersionStore

__all__ = ["ActiveLink", "LinkManager"]


@dataclass(frozen=True, slots=True)
class ActiveLink:
    """The stable path of a tool and the version it points at.

    Attributes:
        tool_name: Tool identifier
        target_version: Version directory the link points into
        link_path: Stable executable path (``<base>/<tool>``)
        target: Link text as stored on disk
    """

    tool_name: str
    target_version: str
    link_path: Path
    target: str

    @property
    def resolved_target(self) -> Path:
        return self.link_path.parent / self.target

    @property
    def is_dangling(self) -> bool:
        return not self.resolved_target.exists()


class LinkManager:
    """Maintains ``<base>/<tool>`` links on top of a VersionStore.

    Activation never downloads anything; a version must be installed first.

    Usage:
        links = LinkManager(store)
        result = links.activate("kubectl", "v1.29.0")
    """

    def __init__(self, store: VersionStore) -> None:
        self._store = store

    def link_path(self, tool: str) -> Path:
        return self._store.base_dir / tool

    def current(self, tool: str) -> ActiveLink | None:
        """Read the stable link; None if absent or not managed by us."""
        link = self.link_path(tool)
        try:
            target = os.readlink(link)
        except OSError:
            # Missing, or a regular file / directory instead of a link.
            return None

        parts = PurePath(target).parts
        if len(parts) < 3 or parts[-3] != f"{tool}-versions":
            return None
        return ActiveLink(tool_name=tool, target_version=parts[-2], link_path=link, target=target)

    def activate(self, tool: str, version: str) -> Result[ActiveLink, ActivationError]:
        """Point the stable path of ``tool`` at an installed ``version``.

        Re-activating the active version succeeds without touching the link.
        On failure the previous link is left exactly as it was.
        """
        base = self._store.check_base(tool)
        if isinstance(base, Err):
            return Err(
                ActivationError(
                    kind="base_dir_missing",
                    tool=tool,
                    version=version,
                    message=base.error.message,
                    hint=base.error.hint,
                )
            )

        binary = self._store.resolve_path(tool, version)
        if isinstance(binary, Err):
            return Err(
                ActivationError(
                    kind="not_installed",
                    tool=tool,
                    version=version,
                    message=binary.error.message,
                    hint=binary.error.hint,
                )
            )

        link = self.link_path(tool)
        target = os.path.relpath(binary.value, self._store.base_dir)
        active = ActiveLink(tool_name=tool, target_version=version, link_path=link, target=target)

        try:
            existing: str | None = os.readlink(link)
        except OSError:
            # Missing, or a regular file / directory instead of a link.
            existing = None

        if existing == target:
            return Ok(active)
        if existing is None and link.exists() and not link.is_symlink():
            return Err(
                ActivationError(
                    kind="not_a_link",
                    tool=tool,
                    version=version,
                    message=f"{link} exists and is not a symlink",
                    hint="move the existing file away; it was not installed by opstool",
                )
            )

        tmp = link.with_name(f".{tool}.{uuid.uuid4().hex}.tmp")
        try:
            os.symlink(target, tmp)
        except PermissionError as e:
            return Err(self._error("permission_denied", tool, version, f"cannot create link: {e}"))
        except OSError as e:
            return Err(
                self._error(
                    "rename_failed",
                    tool,
                    version,
                    f"cannot create link: {e}",
                    hint="the filesystem must support symbolic links",
                )
            )

        try:
            os.replace(tmp, link)
        except PermissionError as e:
            remove_quietly(tmp)
            return Err(self._error("permission_denied", tool, version, f"cannot swap link: {e}"))
        except OSError as e:
            remove_quietly(tmp)
            return Err(self._error("rename_failed", tool, version, f"cannot swap link: {e}"))
        except BaseException:
            remove_quietly(tmp)
            raise

        return Ok(active)

    def _error(
        self,
        kind: ActivationKind,
        tool: str,
        version: str,
        message: str,
        hint: str | None = None,
    ) -> ActivationError:
        return ActivationError(
            kind=kind,
            tool=tool,
            version=version,
            message=message,
            hint=hint,
        )
