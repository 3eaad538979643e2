"""Version store - the on-disk registry of installed tool versions.

Layout, rooted at the base directory:

    <base>/<tool>-versions/<version>/<executable>      installed binary
    <base>/<tool>-versions/<version>/.install.json     install record
    <base>/<tool>-versions/.staging/                   in-flight downloads

An entry is verified only when both the binary and its record exist. The
binary reaches its final path through a same-volume ``os.replace`` from the
staging directory, and the record is written atomically afterwards, so a
reader never sees a partial binary or a record without its binary.

Nothing is cached: every lookup re-reads the directory, so concurrent
invocations always agree on what is installed.
"""

from __future__ import annotations

import errno
import json
import os
from collections.abc import Callable
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from opstool.core.result import Err, Ok, Result
from opstool.core.structured import as_str_dict, get_str
from opstool.platform.files import atomic_write_text
from opstool.tools.errors import StoreError
from opstool.tools.versions import version_sort_key

__all__ = [
    "InstalledVersion",
    "VersionStore",
    "RECORD_FILE",
    "STAGING_DIR",
]

RECORD_FILE = ".install.json"
STAGING_DIR = ".staging"


@dataclass(frozen=True, slots=True)
class InstalledVersion:
    """One installed (tool, version) pair.

    Attributes:
        tool_name: Tool identifier
        version: Canonical version (the directory name)
        binary_path: Final path of the executable
        installed_at: ISO timestamp of installation
        verified: True once the binary and its record are both in place
        sha256: Digest of the downloaded artifact, if known
        source_url: URL the artifact was downloaded from, if known
    """

    tool_name: str
    version: str
    binary_path: Path
    installed_at: str
    verified: bool
    sha256: str | None = None
    source_url: str | None = None

    def to_record(self) -> dict[str, Any]:
        data = asdict(self)
        data["binary_path"] = self.binary_path.name
        return data


class VersionStore:
    """Per-tool registry of installed versions.

    The base directory must already exist; the store creates only the
    ``<tool>-versions`` tree beneath it.

    Usage:
        store = VersionStore(Path.home() / ".local" / "bin")
        for entry in store.list_installed("kubectl"):
            print(entry.version, entry.binary_path)
    """

    def __init__(
        self,
        base_dir: Path,
        *,
        sort_key: Callable[[str], Any] = version_sort_key,
    ) -> None:
        self._base_dir = base_dir
        self._sort_key = sort_key

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def versions_dir(self, tool: str) -> Path:
        return self._base_dir / f"{tool}-versions"

    def version_dir(self, tool: str, version: str) -> Path:
        return self.versions_dir(tool) / version

    def check_base(self, tool: str) -> Result[Path, StoreError]:
        """Fail clearly when the base directory is absent or not writable."""
        if not self._base_dir.is_dir():
            return Err(
                StoreError(
                    kind="base_dir_missing",
                    tool=tool,
                    message=f"base directory does not exist: {self._base_dir}",
                    hint="create it, or point --base-dir / OPSTOOL_BASE_DIR elsewhere",
                )
            )
        if not os.access(self._base_dir, os.W_OK | os.X_OK):
            return Err(
                StoreError(
                    kind="base_dir_missing",
                    tool=tool,
                    message=f"base directory is not writable: {self._base_dir}",
                )
            )
        return Ok(self._base_dir)

    def staging_dir(self, tool: str) -> Result[Path, StoreError]:
        """Directory for in-flight artifacts, on the same volume as the store."""
        base = self.check_base(tool)
        if isinstance(base, Err):
            return base
        path = self.versions_dir(tool) / STAGING_DIR
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return Err(
                StoreError(kind="io", tool=tool, message=f"cannot create {path}: {e}")
            )
        return Ok(path)

    def get(self, tool: str, version: str) -> InstalledVersion | None:
        """Return the verified entry for (tool, version), or None."""
        vdir = self.version_dir(tool, version)
        record_path = vdir / RECORD_FILE
        try:
            data_obj: object = json.loads(record_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError, UnicodeDecodeError):
            # An unreadable record means the entry was never completed.
            return None

        data = as_str_dict(data_obj)
        if data is None or data.get("verified") is not True:
            return None
        binary_name = get_str(data, "binary_path")
        installed_at = get_str(data, "installed_at")
        if binary_name is None or installed_at is None or "/" in binary_name:
            return None

        binary_path = vdir / binary_name
        if not binary_path.is_file():
            return None

        return InstalledVersion(
            tool_name=tool,
            version=version,
            binary_path=binary_path,
            installed_at=installed_at,
            verified=True,
            sha256=get_str(data, "sha256"),
            source_url=get_str(data, "source_url"),
        )

    def is_installed(self, tool: str, version: str) -> bool:
        return self.get(tool, version) is not None

    def install(
        self,
        tool: str,
        version: str,
        artifact: Path,
        *,
        executable_name: str | None = None,
        sha256: str | None = None,
        source_url: str | None = None,
        replace: bool = False,
    ) -> Result[InstalledVersion, StoreError]:
        """Move a validated artifact into its final per-version path.

        Idempotent: an existing verified entry is returned untouched (unless
        ``replace``). The artifact must live in ``staging_dir(tool)`` so the
        move is a same-volume rename. On success the artifact path no longer
        exists; on an idempotent hit it is left for the caller to discard.
        """
        base = self.check_base(tool)
        if isinstance(base, Err):
            return base

        # Re-check right before the rename: a concurrent invocation may have
        # finished the same install while this one was downloading.
        existing = self.get(tool, version)
        if existing is not None and not replace:
            return Ok(existing)

        if not artifact.is_file():
            return Err(
                StoreError(
                    kind="io",
                    tool=tool,
                    version=version,
                    message=f"artifact to install does not exist: {artifact}",
                )
            )

        vdir = self.version_dir(tool, version)
        binary_path = vdir / (executable_name or tool)
        entry = InstalledVersion(
            tool_name=tool,
            version=version,
            binary_path=binary_path,
            installed_at=datetime.now().isoformat(timespec="seconds"),
            verified=True,
            sha256=sha256,
            source_url=source_url,
        )

        try:
            vdir.mkdir(parents=True, exist_ok=True)
            os.replace(artifact, binary_path)
            atomic_write_text(vdir / RECORD_FILE, json.dumps(entry.to_record(), indent=2))
        except OSError as e:
            hint = None
            if e.errno == errno.EXDEV:
                hint = "the staging directory and the store are on different filesystems"
            return Err(
                StoreError(
                    kind="io",
                    tool=tool,
                    version=version,
                    message=f"failed to install {tool} {version}: {e}",
                    hint=hint,
                )
            )

        return Ok(entry)

    def list_installed(self, tool: str) -> list[InstalledVersion]:
        """Verified entries for ``tool``, ascending by version."""
        root = self.versions_dir(tool)
        try:
            children = list(root.iterdir())
        except (FileNotFoundError, NotADirectoryError):
            return []

        entries: list[InstalledVersion] = []
        for child in children:
            if child.name.startswith(".") or not child.is_dir():
                continue
            entry = self.get(tool, child.name)
            if entry is not None:
                entries.append(entry)

        entries.sort(key=lambda e: self._sort_key(e.version))
        return entries

    def resolve_path(self, tool: str, version: str) -> Result[Path, StoreError]:
        """Binary path of a verified entry, or ``not_installed``."""
        entry = self.get(tool, version)
        if entry is None:
            return Err(
                StoreError(
                    kind="not_installed",
                    tool=tool,
                    version=version,
                    message=f"{tool} {version} is not installed",
                    hint=f"run: opstool install {tool} {version}",
                )
            )
        return Ok(entry.binary_path)
