"""Single-member extraction from release archives.

Tools shipped as archives (terraform zips, helm tarballs) contain exactly
one executable we care about. ArchiveExtractor locates that member by file
name anywhere in the archive and writes it, alone, to a destination file.
Everything else in the archive is ignored.

Supports:
- .zip archives
- .tar.gz / .tgz archives
- .tar.xz / .txz archives
"""

from __future__ import annotations

import os
import shutil
import stat
import tarfile
import zipfile
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import IO, Literal

from opstool.core.result import Err, Ok, Result
from opstool.platform.files import make_executable
from opstool.tools.errors import FetchError

__all__ = ["ArchiveExtractor", "archive_format"]

type ArchiveFormat = Literal["zip", "gz", "xz"]


def archive_format(name: str) -> ArchiveFormat | None:
    """Archive format from a file name, or None when not an archive."""
    # NOTE: Path.suffixes is not reliable for names like "terraform_1.5.0_linux_amd64.zip"
    # because it splits on every dot.
    lowered = name.lower()
    if lowered.endswith((".tar.gz", ".tgz")):
        return "gz"
    if lowered.endswith((".tar.xz", ".txz")):
        return "xz"
    if lowered.endswith(".zip"):
        return "zip"
    return None


@dataclass(frozen=True, slots=True)
class _Member:
    name: str
    is_regular: bool


def _member_matches(member_name: str, executable_name: str) -> bool:
    normalized = member_name.replace("\\", "/").rstrip("/")
    return PurePosixPath(normalized).name == executable_name


class ArchiveExtractor:
    """Extracts one named executable from an archive.

    Usage:
        extractor = ArchiveExtractor()
        result = extractor.extract(archive, "terraform_1.5.0_linux_amd64.zip",
                                   "terraform", dest, url=url)
    """

    def extract(
        self,
        archive: Path,
        archive_name: str,
        executable_name: str,
        dest: Path,
        *,
        url: str,
    ) -> Result[Path, FetchError]:
        """Write the ``executable_name`` member of ``archive`` to ``dest``.

        Fails with ``artifact_layout`` if the member is absent, matches more
        than once, is not a regular file, or is not executable afterwards.
        """
        fmt = archive_format(archive_name)
        if fmt is None:
            return Err(
                FetchError(
                    kind="artifact_layout",
                    url=url,
                    message=f"unsupported archive format: {archive_name}",
                )
            )

        try:
            if fmt == "zip":
                result = self._extract_zip(archive, executable_name, dest, url)
            else:
                result = self._extract_tar(archive, fmt, executable_name, dest, url)
        except (tarfile.TarError, zipfile.BadZipFile, EOFError) as e:
            return Err(
                FetchError(
                    kind="artifact_layout",
                    url=url,
                    message=f"corrupt archive {archive_name}: {e}",
                )
            )
        except OSError as e:
            return Err(FetchError(kind="io", url=url, message=f"extraction failed: {e}"))

        if isinstance(result, Err):
            return result
        return self._check_executable(dest, executable_name, url)

    def _pick(
        self, members: list[_Member], executable_name: str, url: str
    ) -> Result[_Member, FetchError]:
        matches = [m for m in members if _member_matches(m.name, executable_name)]
        if not matches:
            return Err(
                FetchError(
                    kind="artifact_layout",
                    url=url,
                    message=f"archive has no member named {executable_name!r}",
                )
            )
        if len(matches) > 1:
            return Err(
                FetchError(
                    kind="artifact_layout",
                    url=url,
                    message=f"archive has {len(matches)} members named {executable_name!r}",
                    hint=", ".join(m.name for m in matches),
                )
            )
        member = matches[0]
        if not member.is_regular:
            return Err(
                FetchError(
                    kind="artifact_layout",
                    url=url,
                    message=f"archive member {member.name!r} is not a regular file",
                )
            )
        return Ok(member)

    def _extract_zip(
        self, archive: Path, executable_name: str, dest: Path, url: str
    ) -> Result[Path, FetchError]:
        with zipfile.ZipFile(archive, "r") as zf:
            infos = {info.filename: info for info in zf.infolist() if not info.is_dir()}
            members = [
                _Member(
                    name=name,
                    is_regular=((info.external_attr >> 16) & 0o170000) != stat.S_IFLNK,
                )
                for name, info in infos.items()
            ]
            picked = self._pick(members, executable_name, url)
            if isinstance(picked, Err):
                return picked

            with zf.open(infos[picked.value.name]) as src:
                self._write(src, dest)
        return Ok(dest)

    def _extract_tar(
        self,
        archive: Path,
        fmt: ArchiveFormat,
        executable_name: str,
        dest: Path,
        url: str,
    ) -> Result[Path, FetchError]:
        mode = "r:gz" if fmt == "gz" else "r:xz"
        with tarfile.open(archive, mode) as tar:
            by_name = {m.name: m for m in tar.getmembers() if not m.isdir()}
            members = [_Member(name=name, is_regular=m.isreg()) for name, m in by_name.items()]
            picked = self._pick(members, executable_name, url)
            if isinstance(picked, Err):
                return picked

            src = tar.extractfile(by_name[picked.value.name])
            if src is None:
                return Err(
                    FetchError(
                        kind="artifact_layout",
                        url=url,
                        message=f"archive member {picked.value.name!r} has no data",
                    )
                )
            with src:
                self._write(src, dest)
        return Ok(dest)

    def _write(self, src: IO[bytes], dest: Path) -> None:
        with open(dest, "wb") as dst:
            shutil.copyfileobj(src, dst)
            dst.flush()
            os.fsync(dst.fileno())

    def _check_executable(
        self, dest: Path, executable_name: str, url: str
    ) -> Result[Path, FetchError]:
        if dest.stat().st_size == 0:
            return Err(
                FetchError(
                    kind="artifact_layout",
                    url=url,
                    message=f"archive member {executable_name!r} is empty",
                )
            )
        make_executable(dest)
        if os.name == "posix" and not os.access(dest, os.X_OK):
            return Err(
                FetchError(
                    kind="artifact_layout",
                    url=url,
                    message=f"{executable_name!r} is not executable after extraction",
                )
            )
        return Ok(dest)
