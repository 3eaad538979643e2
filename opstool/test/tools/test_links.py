"""Tests for tools/links.py - activation link swaps."""

from __future__ import annotations

import os
import shutil
import threading
from pathlib import Path

import pytest

from opstool.core.result import Err, Ok
from opstool.tools.links import LinkManager
from opstool.tools.store import VersionStore

pytestmark = pytest.mark.skipif(os.name != "posix", reason="symlinks need POSIX")


def _install(store: VersionStore, tool: str, version: str, content: bytes = b"bin") -> Path:
    staging = store.staging_dir(tool)
    assert isinstance(staging, Ok)
    artifact = staging.value / f".{tool}.{version}.part"
    artifact.write_bytes(content)
    result = store.install(tool, version, artifact)
    assert isinstance(result, Ok)
    return result.value.binary_path


@pytest.fixture
def store(tmp_path: Path) -> VersionStore:
    return VersionStore(tmp_path)


@pytest.fixture
def links(store: VersionStore) -> LinkManager:
    return LinkManager(store)


def _tmp_links(base: Path) -> list[str]:
    return [p.name for p in base.iterdir() if p.name.endswith(".tmp")]


class TestActivate:
    def test_creates_relative_link(self, store: VersionStore, links: LinkManager) -> None:
        binary = _install(store, "kubectl", "v1.29.0", b"kubectl 1.29")

        result = links.activate("kubectl", "v1.29.0")

        assert isinstance(result, Ok)
        link = store.base_dir / "kubectl"
        assert link.is_symlink()
        assert os.readlink(link) == os.path.join("kubectl-versions", "v1.29.0", "kubectl")
        assert link.resolve() == binary.resolve()
        assert link.read_bytes() == b"kubectl 1.29"
        assert result.value.target_version == "v1.29.0"

    def test_reactivation_is_noop(self, store: VersionStore, links: LinkManager) -> None:
        _install(store, "kubectl", "v1.29.0")
        assert isinstance(links.activate("kubectl", "v1.29.0"), Ok)
        link = store.base_dir / "kubectl"
        before = os.lstat(link).st_ino

        result = links.activate("kubectl", "v1.29.0")

        assert isinstance(result, Ok)
        assert os.lstat(link).st_ino == before

    def test_switches_version(self, store: VersionStore, links: LinkManager) -> None:
        _install(store, "kubectl", "v1.28.4", b"old")
        _install(store, "kubectl", "v1.29.0", b"new")
        link = store.base_dir / "kubectl"

        assert isinstance(links.activate("kubectl", "v1.28.4"), Ok)
        assert link.read_bytes() == b"old"
        assert isinstance(links.activate("kubectl", "v1.29.0"), Ok)
        assert link.read_bytes() == b"new"
        assert _tmp_links(store.base_dir) == []

    def test_not_installed(self, store: VersionStore, links: LinkManager) -> None:
        result = links.activate("kubectl", "v1.29.0")

        assert isinstance(result, Err)
        assert result.error.kind == "not_installed"
        assert result.error.hint == "run: opstool install kubectl v1.29.0"
        assert not (store.base_dir / "kubectl").exists()

    def test_failed_install_is_not_activatable(
        self, store: VersionStore, links: LinkManager
    ) -> None:
        # Binary present but no completion record.
        vdir = store.version_dir("kubectl", "v1.29.0")
        vdir.mkdir(parents=True)
        (vdir / "kubectl").write_bytes(b"half")

        result = links.activate("kubectl", "v1.29.0")

        assert isinstance(result, Err)
        assert result.error.kind == "not_installed"

    def test_regular_file_is_not_replaced(self, store: VersionStore, links: LinkManager) -> None:
        _install(store, "helm", "v3.14.0")
        existing = store.base_dir / "helm"
        existing.write_bytes(b"hand installed")

        result = links.activate("helm", "v3.14.0")

        assert isinstance(result, Err)
        assert result.error.kind == "not_a_link"
        assert existing.read_bytes() == b"hand installed"
        assert not existing.is_symlink()

    def test_directory_is_not_replaced(self, store: VersionStore, links: LinkManager) -> None:
        _install(store, "helm", "v3.14.0")
        (store.base_dir / "helm").mkdir()

        result = links.activate("helm", "v3.14.0")

        assert isinstance(result, Err)
        assert result.error.kind == "not_a_link"

    def test_missing_base_dir(self, tmp_path: Path) -> None:
        links = LinkManager(VersionStore(tmp_path / "missing"))

        result = links.activate("kubectl", "v1.29.0")

        assert isinstance(result, Err)
        assert result.error.kind == "base_dir_missing"

    def test_replace_failure_keeps_old_link(
        self, store: VersionStore, links: LinkManager, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _install(store, "kubectl", "v1.28.4", b"old")
        _install(store, "kubectl", "v1.29.0", b"new")
        assert isinstance(links.activate("kubectl", "v1.28.4"), Ok)

        def fail_replace(src: object, dst: object) -> None:
            raise OSError("device busy")

        monkeypatch.setattr("opstool.tools.links.os.replace", fail_replace)
        result = links.activate("kubectl", "v1.29.0")

        assert isinstance(result, Err)
        assert result.error.kind == "rename_failed"
        link = store.base_dir / "kubectl"
        assert link.read_bytes() == b"old"
        assert _tmp_links(store.base_dir) == []

    def test_interrupt_during_swap_removes_temp_link(
        self, store: VersionStore, links: LinkManager, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _install(store, "kubectl", "v1.29.0")

        def interrupt(src: object, dst: object) -> None:
            raise KeyboardInterrupt

        monkeypatch.setattr("opstool.tools.links.os.replace", interrupt)
        with pytest.raises(KeyboardInterrupt):
            links.activate("kubectl", "v1.29.0")

        assert _tmp_links(store.base_dir) == []
        assert not (store.base_dir / "kubectl").is_symlink()

    def test_link_removed_while_activating(
        self, store: VersionStore, links: LinkManager, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _install(store, "kubectl", "v1.28.4", b"old")
        _install(store, "kubectl", "v1.29.0", b"new")
        assert isinstance(links.activate("kubectl", "v1.28.4"), Ok)
        link = store.base_dir / "kubectl"

        real_readlink = os.readlink

        def vanish(path: str | os.PathLike[str]) -> str:
            if Path(path) == link:
                link.unlink()
                raise FileNotFoundError(path)
            return real_readlink(path)

        monkeypatch.setattr("opstool.tools.links.os.readlink", vanish)
        result = links.activate("kubectl", "v1.29.0")

        assert isinstance(result, Ok)
        assert link.read_bytes() == b"new"
        assert _tmp_links(store.base_dir) == []

    def test_readers_never_see_a_missing_link(
        self, store: VersionStore, links: LinkManager
    ) -> None:
        _install(store, "kubectl", "v1.28.4", b"old")
        _install(store, "kubectl", "v1.29.0", b"new")
        assert isinstance(links.activate("kubectl", "v1.28.4"), Ok)
        link = store.base_dir / "kubectl"
        stop = threading.Event()
        bad: list[object] = []

        def read() -> None:
            while not stop.is_set():
                try:
                    content = link.read_bytes()
                except OSError as e:
                    bad.append(e)
                    continue
                if content not in (b"old", b"new"):
                    bad.append(content)

        readers = [threading.Thread(target=read) for _ in range(4)]
        for reader in readers:
            reader.start()
        try:
            for i in range(500):
                version = "v1.29.0" if i % 2 == 0 else "v1.28.4"
                assert isinstance(links.activate("kubectl", version), Ok)
        finally:
            stop.set()
            for reader in readers:
                reader.join()

        assert bad == []
        assert link.read_bytes() == b"old"
        assert _tmp_links(store.base_dir) == []

    def test_tools_are_independent(self, store: VersionStore, links: LinkManager) -> None:
        _install(store, "kubectl", "v1.29.0")
        _install(store, "terraform", "1.5.0")

        assert isinstance(links.activate("kubectl", "v1.29.0"), Ok)
        assert isinstance(links.activate("terraform", "1.5.0"), Ok)

        current = links.current("kubectl")
        assert current is not None
        assert current.target_version == "v1.29.0"
        current = links.current("terraform")
        assert current is not None
        assert current.target_version == "1.5.0"


class TestCurrent:
    def test_no_link(self, links: LinkManager) -> None:
        assert links.current("kubectl") is None

    def test_active_version(self, store: VersionStore, links: LinkManager) -> None:
        _install(store, "kops", "v1.28.0")
        links.activate("kops", "v1.28.0")

        current = links.current("kops")

        assert current is not None
        assert current.target_version == "v1.28.0"
        assert current.link_path == store.base_dir / "kops"
        assert not current.is_dangling

    def test_dangling_link(self, store: VersionStore, links: LinkManager) -> None:
        _install(store, "kops", "v1.28.0")
        links.activate("kops", "v1.28.0")
        shutil.rmtree(store.version_dir("kops", "v1.28.0"))

        current = links.current("kops")

        assert current is not None
        assert current.is_dangling

    def test_foreign_link_is_ignored(self, store: VersionStore, links: LinkManager) -> None:
        os.symlink("/usr/bin/true", store.base_dir / "kubectl")

        assert links.current("kubectl") is None

    def test_regular_file_is_ignored(self, store: VersionStore, links: LinkManager) -> None:
        (store.base_dir / "kubectl").write_bytes(b"not a link")

        assert links.current("kubectl") is None
