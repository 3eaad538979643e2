"""Tests for opstool.output.console module."""

from __future__ import annotations

import pytest

from opstool.output.console import (
    ConsoleProtocol,
    MockConsole,
    OutputRecord,
    RichConsole,
    Style,
)


class TestStyle:
    def test_str_conversion(self) -> None:
        assert str(Style.SUCCESS) == "success"
        assert str(Style.DIM) == "dim"


class TestMockConsole:
    """Test MockConsole captures output correctly."""

    def test_print_captures_message(self) -> None:
        console = MockConsole()
        console.print("hello")
        assert console.outputs == [OutputRecord("hello", Style.DEFAULT)]

    def test_shortcuts_prefix_and_style(self) -> None:
        console = MockConsole()
        console.success("installed kubectl v1.29.0")
        console.error("download failed")
        console.warning("no checksum")
        console.info("resolving")

        assert console.messages == [
            "OK installed kubectl v1.29.0",
            "error: download failed",
            "warning: no checksum",
            "info: resolving",
        ]
        assert console.has_success()
        assert console.has_error()
        assert console.has_warning()

    def test_header_and_newline(self) -> None:
        console = MockConsole()
        console.header("kubectl")
        console.newline()
        assert console.count(Style.HEADER) == 1
        assert console.text == "kubectl\n"

    def test_find(self) -> None:
        console = MockConsole()
        console.print("kubectl v1.28.0")
        console.print("helm v3.14.0")
        assert [r.message for r in console.find("kubectl")] == ["kubectl v1.28.0"]

    def test_progress_records_updates(self) -> None:
        """progress() yields a (done, total) callback."""
        console = MockConsole()
        with console.progress("kubectl") as update:
            update(512, 1024)
            update(1024, 1024)
        assert console.progress_updates == [("kubectl", 512, 1024), ("kubectl", 1024, 1024)]

    def test_clear(self) -> None:
        console = MockConsole()
        console.print("x")
        with console.progress("y") as update:
            update(1, 1)
        console.clear()
        assert console.outputs == []
        assert console.progress_updates == []


class TestRichConsole:
    def test_prints_markup_like_text_verbatim(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Brackets in messages are not treated as rich markup."""
        console = RichConsole()
        console.error("failed [fetch: not_found]")
        out = capsys.readouterr().out
        assert "[fetch: not_found]" in out

    def test_progress_accepts_updates(self) -> None:
        console = RichConsole()
        with console.progress("kubectl") as update:
            update(10, 0)
            update(20, 20)


class TestConsoleProtocol:
    def test_implementations_satisfy_protocol(self) -> None:
        def use(console: ConsoleProtocol) -> None:
            console.print("x", Style.BOLD)
            console.newline()

        use(MockConsole())
        use(RichConsole())
