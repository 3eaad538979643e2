"""Tests for output/errors.py - engine error presentation and exit codes."""

from __future__ import annotations

import pytest

from opstool.core.errors import ErrorCode
from opstool.output.console import MockConsole
from opstool.output.errors import engine_error_exit_code, print_engine_error
from opstool.tools.errors import (
    ActivationError,
    EngineError,
    FetchError,
    ResolutionError,
    StoreError,
)


class TestPrintEngineError:
    def test_includes_stage_and_kind(self) -> None:
        console = MockConsole()
        error = ResolutionError(kind="unknown_tool", tool="kubeclt", message="unknown tool: kubeclt")
        print_engine_error(error, console)
        assert console.messages[0] == "error: unknown tool: kubeclt [resolve: unknown_tool]"

    def test_fetch_error_shows_url_and_attempts(self) -> None:
        console = MockConsole()
        error = FetchError(
            kind="transient",
            url="https://dl.example.com/x",
            message="download failed after 4 attempt(s)",
            hint="HTTP 503: busy",
            attempts=4,
        )
        print_engine_error(error, console)
        assert "url: https://dl.example.com/x (4 attempts)" in console.messages
        assert "hint: HTTP 503: busy" in console.messages

    def test_no_hint_line_without_hint(self) -> None:
        console = MockConsole()
        print_engine_error(StoreError(kind="io", tool="helm", message="disk full"), console)
        assert console.messages == ["error: disk full [install: io]"]


class TestExitCodes:
    @pytest.mark.parametrize(
        ("error", "code"),
        [
            (ResolutionError(kind="unknown_tool", tool="x", message=""), ErrorCode.USER_ERROR),
            (ResolutionError(kind="version_not_found", tool="x", message=""), ErrorCode.USER_ERROR),
            (
                ResolutionError(kind="unsupported_platform", tool="x", message=""),
                ErrorCode.ENV_ERROR,
            ),
            (
                ResolutionError(kind="latest_lookup_failed", tool="x", message=""),
                ErrorCode.NETWORK_ERROR,
            ),
            (FetchError(kind="transient", url="u", message=""), ErrorCode.NETWORK_ERROR),
            (FetchError(kind="not_found", url="u", message=""), ErrorCode.NETWORK_ERROR),
            (
                FetchError(kind="integrity_check_failed", url="u", message=""),
                ErrorCode.NETWORK_ERROR,
            ),
            (FetchError(kind="io", url="u", message=""), ErrorCode.IO_ERROR),
            (StoreError(kind="not_installed", tool="x", message=""), ErrorCode.USER_ERROR),
            (StoreError(kind="base_dir_missing", tool="x", message=""), ErrorCode.ENV_ERROR),
            (StoreError(kind="io", tool="x", message=""), ErrorCode.IO_ERROR),
            (ActivationError(kind="not_installed", tool="x", message=""), ErrorCode.USER_ERROR),
            (ActivationError(kind="not_a_link", tool="x", message=""), ErrorCode.USER_ERROR),
            (
                ActivationError(kind="permission_denied", tool="x", message=""),
                ErrorCode.ENV_ERROR,
            ),
            (ActivationError(kind="rename_failed", tool="x", message=""), ErrorCode.IO_ERROR),
        ],
    )
    def test_mapping(self, error: EngineError, code: ErrorCode) -> None:
        assert engine_error_exit_code(error) == int(code)
