"""Tests for opstool.core.errors module."""

import pytest

from opstool.core.errors import ErrorCode


class TestErrorCodeValues:
    """Exit codes are part of the CLI contract."""

    def test_values(self) -> None:
        assert ErrorCode.OK == 0
        assert ErrorCode.USER_ERROR == 1
        assert ErrorCode.ENV_ERROR == 2
        assert ErrorCode.NETWORK_ERROR == 4
        assert ErrorCode.IO_ERROR == 5

    def test_codes_are_unique(self) -> None:
        values = [int(code) for code in ErrorCode]
        assert len(values) == len(set(values))

    def test_can_use_as_int(self) -> None:
        assert int(ErrorCode.NETWORK_ERROR) + 1 == 5


class TestErrorCodeProperties:
    def test_is_success(self) -> None:
        assert ErrorCode.OK.is_success
        assert not ErrorCode.IO_ERROR.is_success

    def test_is_error(self) -> None:
        assert not ErrorCode.OK.is_error
        assert all(code.is_error for code in ErrorCode if code != ErrorCode.OK)

    def test_str(self) -> None:
        assert str(ErrorCode.USER_ERROR) == "user error"
        assert str(ErrorCode.NETWORK_ERROR) == "network error"

    def test_invalid_lookup_raises(self) -> None:
        with pytest.raises(ValueError):
            ErrorCode(3)
