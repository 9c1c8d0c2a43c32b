"""Tests for dk.core.errors module."""

from __future__ import annotations

from dk.core.errors import ErrorCode


class TestErrorCode:
    def test_values_are_stable(self) -> None:
        assert int(ErrorCode.OK) == 0
        assert int(ErrorCode.FAILURE) == 1

    def test_from_success(self) -> None:
        assert ErrorCode.from_success(True) is ErrorCode.OK
        assert ErrorCode.from_success(False) is ErrorCode.FAILURE

    def test_is_success(self) -> None:
        assert ErrorCode.OK.is_success
        assert not ErrorCode.FAILURE.is_success

    def test_str(self) -> None:
        assert str(ErrorCode.FAILURE) == "failure"
