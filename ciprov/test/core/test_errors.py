"""Tests for ciprov.core.errors module."""

from ciprov.core.errors import ErrorCode


class TestErrorCode:
    def test_values_are_stable(self) -> None:
        assert ErrorCode.OK == 0
        assert ErrorCode.USER_ERROR == 1
        assert ErrorCode.ENV_ERROR == 2
        assert ErrorCode.NETWORK_ERROR == 4
        assert ErrorCode.IO_ERROR == 5
