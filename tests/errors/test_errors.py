"""Tests for RUM error classes."""

import pytest

from rum.core.errors import (
    ErrorCategory,
    RUMAnswerError,
    RUMClientDestroyedError,
    RUMConfigurationError,
    RUMEmptyResponseError,
    RUMError,
    RUMParameterError,
    RUMTransportError,
)


class TestRUMError:
    """Test RUMError constructor and behavior."""

    def test_init_with_detail(self) -> None:
        """Test that category, message, and detail are stored and str includes both."""
        err = RUMError(
            category=ErrorCategory.TRANSPORT,
            message="Something failed",
            detail="socket closed",
        )
        assert err.category == ErrorCategory.TRANSPORT
        assert err.message == "Something failed"
        assert err.detail == "socket closed"
        assert str(err) == "Something failed: socket closed"

    def test_init_without_detail(self) -> None:
        """Test that detail defaults to empty string and str is just the message."""
        err = RUMError(category=ErrorCategory.PROTOCOL, message="Internal error")
        assert err.detail == ""
        assert str(err) == "Internal error"


class TestSubclasses:
    """Test each subclass carries the right category."""

    @pytest.mark.parametrize(
        ("error", "category"),
        [
            (RUMConfigurationError("bad"), ErrorCategory.CONFIGURATION),
            (RUMParameterError(), ErrorCategory.PARAMETER),
            (RUMTransportError("down"), ErrorCategory.TRANSPORT),
            (RUMClientDestroyedError(), ErrorCategory.TRANSPORT),
            (RUMEmptyResponseError(), ErrorCategory.TRANSPORT),
            (RUMAnswerError(4, "bad"), ErrorCategory.PROTOCOL),
        ],
    )
    def test_category(self, error: RUMError, category: ErrorCategory) -> None:
        assert error.category is category
        assert isinstance(error, RUMError)

    def test_configuration_error_is_value_error(self) -> None:
        with pytest.raises(ValueError, match="bad"):
            raise RUMConfigurationError("bad")

    def test_destroyed_is_transport_error(self) -> None:
        assert isinstance(RUMClientDestroyedError(), RUMTransportError)
        assert "destroyed" in str(RUMClientDestroyedError())

    def test_parameter_error_default_message(self) -> None:
        assert str(RUMParameterError()) == "param error"

    def test_answer_error_fields(self) -> None:
        err = RUMAnswerError(code=4, ex="bad")

        assert err.code == 4
        assert err.ex == "bad"
        assert str(err) == "code: 4, ex: bad"
