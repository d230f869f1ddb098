"""
Tests for the upstream error types and error-to-text conversion.
"""

import pytest

from hyperliquid_mcp.errors import (
    HTTP_STATUS_TO_ERROR,
    UpstreamConnectionError,
    UpstreamError,
    UpstreamHttpError,
    UpstreamParseError,
    UpstreamShapeError,
    format_tool_error,
)


# =============================================================================
# Test UpstreamError
# =============================================================================


class TestUpstreamError:
    """Tests for UpstreamError class."""

    def test_error_with_code_and_message(self):
        error = UpstreamError("BAD_REQUEST", "Invalid user")

        assert error.code == "BAD_REQUEST"
        assert error.message == "Invalid user"
        assert error.details == {}
        assert str(error) == "[BAD_REQUEST] Invalid user"

    def test_error_with_details(self):
        error = UpstreamError("MALFORMED_RESPONSE", "Missing field", {"field": "withdrawable"})

        assert error.details["field"] == "withdrawable"
        assert "withdrawable" in str(error)

    def test_error_is_exception(self):
        with pytest.raises(UpstreamError) as exc_info:
            raise UpstreamError("TEST_ERROR", "Test message")

        assert exc_info.value.code == "TEST_ERROR"


# =============================================================================
# Test Specific Error Kinds
# =============================================================================


class TestUpstreamHttpError:
    """Tests for UpstreamHttpError."""

    @pytest.mark.parametrize("status,code", sorted(HTTP_STATUS_TO_ERROR.items()))
    def test_known_status_codes(self, status, code):
        error = UpstreamHttpError(status)

        assert error.status_code == status
        assert error.code == code
        assert str(status) in str(error)

    def test_unknown_status_falls_back(self):
        error = UpstreamHttpError(418)

        assert error.code == "HTTP_ERROR"
        assert "418" in str(error)

    def test_is_upstream_error(self):
        assert isinstance(UpstreamHttpError(500), UpstreamError)


class TestOtherErrorKinds:
    """Tests for parse, shape and connection errors."""

    def test_parse_error(self):
        error = UpstreamParseError("Expecting value: line 1 column 1 (char 0)")

        assert error.code == "PARSE_ERROR"
        assert "Expecting value" in str(error)
        assert isinstance(error, UpstreamError)

    def test_shape_error(self):
        error = UpstreamShapeError("response is missing field 'withdrawable'")

        assert error.code == "MALFORMED_RESPONSE"
        assert isinstance(error, UpstreamError)

    def test_connection_error(self):
        error = UpstreamConnectionError("ConnectError: connection refused")

        assert error.code == "CONNECTION_ERROR"
        assert isinstance(error, UpstreamError)


# =============================================================================
# Test format_tool_error
# =============================================================================


class TestFormatToolError:
    """Tests for the error text returned by failed tool calls."""

    def test_names_tool_and_cause(self):
        text = format_tool_error("l2-book", UpstreamHttpError(429))

        assert text.startswith("Error calling l2-book:")
        assert "429" in text
        assert "RATE_LIMITED" in text

    def test_empty_message_uses_exception_class(self):
        text = format_tool_error("positions", KeyError())

        assert text == "Error calling positions: KeyError"
