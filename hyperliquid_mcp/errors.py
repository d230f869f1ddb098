"""
MCP Error Handling.

Error types raised while talking to the Hyperliquid info API, and the
single conversion from an exception to the text a tool returns.
"""

from typing import Any, Dict, Optional


class InvalidConfigError(Exception):
    """Raised when configuration is invalid."""

    pass


class UpstreamError(Exception):
    """
    Base error for failed upstream calls.

    Carries a short machine-readable code alongside the message so
    callers (and logs) can tell failure kinds apart.
    """

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"[{self.code}] {self.message} - {self.details}"
        return f"[{self.code}] {self.message}"


# Error codes by HTTP status; anything else falls back to HTTP_ERROR
HTTP_STATUS_TO_ERROR = {
    400: "BAD_REQUEST",
    404: "NOT_FOUND",
    422: "UNPROCESSABLE",
    429: "RATE_LIMITED",
    500: "INTERNAL_ERROR",
    502: "BAD_GATEWAY",
    503: "UNAVAILABLE",
    504: "TIMEOUT",
}


class UpstreamHttpError(UpstreamError):
    """Upstream answered with a non-2xx status. The body is not read."""

    def __init__(self, status_code: int):
        self.status_code = status_code
        code = HTTP_STATUS_TO_ERROR.get(status_code, "HTTP_ERROR")
        super().__init__(code, f"HTTP error! status: {status_code}")


class UpstreamParseError(UpstreamError):
    """Upstream body could not be parsed as JSON."""

    def __init__(self, message: str):
        super().__init__("PARSE_ERROR", f"Invalid JSON in upstream response: {message}")


class UpstreamShapeError(UpstreamError):
    """A parsed upstream response lacks a field a tool needs to reshape it."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("MALFORMED_RESPONSE", message, details)


class UpstreamConnectionError(UpstreamError):
    """The request never produced a response (connect failure, timeout, ...)."""

    def __init__(self, message: str):
        super().__init__("CONNECTION_ERROR", message)


def format_tool_error(tool_name: str, exc: BaseException) -> str:
    """
    Render an exception as the text result of a failed tool call.

    Args:
        tool_name: Name of the tool that failed
        exc: The exception caught at the tool boundary

    Returns:
        Human-readable error text naming the tool and the cause
    """
    message = str(exc) or exc.__class__.__name__
    return f"Error calling {tool_name}: {message}"
