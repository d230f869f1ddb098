"""
Structured logging configuration with correlation IDs.

Provides:
- JSON log formatting using python-json-logger
- A correlation ID per tool call, kept in a ContextVar
- Log level and format configuration from the environment

Logs are written to stderr: stdout carries the stdio MCP transport.
"""

import logging
import os
import sys
import uuid
from contextvars import ContextVar
from typing import Optional

from pythonjsonlogger import jsonlogger

# =============================================================================
# Context Variables for Correlation ID
# =============================================================================

_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def new_correlation_id() -> str:
    """Generate a fresh correlation ID."""
    return uuid.uuid4().hex


def get_correlation_id() -> Optional[str]:
    """Get the correlation ID for the current context."""
    return _correlation_id.get()


class correlation_context:
    """
    Context manager for setting correlation ID.

    Restores the previous value on exit, so nested and concurrent
    contexts do not leak into each other.

    Usage:
        with correlation_context() as cid:
            logger.info("This log will have correlation_id=cid")
    """

    def __init__(self, correlation_id: Optional[str] = None):
        self.correlation_id = correlation_id or new_correlation_id()
        self.token = None

    def __enter__(self) -> str:
        self.token = _correlation_id.set(self.correlation_id)
        return self.correlation_id

    def __exit__(self, exc_type, exc_val, exc_tb):
        _correlation_id.reset(self.token)
        return False


# =============================================================================
# Formatters
# =============================================================================


class CorrelationIdJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter that automatically includes correlation_id from context.

    Adds timestamp, level, logger, correlation_id (if set), module,
    function and line to every record.
    """

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        correlation_id = get_correlation_id()
        if correlation_id:
            log_record["correlation_id"] = correlation_id

        if "timestamp" not in log_record:
            log_record["timestamp"] = self.formatTime(record, self.datefmt)
        if "level" not in log_record:
            log_record["level"] = record.levelname
        if "logger" not in log_record:
            log_record["logger"] = record.name

        log_record["module"] = record.module
        log_record["function"] = record.funcName
        log_record["line"] = record.lineno


class CorrelationIdTextFormatter(logging.Formatter):
    """
    Text formatter that includes correlation_id from context.

    Format: timestamp [level] [correlation_id] logger - message
    """

    def format(self, record):
        correlation_id = get_correlation_id()
        record.correlation_id = correlation_id
        record.correlation_prefix = f"[{correlation_id[:8]}]" if correlation_id else ""
        return super().format(record)


# =============================================================================
# Logging Configuration
# =============================================================================


def get_log_level() -> int:
    """
    Get log level from the LOG_LEVEL environment variable.

    Supported values: DEBUG, INFO, WARNING, ERROR, CRITICAL
    Default: INFO
    """
    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    return level if isinstance(level, int) else logging.INFO


def get_log_format() -> str:
    """
    Get log format from the LOG_FORMAT environment variable.

    Supported values: json, text
    Default: json
    """
    return os.environ.get("LOG_FORMAT", "json").lower()


def configure_logging(
    level: Optional[int] = None,
    format_type: Optional[str] = None,
    force_reconfigure: bool = False,
) -> None:
    """
    Configure structured logging for the application.

    Args:
        level: Log level (defaults to LOG_LEVEL env var or INFO)
        format_type: "json" or "text" (defaults to LOG_FORMAT env var or "json")
        force_reconfigure: If True, replace handlers installed by someone else
    """
    root_logger = logging.getLogger()
    if root_logger.handlers and not force_reconfigure:
        return

    if level is None:
        level = get_log_level()
    if format_type is None:
        format_type = get_log_format()

    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    if format_type == "json":
        formatter = CorrelationIdJsonFormatter(datefmt="%Y-%m-%dT%H:%M:%S")
    else:
        formatter = CorrelationIdTextFormatter(
            fmt="%(asctime)s [%(levelname)s] %(correlation_prefix)s %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # Suppress noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        f"Logging configured: level={logging.getLevelName(level)}, format={format_type}"
    )


def log_with_context(logger: logging.Logger, level: int, message: str, **kwargs):
    """
    Log a message with additional structured fields.

    Example:
        log_with_context(logger, logging.INFO, "Tool call", tool="l2-book")
    """
    logger.log(level, message, extra=kwargs)
