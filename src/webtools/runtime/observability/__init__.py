"""Structured logging for webtools."""

from .logging import (
    BoundLogger,
    CaptureRenderer,
    ConsoleRenderer,
    JsonRenderer,
    LogEntry,
    LogRenderer,
    NoOpRenderer,
    configure_logging,
    get_logger,
    log_context,
)

__all__ = [
    "BoundLogger",
    "LogEntry",
    "LogRenderer",
    "ConsoleRenderer",
    "JsonRenderer",
    "NoOpRenderer",
    "CaptureRenderer",
    "configure_logging",
    "get_logger",
    "log_context",
]
