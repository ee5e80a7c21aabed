"""Configuration management for webtools."""

from .settings import (
    DEFAULT_USER_AGENT,
    BatchSettings,
    HttpSettings,
    LoggingSettings,
    RetrySettings,
    WebToolsSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "DEFAULT_USER_AGENT",
    "WebToolsSettings",
    "RetrySettings",
    "BatchSettings",
    "HttpSettings",
    "LoggingSettings",
    "get_settings",
    "clear_settings_cache",
]
