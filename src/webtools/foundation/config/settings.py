"""Environment-based configuration using pydantic-settings.

Provides type-safe, validated defaults from environment variables.
Settings only supply defaults: tools receive a settings object explicitly
and per-call parameters override it.

Example:
    >>> from webtools.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.retry.max_attempts
    3

    # Or with environment variables:
    # WEBTOOLS_RETRY_MAX_ATTEMPTS=5
    # WEBTOOLS_BATCH_CONCURRENCY=10
    # WEBTOOLS_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import ByteSize, Field, NonNegativeInt, PositiveFloat, PositiveInt, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)


class RetrySettings(BaseSettings):
    """Default retry configuration."""

    model_config = SettingsConfigDict(env_prefix="WEBTOOLS_RETRY_", extra="ignore")

    max_attempts: Annotated[int, Field(ge=1, le=10)] = 3
    base_delay_ms: NonNegativeInt = Field(default=1000, description="Base backoff delay in milliseconds")
    max_delay_ms: PositiveInt | None = Field(default=None, description="Cap on a single backoff delay")


class BatchSettings(BaseSettings):
    """Default fan-out configuration for batch tools."""

    model_config = SettingsConfigDict(env_prefix="WEBTOOLS_BATCH_", extra="ignore")

    concurrency: Annotated[int, Field(ge=1, le=100)] = 5


class HttpSettings(BaseSettings):
    """HTTP client default configuration."""

    model_config = SettingsConfigDict(env_prefix="WEBTOOLS_HTTP_", extra="ignore")

    timeout: PositiveFloat = Field(default=30.0, description="Default request timeout in seconds")
    max_response_size: ByteSize = Field(default=ByteSize(10 * 1024 * 1024), description="Max page size")
    follow_redirects: bool = True
    user_agent: str = DEFAULT_USER_AGENT
    accept_language: str = "en-US,en;q=0.9"


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="WEBTOOLS_LOG_", extra="ignore")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json", "none"] = "console"

    @field_validator("level", mode="before")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class WebToolsSettings(BaseSettings):
    """Root settings for the web tools server.

    Loads configuration from environment variables with WEBTOOLS_ prefix.
    Supports nested configuration and .env files.

    Example environment variables:
        WEBTOOLS_RETRY_MAX_ATTEMPTS=5
        WEBTOOLS_RETRY_BASE_DELAY_MS=500
        WEBTOOLS_BATCH_CONCURRENCY=8
        WEBTOOLS_HTTP_TIMEOUT=60
        WEBTOOLS_LOG_FORMAT=json
    """

    model_config = SettingsConfigDict(
        env_prefix="WEBTOOLS_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    server_name: str = "mcp-web-tools"

    retry: RetrySettings = Field(default_factory=RetrySettings)
    batch: BatchSettings = Field(default_factory=BatchSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> WebToolsSettings:
    """Get the process settings instance (cached)."""
    return WebToolsSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    After calling this, the next get_settings() call will
    reload configuration from environment.
    """
    get_settings.cache_clear()
