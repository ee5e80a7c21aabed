"""Retry policy and the retriable-operation wrapper.

Every network call made by the tools goes through ``execute_with_retry``:
it retries transient failures with exponential backoff and jitter, stops
immediately on fatal client errors, and re-raises the last error unchanged
once attempts are exhausted. It knows nothing about batching.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, TypeVar

from webtools.foundation.errors import ConfigurationError, status_code_of
from webtools.runtime.observability import get_logger

from .backoff import Backoff, ExponentialBackoff
from .classify import is_fatal

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from webtools.foundation.config import RetrySettings

T = TypeVar("T")

logger = get_logger("webtools.retry")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY_MS = 1000


def _require_int(name: str, value: object, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Per-call retry configuration.

    Attributes:
        max_attempts: Total tries including the first (>= 1)
        base_delay_ms: Base backoff delay in milliseconds (>= 0)
        max_delay_ms: Optional cap on a single delay
        backoff: Delay strategy; derived from the fields above when omitted
        on_retry: Callback ``(attempt, error, delay_seconds)`` fired before each sleep

    Raises:
        ConfigurationError: On out-of-range values, before any attempt is made.

    Example:
        >>> policy = RetryPolicy(max_attempts=5, base_delay_ms=250)
        >>> await execute_with_retry(lambda: client.get(url), policy)
    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    base_delay_ms: int = DEFAULT_BASE_DELAY_MS
    max_delay_ms: int | None = None
    backoff: Backoff | None = field(default=None, repr=False, compare=False)
    on_retry: Callable[[int, BaseException, float], None] | None = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        validate_policy(self)
        if self.backoff is None:
            object.__setattr__(self, "backoff", ExponentialBackoff(
                base=self.base_delay_ms / 1000,
                max_delay=self.max_delay_ms / 1000 if self.max_delay_ms is not None else None,
            ))

    @classmethod
    def from_settings(
        cls,
        settings: RetrySettings,
        *,
        max_attempts: int | None = None,
        base_delay_ms: int | None = None,
    ) -> RetryPolicy:
        """Build a policy from environment defaults, with per-call overrides."""
        return cls(
            max_attempts=settings.max_attempts if max_attempts is None else max_attempts,
            base_delay_ms=settings.base_delay_ms if base_delay_ms is None else base_delay_ms,
            max_delay_ms=settings.max_delay_ms,
        )

    def delay(self, attempt: int) -> float:
        """Seconds to wait after the given (1-based) failed attempt."""
        return self.backoff.delay(attempt)  # type: ignore[union-attr]

    def should_retry(self, error: BaseException, attempt: int) -> bool:
        """Whether another attempt follows the given failed one."""
        return attempt < self.max_attempts and not is_fatal(error)


def validate_policy(policy: RetryPolicy) -> None:
    """Raise ConfigurationError if the policy cannot run."""
    _require_int("max_attempts", policy.max_attempts, 1)
    _require_int("base_delay_ms", policy.base_delay_ms, 0)
    if policy.max_delay_ms is not None:
        _require_int("max_delay_ms", policy.max_delay_ms, 1)


async def execute_with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    name: str = "",
) -> T:
    """Run an async operation under a retry policy.

    Args:
        operation: Zero-argument async callable, invoked once per attempt
        policy: Retry configuration
        name: Operation label for logging (e.g. the URL)

    Returns:
        The first successful result.

    Raises:
        The fatal error immediately, or the last transient error once
        ``policy.max_attempts`` tries have failed. Errors are never wrapped.
    """
    log = logger.bind(operation=name) if name else logger
    attempt = 0
    while True:
        attempt += 1
        try:
            return await operation()
        except Exception as e:
            if is_fatal(e):
                log.info("fatal error, not retrying", attempt=attempt, status_code=status_code_of(e), error=str(e))
                raise
            if attempt >= policy.max_attempts:
                if policy.max_attempts > 1:
                    log.warning("retries exhausted", attempts=attempt, error=str(e))
                raise

            delay = policy.delay(attempt)
            log.warning(
                "attempt failed, retrying",
                attempt=attempt,
                max_attempts=policy.max_attempts,
                delay_s=round(delay, 3),
                error=str(e) or type(e).__name__,
            )
            if policy.on_retry:
                policy.on_retry(attempt, e, delay)
            await asyncio.sleep(delay)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    base_delay_ms: int = DEFAULT_BASE_DELAY_MS,
) -> T:
    """Convenience form of ``execute_with_retry`` taking the two policy values directly.

    Example:
        >>> page = await with_retry(lambda: fetch(url), max_attempts=3, base_delay_ms=1000)
    """
    return await execute_with_retry(operation, RetryPolicy(max_attempts=max_attempts, base_delay_ms=base_delay_ms))
