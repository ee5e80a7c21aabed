"""Retry policies for network operations.

Retries transient failures with exponential backoff and jitter, and
short-circuits on fatal client errors (4xx other than 429).

Example:
    >>> from webtools.runtime.retry import RetryPolicy, execute_with_retry
    >>> policy = RetryPolicy(max_attempts=3, base_delay_ms=1000)
    >>> html = await execute_with_retry(lambda: fetch(url), policy, name=url)
"""

from .backoff import Backoff, ExponentialBackoff
from .classify import is_fatal
from .policy import (
    DEFAULT_BASE_DELAY_MS,
    DEFAULT_MAX_ATTEMPTS,
    RetryPolicy,
    execute_with_retry,
    validate_policy,
    with_retry,
)

__all__ = [
    # Backoff strategies
    "Backoff",
    "ExponentialBackoff",
    # Classification
    "is_fatal",
    # Policy
    "RetryPolicy",
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_BASE_DELAY_MS",
    "validate_policy",
    # Execution
    "execute_with_retry",
    "with_retry",
]
