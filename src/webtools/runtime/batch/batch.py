"""Batch execution engine for network operations.

Provides bounded fan-out with:
- Configurable concurrency limit (semaphore, scoped to one batch)
- Per-item retry through the shared retry policy
- Partial failure handling: one item's failure never affects another
- Ordered aggregation with indices

Design: built on ``map_settled`` so every unit runs to completion and its
outcome is captured, then ``aggregate`` normalizes outcomes into results.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, Annotated, Callable, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from webtools.foundation.errors import ConfigurationError
from webtools.runtime.concurrency import map_settled
from webtools.runtime.observability import get_logger
from webtools.runtime.retry import RetryPolicy, execute_with_retry

from .aggregate import BatchResult, aggregate

if TYPE_CHECKING:
    from collections.abc import Awaitable, Sequence

U = TypeVar("U")
T = TypeVar("T")

logger = get_logger("webtools.batch")

DEFAULT_CONCURRENCY = 5


class BatchConfig(BaseModel):
    """Configuration for batch execution.

    Example:
        >>> config = BatchConfig(concurrency=10, timeout_per_item=20.0)
        >>> results = await batch_execute(urls, fetch_page, config, policy=RetryPolicy())
    """

    model_config = ConfigDict(
        frozen=True, extra="forbid", validate_default=True,
        json_schema_extra={"title": "Batch Configuration", "examples": [{"concurrency": 5}]},
    )

    concurrency: Annotated[int, Field(ge=1, le=1000)] = DEFAULT_CONCURRENCY
    timeout_per_item: Annotated[float | None, Field(gt=0, le=3600.0)] = None


def _check_concurrency(concurrency: object) -> int:
    if isinstance(concurrency, bool) or not isinstance(concurrency, int):
        raise ConfigurationError(f"concurrency must be an integer, got {concurrency!r}")
    if concurrency < 1:
        raise ConfigurationError(f"concurrency must be >= 1, got {concurrency}")
    return concurrency


async def run_batch(
    inputs: Sequence[U],
    concurrency: int,
    per_item: Callable[[U], Awaitable[T]],
    *,
    policy: RetryPolicy | None = None,
    timeout_per_item: float | None = None,
    error_of: Callable[[T], str | None] | None = None,
    name: str = "batch",
) -> BatchResult[U, T]:
    """Run ``per_item`` over every input with at most ``concurrency`` in flight.

    Args:
        inputs: Independent units of work (e.g. URLs)
        concurrency: Maximum units in flight (>= 1)
        per_item: Async operation for one unit
        policy: Retry policy applied to each unit individually
        timeout_per_item: Seconds allowed per unit, retries included
        error_of: Embedded-error detector passed to ``aggregate``, e.g.
            ``embedded_error``. None (default) keeps every returned value as Ok
        name: Batch label for logging

    Returns:
        BatchResult with exactly one item per input, in input order.

    Raises:
        ConfigurationError: If concurrency < 1. Raised before any work begins.
    """
    limit = _check_concurrency(concurrency)
    items = list(inputs)
    if not items:
        return BatchResult([], 0.0, limit)

    log = logger.bind(batch=name)
    log.debug("batch started", size=len(items), concurrency=limit)
    start = time.perf_counter()
    elapsed: list[float] = [0.0] * len(items)

    async def run_one(entry: tuple[int, U]) -> T:
        idx, item = entry
        t0 = time.perf_counter()

        def call() -> Awaitable[T]:
            return per_item(item)

        try:
            op = execute_with_retry(call, policy, name=str(item)) if policy else call()
            if timeout_per_item is None:
                return await op
            scope = asyncio.timeout(timeout_per_item)
            try:
                async with scope:
                    return await op
            except TimeoutError as e:
                if scope.expired():
                    raise TimeoutError(f"Timed out after {timeout_per_item}s") from e
                raise
        finally:
            elapsed[idx] = (time.perf_counter() - t0) * 1000

    outcomes = await map_settled(run_one, list(enumerate(items)), limit=limit)
    result = BatchResult(
        aggregate(items, outcomes, elapsed_ms=elapsed, error_of=error_of),
        (time.perf_counter() - start) * 1000,
        limit,
    )

    for item in result.failures:
        log.warning("item failed", index=item.index, **item.error.to_dict())  # type: ignore[union-attr]
    log.info("batch finished", size=len(result), failed=len(result.failures), total_ms=round(result.total_ms, 1))
    return result


async def batch_execute(
    inputs: Sequence[U],
    per_item: Callable[[U], Awaitable[T]],
    config: BatchConfig | None = None,
    *,
    policy: RetryPolicy | None = None,
    name: str = "batch",
) -> BatchResult[U, T]:
    """Declarative form of ``run_batch`` driven by a BatchConfig."""
    cfg = config or BatchConfig()
    return await run_batch(
        inputs, cfg.concurrency, per_item, policy=policy, timeout_per_item=cfg.timeout_per_item, name=name,
    )
