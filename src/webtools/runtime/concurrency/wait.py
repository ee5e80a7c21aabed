"""Wait strategies that never fail the whole group.

Provides allSettled-style helpers: every awaitable runs to completion and
its outcome (value or exception) is captured in input order.

Example:
    >>> outcomes = await map_settled(fetch_page, urls, limit=5)
    >>> pages = [o.value for o in outcomes if o.is_fulfilled]
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Callable, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Awaitable, Sequence

T = TypeVar("T")
U = TypeVar("U")


class SettledStatus(StrEnum):
    """Status of a settled operation."""
    FULFILLED = "fulfilled"
    REJECTED = "rejected"


@dataclass(slots=True, frozen=True)
class Settled(Generic[T]):
    """Result of a settled operation (success or failure).

    Attributes:
        status: 'fulfilled' or 'rejected'
        value: Result value if fulfilled
        error: Exception if rejected
    """

    status: SettledStatus
    value: T | None = None
    error: BaseException | None = None

    @property
    def is_fulfilled(self) -> bool:
        return self.status == SettledStatus.FULFILLED

    @property
    def is_rejected(self) -> bool:
        return self.status == SettledStatus.REJECTED

    def unwrap(self) -> T:
        """Get value or raise stored error."""
        if self.is_rejected:
            raise self.error or RuntimeError("Rejected with no error")
        return self.value  # type: ignore[return-value]


def fulfilled(value: T) -> Settled[T]:
    return Settled(SettledStatus.FULFILLED, value=value)


def rejected(error: BaseException) -> Settled[T]:
    return Settled(SettledStatus.REJECTED, error=error)


async def settle(awaitable: Awaitable[T]) -> Settled[T]:
    """Await and capture the outcome. Cancellation still propagates."""
    try:
        return fulfilled(await awaitable)
    except Exception as e:
        return rejected(e)


async def gather_settled(*aws: Awaitable[T]) -> list[Settled[T]]:
    """Wait for all awaitables, capturing each outcome in input order.

    Like JavaScript's ``Promise.allSettled``: one failure never cancels the others.
    """
    return list(await asyncio.gather(*(settle(a) for a in aws)))


async def map_settled(
    func: Callable[[T], Awaitable[U]],
    items: Sequence[T],
    *,
    limit: int | None = None,
) -> list[Settled[U]]:
    """Apply an async function to items with a concurrency bound, settling each call.

    At most ``limit`` calls are in flight; as one finishes, the next queued
    item starts. Results are indexed by input position, not completion order.

    Args:
        func: Async function applied to each item
        items: Items to process
        limit: Maximum concurrent calls (None = unbounded)

    Returns:
        One Settled per item, in input order
    """
    if not items:
        return []
    if limit is not None and limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")

    semaphore = asyncio.Semaphore(limit or len(items))
    results: list[Settled[U] | None] = [None] * len(items)

    async def limited_call(idx: int, item: T) -> None:
        async with semaphore:
            try:
                results[idx] = fulfilled(await func(item))
            except Exception as e:
                results[idx] = rejected(e)

    await asyncio.gather(*(limited_call(i, item) for i, item in enumerate(items)))
    return results  # type: ignore[return-value]
