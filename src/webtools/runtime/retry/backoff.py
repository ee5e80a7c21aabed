"""Backoff strategies for retry policies.

Provides pluggable delay calculation for retry attempts:
- ExponentialBackoff: Exponential growth with jitter (default)
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Callable, Protocol, runtime_checkable


@runtime_checkable
class Backoff(Protocol):
    """Protocol for backoff delay calculation.

    Implementations compute the delay before the next retry attempt.
    Attempt numbers are 1-indexed: ``attempt`` is the attempt that just failed.
    """

    def delay(self, attempt: int) -> float:
        """Calculate delay in seconds after the given failed attempt."""
        ...


@dataclass(frozen=True, slots=True)
class ExponentialBackoff:
    """Exponential backoff with jitter.

    Delay = base * (multiplier ^ attempt) * (0.5 + rng()), then capped at max_delay.

    Jitter spreads concurrent retriers so they do not hit a recovering
    server in lockstep. With the defaults, the delay after attempt ``k``
    lies in ``[base * 2^k * 0.5, base * 2^k * 1.5)``.

    Attributes:
        base: Base delay in seconds (default: 1.0)
        multiplier: Exponential growth factor (default: 2.0)
        max_delay: Cap on a single delay in seconds (default: no cap)
        jitter: Apply the 0.5-1.5x randomization (default: True)
        rng: Source of uniform floats in [0, 1)
    """

    base: float = 1.0
    multiplier: float = 2.0
    max_delay: float | None = None
    jitter: bool = True
    rng: Callable[[], float] = field(default=random.random, repr=False, compare=False)

    def delay(self, attempt: int) -> float:
        d = self.base * (self.multiplier ** attempt)
        if self.jitter:
            d *= 0.5 + self.rng()
        return min(d, self.max_delay) if self.max_delay is not None else d
