"""Cooperative concurrency helpers for async fan-out.

Key Components:
    - Settled: captured outcome (value or exception) of one operation
    - gather_settled: wait for all, never fail fast
    - map_settled: bounded-concurrency, order-preserving map
"""

from __future__ import annotations

from .wait import (
    Settled,
    SettledStatus,
    fulfilled,
    gather_settled,
    map_settled,
    rejected,
    settle,
)

__all__ = [
    "Settled",
    "SettledStatus",
    "fulfilled",
    "rejected",
    "settle",
    "gather_settled",
    "map_settled",
]
