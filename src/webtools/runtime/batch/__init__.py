"""Bounded-concurrency batching with per-item retry.

Usage:
    from webtools.runtime.batch import run_batch
    from webtools.runtime.retry import RetryPolicy

    results = await run_batch(urls, 5, fetch_page, policy=RetryPolicy())

    for item in results:
        if item.is_ok:
            print(f"[{item.index}] {item.value}")
        else:
            print(f"[{item.index}] failed: {item.error.error_message}")
"""

from .aggregate import BatchItem, BatchResult, ItemFailure, aggregate, embedded_error
from .batch import DEFAULT_CONCURRENCY, BatchConfig, batch_execute, run_batch

__all__ = [
    "BatchConfig",
    "BatchItem",
    "BatchResult",
    "ItemFailure",
    "DEFAULT_CONCURRENCY",
    "aggregate",
    "embedded_error",
    "run_batch",
    "batch_execute",
]
