"""Runtime layer: retry, bounded batching, concurrency helpers, logging."""
