"""webtools - resilient web tools for AI agents over MCP.

Three tools (web search, web page extraction, bulk download) served over
the Model Context Protocol. Every network call goes through one retry
wrapper (exponential backoff with jitter, no retries on fatal 4xx), and
multi-URL tools fan out through a bounded-concurrency batch runner that
reports per-item success or failure without aborting the batch.

Quick Start (direct):
    >>> from webtools import WebPageTool
    >>> text = await WebPageTool().acall(urls=["https://example.com"], maxLength=2000)

Retry and batch primitives:
    >>> from webtools import RetryPolicy, execute_with_retry, run_batch
    >>> policy = RetryPolicy(max_attempts=3, base_delay_ms=1000)
    >>> results = await run_batch(urls, 5, fetch, policy=policy)
    >>> [item.is_ok for item in results]

MCP server (stdio):
    >>> from webtools.ext.mcp import serve_mcp
    >>> serve_mcp()
"""

from __future__ import annotations

__version__ = "0.1.0"

# Core
from .foundation.core import BaseTool, BatchParams, RetryParams, ToolMetadata, ToolParams

# Configuration
from .foundation.config import WebToolsSettings, clear_settings_cache, get_settings

# Errors
from .foundation.errors import (
    ConfigurationError,
    Err,
    ErrorCode,
    HttpStatusError,
    Ok,
    Result,
    ToolError,
    ToolException,
    classify_exception,
)

# Registry
from .foundation.registry import ToolRegistry, default_registry

# Runtime
from .runtime.batch import BatchConfig, BatchItem, BatchResult, ItemFailure, aggregate, batch_execute, run_batch
from .runtime.concurrency import Settled, gather_settled, map_settled
from .runtime.observability import configure_logging, get_logger
from .runtime.retry import ExponentialBackoff, RetryPolicy, execute_with_retry, is_fatal, with_retry

# Tools
from .tools import DownloadFilesTool, WebPageTool, WebSearchTool

__all__ = [
    "__version__",
    # Core
    "BaseTool", "ToolMetadata", "ToolParams", "RetryParams", "BatchParams",
    # Configuration
    "WebToolsSettings", "get_settings", "clear_settings_cache",
    # Errors
    "ErrorCode", "ToolError", "ToolException", "classify_exception",
    "ConfigurationError", "HttpStatusError", "Result", "Ok", "Err",
    # Registry
    "ToolRegistry", "default_registry",
    # Retry
    "RetryPolicy", "ExponentialBackoff", "execute_with_retry", "with_retry", "is_fatal",
    # Concurrency & batch
    "Settled", "gather_settled", "map_settled",
    "BatchConfig", "BatchItem", "BatchResult", "ItemFailure", "aggregate", "run_batch", "batch_execute",
    # Logging
    "configure_logging", "get_logger",
    # Tools
    "WebSearchTool", "WebPageTool", "DownloadFilesTool",
]
