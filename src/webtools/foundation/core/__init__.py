"""Core tool abstractions."""

from .base import (
    BaseTool,
    BatchParams,
    Payload,
    RetryParams,
    ToolMetadata,
    ToolParams,
    to_json,
)

__all__ = [
    "BaseTool",
    "ToolMetadata",
    "ToolParams",
    "RetryParams",
    "BatchParams",
    "Payload",
    "to_json",
]
