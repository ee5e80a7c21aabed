"""Tool registry."""

from .registry import ToolRegistry, default_registry

__all__ = ["ToolRegistry", "default_registry"]
