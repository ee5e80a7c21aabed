"""Central registry for tool discovery and management.

The registry provides:
- Tool registration and lookup by name
- Category-based filtering
- The default set of web tools built from settings
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from ..core import BaseTool

if TYPE_CHECKING:
    from webtools.foundation.config import WebToolsSettings


class ToolRegistry:
    """Central registry for all available tools.

    Example:
        >>> registry = ToolRegistry()
        >>> registry.register(WebSearchTool())
        >>> registry["web_search"].metadata.category
        'web'
    """

    __slots__ = ("_tools",)

    def __init__(self) -> None:
        self._tools: dict[str, BaseTool[Any]] = {}

    def register(self, tool: BaseTool[Any]) -> None:
        """Register a tool instance with validation."""
        name = tool.metadata.name
        if name in self._tools:
            raise ValueError(f"Tool '{name}' already registered. Use unregister() first.")
        self._tools[name] = tool

    def unregister(self, name: str) -> bool:
        """Remove a tool by name. Returns True if found."""
        return self._tools.pop(name, None) is not None

    def get(self, name: str) -> BaseTool[Any] | None:
        """Get tool by name."""
        return self._tools.get(name)

    def enabled(self) -> list[BaseTool[Any]]:
        return [t for t in self._tools.values() if t.metadata.enabled]

    def by_category(self, category: str) -> list[BaseTool[Any]]:
        return [t for t in self._tools.values() if t.metadata.category == category]

    def names(self) -> list[str]:
        return list(self._tools)

    def __getitem__(self, name: str) -> BaseTool[Any]:
        """Get tool by name, raises KeyError if not found."""
        return self._tools[name]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[BaseTool[Any]]:
        return iter(self._tools.values())


def default_registry(settings: WebToolsSettings | None = None) -> ToolRegistry:
    """Registry holding web_search, web_page and download_files."""
    from webtools.tools.prebuilt.web import DownloadFilesTool, WebPageTool, WebSearchTool

    registry = ToolRegistry()
    for tool_cls in (WebSearchTool, WebPageTool, DownloadFilesTool):
        registry.register(tool_cls(settings))
    return registry
