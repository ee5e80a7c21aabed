"""MCP server for the web tools.

``ToolServer`` holds the transport-independent logic: listing tools with
their JSON schemas and invoking a tool by name. ``MCPServer`` exposes it
over stdio using the MCP SDK's low-level server.

Example:
    >>> from webtools.ext.mcp import serve_mcp
    >>> serve_mcp()  # blocks, speaking MCP on stdin/stdout
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from webtools import __version__
from webtools.foundation.config import get_settings
from webtools.foundation.errors import ErrorCode, ToolError, ToolException
from webtools.foundation.registry import default_registry
from webtools.runtime.observability import get_logger

if TYPE_CHECKING:
    from webtools.foundation.config import WebToolsSettings
    from webtools.foundation.registry import ToolRegistry

logger = get_logger("webtools.server")


class ToolCallError(Exception):
    """Carries rendered error text back to the MCP client as an error result."""


class ToolServer:
    """Transport-independent tool listing and invocation."""

    __slots__ = ("_name", "_registry")

    def __init__(self, name: str, registry: ToolRegistry) -> None:
        self._name = name
        self._registry = registry

    @property
    def name(self) -> str:
        return self._name

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    def list_tools(self) -> list[dict[str, Any]]:
        """All enabled tools with their wire-format input schemas."""
        return [
            {
                "name": tool.metadata.name,
                "description": tool.metadata.description,
                "category": tool.metadata.category,
                "inputSchema": tool.input_schema(),
            }
            for tool in self._registry.enabled()
        ]

    async def invoke(self, tool_name: str, arguments: dict[str, Any] | None) -> tuple[str, bool]:
        """Invoke a tool by name.

        Returns:
            ``(text, is_error)``. Unknown tools, invalid arguments and
            whole-call failures come back as rendered ToolError text.
        """
        tool = self._registry.get(tool_name)
        if tool is None or not tool.metadata.enabled:
            return ToolError.create(
                tool_name, f"Tool '{tool_name}' not found", ErrorCode.NOT_FOUND, recoverable=False,
            ).render(), True

        log = logger.bind_tool(tool_name, tool.metadata.category)
        log.info("tool invoked")
        try:
            return await tool.arun(tool.validate(arguments)), False
        except ToolException as e:
            log.warning("tool failed", code=str(e.error.code), error=e.error.message)
            return e.error.render(), True
        except Exception as e:
            log.exception("tool crashed", error=str(e))
            return ToolError.from_exception(tool_name, e, "Execution failed").render(), True


class MCPServer(ToolServer):
    """MCP protocol server over stdio.

    Example:
        >>> server = MCPServer("mcp-web-tools", default_registry())
        >>> server.run()
    """

    __slots__ = ("_server",)

    def __init__(self, name: str, registry: ToolRegistry) -> None:
        super().__init__(name, registry)
        self._server = self._create_server()

    def _create_server(self) -> Server:
        server: Server = Server(self._name, version=__version__)

        @server.list_tools()
        async def _list_tools() -> list[types.Tool]:
            return [
                types.Tool(name=t["name"], description=t["description"], inputSchema=t["inputSchema"])
                for t in self.list_tools()
            ]

        @server.call_tool(validate_input=False)
        async def _call_tool(name: str, arguments: dict[str, Any]) -> list[types.TextContent]:
            text, is_error = await self.invoke(name, arguments)
            if is_error:
                raise ToolCallError(text)
            return [types.TextContent(type="text", text=text)]

        return server

    @property
    def server(self) -> Server:
        """Access the underlying MCP SDK server."""
        return self._server

    async def serve_stdio(self) -> None:
        """Speak MCP over stdin/stdout until the client disconnects."""
        logger.info("server started", server=self._name, tools=self._registry.names())
        async with stdio_server() as (read_stream, write_stream):
            await self._server.run(read_stream, write_stream, self._server.create_initialization_options())
        logger.info("server stopped", server=self._name)

    def run(self) -> None:
        """Start the stdio server (blocking)."""
        asyncio.run(self.serve_stdio())


def create_mcp_server(settings: WebToolsSettings | None = None, registry: ToolRegistry | None = None) -> MCPServer:
    """Create the MCP server without starting it."""
    settings = settings or get_settings()
    return MCPServer(settings.server_name, registry or default_registry(settings))


def serve_mcp(settings: WebToolsSettings | None = None) -> None:
    """Expose the web tools over MCP stdio (blocking)."""
    create_mcp_server(settings).run()
