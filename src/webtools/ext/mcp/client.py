"""MCP client for the web tools server.

Spawns ``webtools serve`` as a subprocess and talks MCP to it over stdio.

Example:
    >>> async with WebToolsClient() as client:
    ...     tools = await client.list_tools()
    ...     result = await client.search_web("python asyncio", maxResults=5)
"""

from __future__ import annotations

import sys
from contextlib import AsyncExitStack
from typing import Any

import mcp.types as types
from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import stdio_client

from webtools.runtime.observability import get_logger

logger = get_logger("webtools.client")


def default_server_parameters() -> StdioServerParameters:
    """Run the server with the current interpreter: ``python -m webtools serve``."""
    return StdioServerParameters(command=sys.executable, args=["-m", "webtools", "serve"])


class WebToolsClient:
    """Async context manager wrapping an MCP ClientSession to the web tools server."""

    __slots__ = ("_params", "_stack", "_session")

    def __init__(self, server: StdioServerParameters | None = None) -> None:
        self._params = server or default_server_parameters()
        self._stack: AsyncExitStack | None = None
        self._session: ClientSession | None = None

    async def __aenter__(self) -> WebToolsClient:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.disconnect()

    async def connect(self) -> None:
        if self._session is not None:
            return
        stack = AsyncExitStack()
        try:
            read, write = await stack.enter_async_context(stdio_client(self._params))
            session = await stack.enter_async_context(ClientSession(read, write))
            await session.initialize()
        except BaseException:
            await stack.aclose()
            raise
        self._stack, self._session = stack, session
        logger.debug("connected", command=self._params.command)

    async def disconnect(self) -> None:
        if self._stack is not None:
            await self._stack.aclose()
        self._stack = self._session = None

    @property
    def session(self) -> ClientSession:
        if self._session is None:
            raise RuntimeError("Client is not connected; use 'async with WebToolsClient()' or call connect()")
        return self._session

    async def list_tools(self) -> list[types.Tool]:
        return (await self.session.list_tools()).tools

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> types.CallToolResult:
        return await self.session.call_tool(name, arguments)

    async def search_web(self, query: str, **options: Any) -> types.CallToolResult:
        """Call ``web_search``. Options use wire names (maxResults, region, time, maxRetries, retryDelay)."""
        return await self.call_tool("web_search", {"query": query, **options})

    async def fetch_web_pages(self, urls: list[str], **options: Any) -> types.CallToolResult:
        """Call ``web_page`` for one or more URLs."""
        return await self.call_tool("web_page", {"urls": urls, **options})

    async def download_files(self, urls: list[str], directory: str, **options: Any) -> types.CallToolResult:
        return await self.call_tool("download_files", {"urls": urls, "directory": directory, **options})

    async def ping(self) -> bool:
        """Whether the server answers a tool listing."""
        try:
            await self.session.list_tools()
        except Exception as e:
            logger.debug("ping failed", error=str(e))
            return False
        return True
