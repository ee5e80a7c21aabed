"""Tests for the registry, ToolServer and MCP wiring."""

from __future__ import annotations

from collections import Counter

import httpx
import orjson
import pytest

from webtools.ext.mcp import MCPServer, ToolServer, create_mcp_server
from webtools.foundation.config import WebToolsSettings
from webtools.foundation.registry import ToolRegistry, default_registry
from webtools.tools.prebuilt.web import WebPageTool


def page_server() -> ToolServer:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "gone.com":
            return httpx.Response(404)
        return httpx.Response(200, html="<html><head><title>Hi</title></head><body><main>hello</main></body></html>")

    registry = ToolRegistry()
    registry.register(WebPageTool(transport=httpx.MockTransport(handler)))
    return ToolServer("test", registry)


def test_default_registry_has_three_tools() -> None:
    registry = default_registry(WebToolsSettings())
    assert registry.names() == ["web_search", "web_page", "download_files"]
    assert [t.metadata.name for t in registry.by_category("web")] == ["web_search", "web_page"]


def test_duplicate_registration_rejected() -> None:
    registry = ToolRegistry()
    registry.register(WebPageTool())
    with pytest.raises(ValueError, match="already registered"):
        registry.register(WebPageTool())
    assert registry.unregister("web_page")
    assert not registry.unregister("web_page")


def test_list_tools_exposes_camel_case_schemas() -> None:
    server = ToolServer("test", default_registry())
    tools = {t["name"]: t for t in server.list_tools()}
    assert set(tools) == {"web_search", "web_page", "download_files"}
    page_props = tools["web_page"]["inputSchema"]["properties"]
    assert {"urls", "includeImages", "includeLinks", "maxLength", "maxRetries", "retryDelay", "concurrency"} <= set(page_props)
    assert tools["web_search"]["inputSchema"]["required"] == ["query"]


@pytest.mark.asyncio
async def test_invoke_success_returns_json_text() -> None:
    text, is_error = await page_server().invoke("web_page", {"urls": ["https://ok.com/"]})
    assert not is_error
    assert orjson.loads(text)[0]["content"] == "hello"


@pytest.mark.asyncio
async def test_invoke_item_failure_is_not_a_call_error() -> None:
    text, is_error = await page_server().invoke("web_page", {"urls": ["https://ok.com/", "https://gone.com/"]})
    assert not is_error
    pages = orjson.loads(text)
    assert [p["title"] for p in pages] == ["Hi", "Error"]


@pytest.mark.asyncio
async def test_invoke_unknown_tool() -> None:
    text, is_error = await page_server().invoke("nope", {})
    assert is_error
    assert "not found" in text


@pytest.mark.asyncio
async def test_invoke_invalid_arguments() -> None:
    calls: Counter[str] = Counter()

    def handler(request: httpx.Request) -> httpx.Response:
        calls[str(request.url)] += 1
        return httpx.Response(200)

    registry = ToolRegistry()
    registry.register(WebPageTool(transport=httpx.MockTransport(handler)))
    text, is_error = await ToolServer("test", registry).invoke("web_page", {"urls": ["https://a.com/"], "maxRetries": 0})
    assert is_error
    assert "Invalid input" in text
    assert not calls


def test_create_mcp_server_uses_settings_name() -> None:
    server = create_mcp_server(WebToolsSettings(server_name="custom-tools"))
    assert isinstance(server, MCPServer)
    assert server.name == "custom-tools"
    assert len(server.registry) == 3
