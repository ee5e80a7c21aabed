"""MCP protocol integration: stdio server and client."""

from .client import WebToolsClient, default_server_parameters
from .server import MCPServer, ToolCallError, ToolServer, create_mcp_server, serve_mcp

__all__ = [
    "ToolServer",
    "MCPServer",
    "ToolCallError",
    "create_mcp_server",
    "serve_mcp",
    "WebToolsClient",
    "default_server_parameters",
]
