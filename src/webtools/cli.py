"""CLI entrypoint for webtools: typer app with serve, search, page and download commands."""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import typer

from webtools.foundation.config import get_settings
from webtools.foundation.core import BaseTool
from webtools.foundation.errors import ToolException
from webtools.runtime.observability import configure_logging
from webtools.tools import DownloadFilesTool, WebPageTool, WebSearchTool

app = typer.Typer(add_completion=False, help="Resilient web tools for AI agents, served over MCP.")

_LOG_FORMATS = ("console", "json", "none")


def _setup_logging(log_level: Optional[str], log_format: Optional[str]) -> None:
    """Configure logging from settings, with CLI flags taking precedence."""
    settings = get_settings().logging
    fmt = log_format or settings.format
    if fmt not in _LOG_FORMATS:
        typer.echo(f"Invalid log format: {fmt!r}. Must be one of {', '.join(_LOG_FORMATS)}.", err=True)
        raise typer.Exit(code=2)
    configure_logging(fmt, (log_level or settings.level).upper())


def _run_tool(tool: BaseTool[Any], arguments: dict[str, Any]) -> None:
    try:
        text = asyncio.run(tool.acall(**{k: v for k, v in arguments.items() if v is not None}))
    except ToolException as e:
        typer.echo(e.error.render(), err=True)
        raise typer.Exit(code=1) from e
    typer.echo(text)


LogLevel = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING or ERROR (default from WEBTOOLS_LOG_LEVEL)")
LogFormat = typer.Option(None, "--log-format", help="console, json or none (default from WEBTOOLS_LOG_FORMAT)")
MaxRetries = typer.Option(None, "--max-retries", min=1, help="Maximum attempts per request")
RetryDelay = typer.Option(None, "--retry-delay", min=0, help="Base backoff delay in milliseconds")
Concurrency = typer.Option(None, "--concurrency", min=1, help="Maximum requests in flight")


@app.command()
def serve(log_level: Optional[str] = LogLevel, log_format: Optional[str] = LogFormat) -> None:
    """Run the MCP server over stdio."""
    from webtools.ext.mcp import serve_mcp

    _setup_logging(log_level, log_format)
    serve_mcp(get_settings())


@app.command()
def search(
    query: str = typer.Argument(..., help="Search query"),
    max_results: int = typer.Option(10, "--max-results", "-n", min=1, help="Maximum results"),
    region: str = typer.Option("wt-wt", "--region", help="Region code, e.g. us-en"),
    time: Optional[str] = typer.Option(None, "--time", help="Time filter: d, w, m or y"),
    max_retries: Optional[int] = MaxRetries,
    retry_delay: Optional[int] = RetryDelay,
    log_level: Optional[str] = LogLevel,
    log_format: Optional[str] = LogFormat,
) -> None:
    """Search the web and print the results as JSON."""
    _setup_logging(log_level, log_format)
    _run_tool(WebSearchTool(get_settings()), {
        "query": query, "maxResults": max_results, "region": region, "time": time,
        "maxRetries": max_retries, "retryDelay": retry_delay,
    })


@app.command()
def page(
    urls: list[str] = typer.Argument(..., help="Page URLs"),
    include_images: bool = typer.Option(False, "--images", help="Include image URLs"),
    include_links: bool = typer.Option(False, "--links", help="Include link URLs"),
    max_length: int = typer.Option(8000, "--max-length", min=1, help="Maximum content length"),
    max_retries: Optional[int] = MaxRetries,
    retry_delay: Optional[int] = RetryDelay,
    concurrency: Optional[int] = Concurrency,
    log_level: Optional[str] = LogLevel,
    log_format: Optional[str] = LogFormat,
) -> None:
    """Fetch pages and print their extracted content as JSON."""
    _setup_logging(log_level, log_format)
    _run_tool(WebPageTool(get_settings()), {
        "urls": urls, "includeImages": include_images, "includeLinks": include_links, "maxLength": max_length,
        "maxRetries": max_retries, "retryDelay": retry_delay, "concurrency": concurrency,
    })


@app.command()
def download(
    urls: list[str] = typer.Argument(..., help="File URLs"),
    directory: str = typer.Option(..., "--directory", "-d", help="Target directory"),
    filenames: Optional[list[str]] = typer.Option(None, "--filename", "-f", help="Custom filename, once per URL"),
    timeout: int = typer.Option(30_000, "--timeout", min=1, help="Request timeout in milliseconds"),
    max_retries: Optional[int] = MaxRetries,
    retry_delay: Optional[int] = RetryDelay,
    concurrency: Optional[int] = Concurrency,
    log_level: Optional[str] = LogLevel,
    log_format: Optional[str] = LogFormat,
) -> None:
    """Download files into a directory and print a JSON report."""
    _setup_logging(log_level, log_format)
    _run_tool(DownloadFilesTool(get_settings()), {
        "urls": urls, "directory": directory, "filenames": filenames or None, "timeout": timeout,
        "maxRetries": max_retries, "retryDelay": retry_delay, "concurrency": concurrency,
    })


if __name__ == "__main__":
    app()
