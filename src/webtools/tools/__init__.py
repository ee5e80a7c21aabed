"""Tool implementations and shared HTTP plumbing."""

from .http import FetchedPage, HttpTool, ResponseTooLargeError, create_client, ensure_success, fetch_html
from .prebuilt import DownloadFilesTool, WebPageTool, WebSearchTool

__all__ = [
    "HttpTool", "FetchedPage", "ResponseTooLargeError",
    "create_client", "ensure_success", "fetch_html",
    "WebSearchTool", "WebPageTool", "DownloadFilesTool",
]
