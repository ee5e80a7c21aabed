"""Prebuilt tools."""

from .web import DownloadFilesTool, WebPageTool, WebSearchTool

__all__ = ["WebSearchTool", "WebPageTool", "DownloadFilesTool"]
