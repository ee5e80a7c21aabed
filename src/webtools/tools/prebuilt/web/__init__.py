"""Web tools: search, page extraction and bulk download."""

from .download import DownloadFilesParams, DownloadFilesTool, DownloadResult, filename_from_url
from .page import PageContent, PageMetadata, WebPageParams, WebPageTool, extract_page
from .search import NoResultsError, SearchResponse, SearchResult, WebSearchParams, WebSearchTool

__all__ = [
    # Search
    "WebSearchTool", "WebSearchParams", "SearchResult", "SearchResponse", "NoResultsError",
    # Pages
    "WebPageTool", "WebPageParams", "PageContent", "PageMetadata", "extract_page",
    # Downloads
    "DownloadFilesTool", "DownloadFilesParams", "DownloadResult", "filename_from_url",
]
