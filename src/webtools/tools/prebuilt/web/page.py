"""Web Page Tool - fetch pages and extract their readable content.

Each URL is an independent batch item: fetched under the retry policy with
bounded concurrency, then reduced to title, main text and metadata. A URL
that fails yields an error record in its slot; the other pages are
unaffected.

Example:
    >>> tool = WebPageTool()
    >>> await tool.acall(urls=["https://example.com"], includeLinks=True, maxLength=2000)
"""

from __future__ import annotations

from typing import Annotated, ClassVar

from pydantic import Field

from webtools.foundation.core import BatchParams, Payload, ToolMetadata
from webtools.runtime.batch import BatchItem, run_batch
from webtools.tools.http import HttpTool, fetch_html

from . import parse

ERROR_TITLE = "Error"


class WebPageParams(BatchParams):
    """Parameters for page extraction."""

    urls: Annotated[list[str], Field(min_length=1, description="URLs of the web pages to fetch")]
    include_images: bool = Field(default=False, description="Include images in the response")
    include_links: bool = Field(default=False, description="Include links in the response")
    max_length: Annotated[int, Field(default=8000, ge=1, description="Maximum length of content to return")]


class PageMetadata(Payload):
    description: str | None = None
    keywords: str | None = None
    author: str | None = None
    publish_date: str | None = None


class PageContent(Payload):
    url: str
    title: str
    content: str
    images: list[str] | None = None
    links: list[str] | None = None
    metadata: PageMetadata = Field(default_factory=PageMetadata)
    error: str | None = None

    @classmethod
    def failed(cls, url: str, error: str) -> PageContent:
        return cls(url=url, title=ERROR_TITLE, content="", error=error or "Unknown error occurred")


def extract_page(url: str, html: str, params: WebPageParams) -> PageContent:
    """Reduce an HTML document to a PageContent record."""
    soup = parse.parse_html(html)
    title = parse.page_title(soup)
    parse.strip_noise(soup)
    content = parse.truncate(parse.main_text(soup), params.max_length)
    metadata = PageMetadata(**parse.page_metadata(soup))
    images = parse.image_urls(soup, url) if params.include_images else None
    links = parse.link_urls(soup, url) if params.include_links else None
    return PageContent(url=url, title=title, content=content, images=images, links=links, metadata=metadata)


class WebPageTool(HttpTool[WebPageParams]):
    """Fetch one or more web pages and extract their main content."""

    metadata: ClassVar[ToolMetadata] = ToolMetadata(
        name="web_page",
        description="Fetch web pages and extract their main text content, title, metadata, and optionally images and links.",
        category="web",
    )
    params_schema: ClassVar[type[WebPageParams]] = WebPageParams

    async def _async_run(self, params: WebPageParams) -> list[PageContent]:
        max_size = int(self.settings.http.max_response_size)

        async with self.client() as client:
            async def fetch_one(url: str) -> PageContent:
                page = await fetch_html(client, url, max_size=max_size)
                if not page.html.strip():
                    raise ValueError(f"Failed to fetch content from {url}")
                return extract_page(url, page.html, params)

            batch = await run_batch(
                params.urls,
                self.concurrency(params),
                fetch_one,
                policy=self.retry_policy(params),
                name=self.metadata.name,
            )
        return [self._render(item) for item in batch]

    @staticmethod
    def _render(item: BatchItem[str, PageContent]) -> PageContent:
        if item.is_ok:
            return item.value  # type: ignore[return-value]
        return PageContent.failed(item.input, item.error.error_message)  # type: ignore[union-attr]
