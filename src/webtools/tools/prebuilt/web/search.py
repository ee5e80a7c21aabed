"""Web Search Tool - DuckDuckGo HTML search without an API key.

Scrapes the HTML endpoint and falls back to the lite endpoint when the
first page fails or yields no result links. The whole lookup runs under
the retry policy; "no results" counts as a transient failure.

Example:
    >>> tool = WebSearchTool()
    >>> await tool.acall(query="python asyncio semaphore", maxResults=5)
"""

from __future__ import annotations

from typing import Annotated, ClassVar, Literal
from urllib.parse import urlparse

import httpx
from pydantic import Field

from webtools.foundation.core import Payload, RetryParams, ToolMetadata
from webtools.foundation.errors import ErrorCode, HttpStatusError, ToolError, ToolException, classify_exception
from webtools.runtime.retry import execute_with_retry
from webtools.tools.http import FetchedPage, HttpTool, ResponseTooLargeError, fetch_html

from .parse import ResultLink, parse_html, result_links

HTML_ENDPOINT = "https://duckduckgo.com/html/"
LITE_ENDPOINT = "https://lite.duckduckgo.com/lite/"
REFERER = "https://duckduckgo.com/"

HTML_RESULT_SELECTOR = "a.result__a"
LITE_RESULT_SELECTOR = "td.result-link > a, a.result-link"
ANY_RESULT_SELECTOR = f"{LITE_RESULT_SELECTOR}, {HTML_RESULT_SELECTOR}"


class NoResultsError(Exception):
    """The search page parsed, but contained no result links."""


class WebSearchParams(RetryParams):
    """Parameters for web search."""

    query: Annotated[str, Field(min_length=1, description="Search query to execute")]
    max_results: Annotated[int, Field(default=10, ge=1, le=50, description="Maximum number of results to return")]
    region: Annotated[str, Field(default="wt-wt", description="Region for search results (e.g. us-en, wt-wt)")]
    time: Annotated[Literal["d", "w", "m", "y"] | None, Field(
        default=None, description="Time filter for search results (d, w, m, y)",
    )]


class SearchResult(Payload):
    title: str
    url: str
    snippet: str
    source: str


class SearchResponse(Payload):
    query: str
    results: list[SearchResult]


class WebSearchTool(HttpTool[WebSearchParams]):
    """Search the web via DuckDuckGo and return titles, URLs and snippets."""

    metadata: ClassVar[ToolMetadata] = ToolMetadata(
        name="web_search",
        description="Search the web using DuckDuckGo and return result titles, URLs, snippets and sources.",
        category="web",
    )
    params_schema: ClassVar[type[WebSearchParams]] = WebSearchParams

    async def _async_run(self, params: WebSearchParams) -> SearchResponse:
        policy = self.retry_policy(params)
        async with self.client(headers={"Referer": REFERER}) as client:
            try:
                links = await execute_with_retry(
                    lambda: self._search(client, params), policy, name=f"search:{params.query}",
                )
            except Exception as e:
                code = ErrorCode.NO_RESULTS if isinstance(e, NoResultsError) else classify_exception(e)
                raise ToolException(ToolError.create(
                    self.metadata.name,
                    f"Error performing web search after {policy.max_attempts} attempts: {e}",
                    code,
                )) from e
        return SearchResponse(
            query=params.query,
            results=[
                SearchResult(title=link.title, url=link.url, snippet=link.snippet, source=urlparse(link.url).hostname or "")
                for link in links
            ],
        )

    def _query(self, params: WebSearchParams) -> dict[str, str]:
        query = {"q": params.query, "kl": params.region}
        if params.time:
            query["df"] = params.time
        return query

    async def _fetch(self, client: httpx.AsyncClient, endpoint: str, params: WebSearchParams) -> FetchedPage:
        return await fetch_html(
            client, endpoint, params=self._query(params), max_size=self.settings.http.max_response_size,
        )

    async def _search(self, client: httpx.AsyncClient, params: WebSearchParams) -> list[ResultLink]:
        """One search attempt: HTML endpoint first, lite endpoint as fallback."""
        page: FetchedPage | None
        try:
            page = await self._fetch(client, HTML_ENDPOINT, params)
        except (httpx.HTTPError, HttpStatusError, ResponseTooLargeError) as e:
            self._log.debug("html endpoint failed, using lite", error=str(e) or type(e).__name__)
            page = None
        if page is None or not page.html.strip():
            page = await self._fetch(client, LITE_ENDPOINT, params)

        soup = parse_html(page.html)
        links = result_links(soup, page.url, HTML_RESULT_SELECTOR) or result_links(soup, page.url, LITE_RESULT_SELECTOR)

        if not links and not page.url.startswith(LITE_ENDPOINT):
            lite = await self._fetch(client, LITE_ENDPOINT, params)
            if lite.html.strip():
                links = result_links(parse_html(lite.html), lite.url, ANY_RESULT_SELECTOR)

        if not links:
            raise NoResultsError(f'No search results parsed for query "{params.query}".')
        return links[: params.max_results]
