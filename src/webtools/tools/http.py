"""Shared HTTP plumbing for the web tools.

All outbound requests go through one httpx AsyncClient factory so headers,
timeouts and redirect handling come from ``HttpSettings``. Non-2xx
responses become ``HttpStatusError`` so the retry layer can tell fatal
client errors from transient ones.

Example:
    >>> async with create_client(settings.http) as client:
    ...     page = await fetch_html(client, "https://example.com", max_size=settings.http.max_response_size)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

import httpx

from webtools.foundation.core import BaseTool, ToolParams
from webtools.foundation.errors import HttpStatusError

if TYPE_CHECKING:
    from webtools.foundation.config import HttpSettings, WebToolsSettings

HTML_ACCEPT = (
    "text/html,application/xhtml+xml,application/xml;q=0.9,"
    "image/avif,image/webp,image/apng,*/*;q=0.8"
)


class ResponseTooLargeError(Exception):
    """Response body exceeded the configured size limit."""


@dataclass(frozen=True, slots=True)
class FetchedPage:
    """HTML body plus the final URL after redirects."""
    url: str
    html: str
    status_code: int


def default_headers(settings: HttpSettings) -> dict[str, str]:
    return {
        "User-Agent": settings.user_agent,
        "Accept": HTML_ACCEPT,
        "Accept-Language": settings.accept_language,
    }


def create_client(
    settings: HttpSettings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    timeout: float | None = None,
    headers: dict[str, str] | None = None,
) -> httpx.AsyncClient:
    """Build an AsyncClient configured from settings.

    Args:
        settings: HTTP defaults (user agent, timeout, redirects)
        transport: Optional transport override (``httpx.MockTransport`` in tests)
        timeout: Seconds; overrides ``settings.timeout``
        headers: Extra headers merged over the defaults
    """
    return httpx.AsyncClient(
        headers={**default_headers(settings), **(headers or {})},
        timeout=timeout if timeout is not None else settings.timeout,
        follow_redirects=settings.follow_redirects,
        transport=transport,
    )


def ensure_success(response: httpx.Response) -> httpx.Response:
    """Raise HttpStatusError for any status >= 400."""
    if response.status_code >= 400:
        raise HttpStatusError(response.status_code, str(response.url), response.reason_phrase)
    return response


async def fetch_html(
    client: httpx.AsyncClient,
    url: str,
    *,
    max_size: int,
    params: dict[str, str] | None = None,
    headers: dict[str, str] | None = None,
) -> FetchedPage:
    """GET a page and decode it, enforcing a body size limit.

    Raises:
        HttpStatusError: Non-2xx response
        ResponseTooLargeError: Body larger than ``max_size`` bytes
        httpx.HTTPError: Transport failures (timeouts, connection errors)
    """
    async with client.stream("GET", url, params=params, headers=headers) as response:
        ensure_success(response)
        declared = int(response.headers.get("content-length") or 0)
        if declared > max_size:
            raise ResponseTooLargeError(f"Response too large: {declared} bytes (max: {max_size})")
        body = bytearray()
        async for chunk in response.aiter_bytes():
            body.extend(chunk)
            if len(body) > max_size:
                raise ResponseTooLargeError(f"Response body exceeded max size: {max_size} bytes")
        encoding = response.encoding or "utf-8"
        return FetchedPage(str(response.url), bytes(body).decode(encoding, errors="replace"), response.status_code)


TParams = TypeVar("TParams", bound=ToolParams)


class HttpTool(BaseTool[TParams]):
    """BaseTool that owns an optional transport override for its HTTP client."""

    __slots__ = ("_transport",)

    def __init__(
        self,
        settings: WebToolsSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(settings)
        self._transport = transport

    def client(self, **kwargs: Any) -> httpx.AsyncClient:
        """New client for one tool call; use as an async context manager."""
        return create_client(self.settings.http, transport=self._transport, **kwargs)
