"""HTML helpers shared by the web tools.

Thin functions over BeautifulSoup: main-content text, page metadata,
absolute image/link lists, and search-result link extraction.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import parse_qs, urljoin, urlparse

from bs4 import BeautifulSoup, Tag

NOISE_SELECTOR = "script, style, nav, footer, aside, .advertisement, .ads"
CONTENT_SELECTORS: tuple[str, ...] = (
    "main",
    "article",
    '[role="main"]',
    ".content",
    ".main-content",
    ".post-content",
    ".entry-content",
    "body",
)
NO_TITLE = "No title found"

_WS = re.compile(r"\s+")


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def clean_text(text: str) -> str:
    """Collapse runs of whitespace into single spaces."""
    return _WS.sub(" ", text).strip()


def page_title(soup: BeautifulSoup) -> str:
    tag = soup.find("title")
    return (clean_text(tag.get_text()) if tag else "") or NO_TITLE


def strip_noise(soup: BeautifulSoup) -> None:
    """Remove scripts, styles, navigation chrome and ads in place."""
    for el in soup.select(NOISE_SELECTOR):
        el.decompose()


def main_text(soup: BeautifulSoup) -> str:
    """Text of the first matching content container, falling back to the whole document."""
    for selector in CONTENT_SELECTORS:
        if (el := soup.select_one(selector)) is not None:
            if text := clean_text(el.get_text(" ")):
                return text
            break
    return clean_text(soup.get_text(" "))


def truncate(text: str, max_length: int) -> str:
    return text[:max_length] + "..." if len(text) > max_length else text


def _meta(soup: BeautifulSoup, **attrs: str) -> str | None:
    tag = soup.find("meta", attrs=attrs)
    content = tag.get("content") if isinstance(tag, Tag) else None
    return content if isinstance(content, str) and content else None


def page_metadata(soup: BeautifulSoup) -> dict[str, str | None]:
    """description, keywords, author and publishDate from <meta> tags."""
    return {
        "description": _meta(soup, name="description"),
        "keywords": _meta(soup, name="keywords"),
        "author": _meta(soup, name="author"),
        "publish_date": _meta(soup, property="article:published_time") or _meta(soup, name="publishdate"),
    }


def absolute_urls(soup: BeautifulSoup, base_url: str, tag: str, attr: str, skip: tuple[str, ...]) -> list[str]:
    """Resolve ``tag[attr]`` values against ``base_url``, dropping those starting with ``skip``."""
    urls: list[str] = []
    for el in soup.find_all(tag):
        value = el.get(attr)
        if not isinstance(value, str) or not value or value.startswith(skip):
            continue
        try:
            urls.append(urljoin(base_url, value))
        except ValueError:
            continue
    return urls


def image_urls(soup: BeautifulSoup, base_url: str) -> list[str]:
    return absolute_urls(soup, base_url, "img", "src", ("data:",))


def link_urls(soup: BeautifulSoup, base_url: str) -> list[str]:
    return absolute_urls(soup, base_url, "a", "href", ("#", "mailto:"))


# ─────────────────────────────────────────────────────────────────────────────
# Search results
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class ResultLink:
    title: str
    url: str
    snippet: str = ""


def unwrap_redirect(href: str, base_url: str) -> str | None:
    """Absolute target of a result link, following DuckDuckGo ``/l/?uddg=`` redirects."""
    try:
        url = urljoin(base_url, href)
        parsed = urlparse(url)
    except ValueError:
        return None
    if (parsed.hostname or "").endswith("duckduckgo.com") and parsed.path == "/l/":
        if target := parse_qs(parsed.query).get("uddg"):
            return target[0]
    return url


def _snippet(anchor: Tag) -> str:
    container = anchor.find_parent(class_="result")
    found = container.select_one(".result__snippet") if container else None
    return clean_text(found.get_text(" ")) if found else ""


def result_links(soup: BeautifulSoup, base_url: str, selector: str) -> list[ResultLink]:
    """Result anchors matching ``selector`` with their titles, targets and snippets."""
    links: list[ResultLink] = []
    for anchor in soup.select(selector):
        href = anchor.get("href")
        if not isinstance(href, str) or not href:
            continue
        if (url := unwrap_redirect(href, base_url)) is None:
            continue
        links.append(ResultLink(clean_text(anchor.get_text(" ")), url, _snippet(anchor)))
    return links
