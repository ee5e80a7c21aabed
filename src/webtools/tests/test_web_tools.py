"""Tests for the web tools against a fake HTTP transport."""

from __future__ import annotations

from collections import Counter
from collections.abc import AsyncIterator, Callable
from pathlib import Path

import httpx
import orjson
import pytest

from webtools.foundation.errors import ErrorCode, ToolException
from webtools.tools.prebuilt.web import DownloadFilesTool, WebPageTool, WebSearchTool, filename_from_url
from webtools.tools.prebuilt.web.parse import main_text, parse_html, unwrap_redirect

NO_RETRY_DELAY = {"retryDelay": 0}


def transport(routes: dict[str, Callable[[httpx.Request], httpx.Response]], calls: Counter[str]) -> httpx.MockTransport:
    """Route by ``host + path``; unknown routes return 404."""

    def handler(request: httpx.Request) -> httpx.Response:
        key = f"{request.url.host}{request.url.path}"
        calls[key] += 1
        route = routes.get(key)
        return route(request) if route else httpx.Response(404, text="missing")

    return httpx.MockTransport(handler)


def html(body: str, head: str = "") -> Callable[[httpx.Request], httpx.Response]:
    return lambda _req: httpx.Response(200, html=f"<html><head>{head}</head><body>{body}</body></html>")


def status(code: int) -> Callable[[httpx.Request], httpx.Response]:
    return lambda _req: httpx.Response(code, text="nope")


def failing_then(code: int, times: int, then: Callable[[httpx.Request], httpx.Response]) -> Callable[[httpx.Request], httpx.Response]:
    seen = 0

    def route(request: httpx.Request) -> httpx.Response:
        nonlocal seen
        seen += 1
        return httpx.Response(code) if seen <= times else then(request)

    return route


# ═════════════════════════════════════════════════════════════════════════════
# web_search
# ═════════════════════════════════════════════════════════════════════════════

DDG_HTML = """
<div class="result">
  <h2><a class="result__a" href="//duckduckgo.com/l/?uddg=https%3A%2F%2Fdocs.python.org%2F3%2Flibrary%2Fasyncio.html&rut=abc">asyncio docs</a></h2>
  <a class="result__snippet">Asynchronous <b>I/O</b> in Python.</a>
</div>
<div class="result">
  <h2><a class="result__a" href="https://realpython.com/async-io-python/">Real Python</a></h2>
</div>
"""

DDG_LITE = """
<table>
  <tr><td><a class="result-link" href="https://example.org/lite">Lite result</a></td></tr>
</table>
"""


@pytest.mark.asyncio
async def test_search_parses_results_and_unwraps_redirects() -> None:
    calls: Counter[str] = Counter()
    seen: list[httpx.Request] = []

    def route(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return html(DDG_HTML)(request)

    tool = WebSearchTool(transport=transport({"duckduckgo.com/html/": route}, calls))
    data = orjson.loads(await tool.acall(query="python asyncio", region="us-en", time="w"))

    assert data["query"] == "python asyncio"
    assert data["results"][0] == {
        "title": "asyncio docs",
        "url": "https://docs.python.org/3/library/asyncio.html",
        "snippet": "Asynchronous I/O in Python.",
        "source": "docs.python.org",
    }
    assert data["results"][1]["source"] == "realpython.com"
    assert data["results"][1]["snippet"] == ""
    assert seen[0].url.params["kl"] == "us-en"
    assert seen[0].url.params["df"] == "w"
    assert calls["lite.duckduckgo.com/lite/"] == 0


@pytest.mark.asyncio
async def test_search_respects_max_results() -> None:
    tool = WebSearchTool(transport=transport({"duckduckgo.com/html/": html(DDG_HTML)}, Counter()))
    data = orjson.loads(await tool.acall(query="q", maxResults=1))
    assert len(data["results"]) == 1


@pytest.mark.asyncio
async def test_search_falls_back_to_lite_when_html_endpoint_fails() -> None:
    calls: Counter[str] = Counter()
    tool = WebSearchTool(transport=transport({
        "duckduckgo.com/html/": status(503),
        "lite.duckduckgo.com/lite/": html(DDG_LITE),
    }, calls))
    data = orjson.loads(await tool.acall(query="q"))
    assert [r["url"] for r in data["results"]] == ["https://example.org/lite"]
    assert calls["duckduckgo.com/html/"] == 1


@pytest.mark.asyncio
async def test_search_without_results_is_retried_then_reported() -> None:
    calls: Counter[str] = Counter()
    tool = WebSearchTool(transport=transport({
        "duckduckgo.com/html/": html("<p>nothing here</p>"),
        "lite.duckduckgo.com/lite/": html("<p>still nothing</p>"),
    }, calls))
    with pytest.raises(ToolException) as info:
        await tool.acall(query="zzz", maxRetries=2, **NO_RETRY_DELAY)
    assert info.value.error.code == ErrorCode.NO_RESULTS
    assert "after 2 attempts" in info.value.error.message
    assert calls["duckduckgo.com/html/"] == 2


@pytest.mark.asyncio
async def test_search_rejects_empty_query() -> None:
    tool = WebSearchTool(transport=transport({}, Counter()))
    with pytest.raises(ToolException) as info:
        await tool.acall(query="")
    assert info.value.error.code == ErrorCode.INVALID_PARAMS


def test_unwrap_redirect() -> None:
    base = "https://duckduckgo.com/html/?q=x"
    assert unwrap_redirect("/l/?uddg=https%3A%2F%2Fa.com%2Fb", base) == "https://a.com/b"
    assert unwrap_redirect("https://b.com/", base) == "https://b.com/"


# ═════════════════════════════════════════════════════════════════════════════
# web_page
# ═════════════════════════════════════════════════════════════════════════════

ARTICLE_HEAD = """
<title> Async in Practice </title>
<meta name="description" content="How to fan out safely">
<meta name="author" content="A. Writer">
<meta property="article:published_time" content="2024-05-01">
"""

ARTICLE_BODY = """
<nav>Home | About</nav>
<script>var tracking = 1;</script>
<main>
  <h1>Bounded fan-out</h1>
  <p>Use a semaphore.</p>
  <div class="ads">Buy now</div>
  <img src="/img/diagram.png"><img src="data:image/png;base64,AAAA">
</main>
<div class="related"><a href="/next"></a><a href="#top"></a><a href="mailto:me@example.com"></a></div>
<footer><a href="/about">About</a></footer>
"""


@pytest.mark.asyncio
async def test_page_extracts_content_and_metadata() -> None:
    tool = WebPageTool(transport=transport({"example.com/post": html(ARTICLE_BODY, ARTICLE_HEAD)}, Counter()))
    [page] = orjson.loads(await tool.acall(urls=["https://example.com/post"], includeImages=True, includeLinks=True))

    assert page["url"] == "https://example.com/post"
    assert page["title"] == "Async in Practice"
    assert page["content"] == "Bounded fan-out Use a semaphore."
    assert page["metadata"] == {
        "description": "How to fan out safely",
        "author": "A. Writer",
        "publishDate": "2024-05-01",
    }
    assert page["images"] == ["https://example.com/img/diagram.png"]
    assert page["links"] == ["https://example.com/next"]
    assert "error" not in page


@pytest.mark.asyncio
async def test_page_omits_images_and_links_by_default_and_truncates() -> None:
    tool = WebPageTool(transport=transport({"example.com/post": html("<article>" + "x" * 50 + "</article>")}, Counter()))
    [page] = orjson.loads(await tool.acall(urls=["https://example.com/post"], maxLength=10))
    assert page["content"] == "x" * 10 + "..."
    assert page["title"] == "No title found"
    assert "images" not in page and "links" not in page


@pytest.mark.asyncio
async def test_page_batch_reports_failures_in_place() -> None:
    calls: Counter[str] = Counter()
    tool = WebPageTool(transport=transport({
        "a.com/": html("<main>first</main>"),
        "b.com/": status(404),
        "c.com/": failing_then(503, 1, html("<main>third</main>")),
    }, calls))
    pages = orjson.loads(await tool.acall(
        urls=["https://a.com/", "https://b.com/", "https://c.com/"], maxRetries=3, concurrency=2, **NO_RETRY_DELAY,
    ))

    assert [p["url"] for p in pages] == ["https://a.com/", "https://b.com/", "https://c.com/"]
    assert pages[0]["content"] == "first"
    assert pages[1] == {
        "url": "https://b.com/", "title": "Error", "content": "", "metadata": {}, "error": "HTTP 404: Not Found",
    }
    assert pages[2]["content"] == "third"
    assert calls["b.com/"] == 1
    assert calls["c.com/"] == 2


@pytest.mark.asyncio
async def test_page_gives_up_after_max_retries() -> None:
    calls: Counter[str] = Counter()
    tool = WebPageTool(transport=transport({"down.com/": status(500)}, calls))
    [page] = orjson.loads(await tool.acall(urls=["https://down.com/"], maxRetries=2, **NO_RETRY_DELAY))
    assert page["title"] == "Error"
    assert page["error"] == "HTTP 500: Internal Server Error"
    assert calls["down.com/"] == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("arguments", [{"urls": []}, {"urls": ["https://a.com"], "concurrency": 0}, {"urls": ["x"], "bogus": 1}])
async def test_page_rejects_invalid_arguments(arguments: dict[str, object]) -> None:
    tool = WebPageTool(transport=transport({}, Counter()))
    with pytest.raises(ToolException) as info:
        await tool.acall(**arguments)
    assert info.value.error.code == ErrorCode.INVALID_PARAMS


def test_main_text_prefers_first_content_selector() -> None:
    soup = parse_html("<body><div class='content'>side</div><article>story</article></body>")
    assert main_text(soup) == "story"


# ═════════════════════════════════════════════════════════════════════════════
# download_files
# ═════════════════════════════════════════════════════════════════════════════


class BrokenStream(httpx.AsyncByteStream):
    """Body that dies after the first chunk."""

    async def __aiter__(self) -> AsyncIterator[bytes]:
        yield b"partial"
        raise httpx.ReadError("connection reset")


def file_body(content: bytes) -> Callable[[httpx.Request], httpx.Response]:
    return lambda _req: httpx.Response(200, content=content)


@pytest.mark.asyncio
async def test_download_writes_files_and_reports_each(tmp_path: Path) -> None:
    tool = DownloadFilesTool(transport=transport({
        "files.com/report.pdf": file_body(b"%PDF-1.7 data"),
        "files.com/data.csv": file_body(b"a,b\n1,2\n"),
    }, Counter()))
    results = orjson.loads(await tool.acall(
        urls=["https://files.com/report.pdf", "https://files.com/data.csv"],
        directory=str(tmp_path / "out"),
        filenames=["", "table.csv"],
    ))

    assert [r["success"] for r in results] == [True, True]
    assert results[0]["filename"] == "report.pdf"
    assert results[0]["size"] == len(b"%PDF-1.7 data")
    assert results[1]["filename"] == "table.csv"
    assert Path(results[1]["filepath"]).read_bytes() == b"a,b\n1,2\n"
    assert "error" not in results[0]


@pytest.mark.asyncio
async def test_download_failure_is_isolated_and_not_retried_on_404(tmp_path: Path) -> None:
    calls: Counter[str] = Counter()
    tool = DownloadFilesTool(transport=transport({"files.com/ok.txt": file_body(b"ok")}, calls))
    results = orjson.loads(await tool.acall(
        urls=["https://files.com/missing.txt", "https://files.com/ok.txt"],
        directory=str(tmp_path),
        maxRetries=3,
        **NO_RETRY_DELAY,
    ))

    assert results[0] == {
        "url": "https://files.com/missing.txt", "filepath": "", "filename": "", "size": 0,
        "success": False, "error": "HTTP 404: Not Found",
    }
    assert results[1]["success"] is True
    assert calls["files.com/missing.txt"] == 1
    assert not (tmp_path / "missing.txt").exists()


@pytest.mark.asyncio
async def test_download_removes_partial_file(tmp_path: Path) -> None:
    calls: Counter[str] = Counter()
    tool = DownloadFilesTool(transport=transport({
        "files.com/big.bin": lambda _req: httpx.Response(200, stream=BrokenStream()),
    }, calls))
    [result] = orjson.loads(await tool.acall(
        urls=["https://files.com/big.bin"], directory=str(tmp_path), maxRetries=2, **NO_RETRY_DELAY,
    ))
    assert result["success"] is False
    assert "connection reset" in result["error"]
    assert calls["files.com/big.bin"] == 2
    assert list(tmp_path.iterdir()) == []


@pytest.mark.asyncio
async def test_failed_download_keeps_existing_file(tmp_path: Path) -> None:
    existing = tmp_path / "report.pdf"
    existing.write_bytes(b"keep me")
    tool = DownloadFilesTool(transport=transport({}, Counter()))
    [result] = orjson.loads(await tool.acall(urls=["https://files.com/report.pdf"], directory=str(tmp_path)))

    assert result["success"] is False
    assert existing.read_bytes() == b"keep me"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["report.pdf"]


@pytest.mark.asyncio
async def test_failed_sibling_keeps_file_written_under_same_name(tmp_path: Path) -> None:
    tool = DownloadFilesTool(transport=transport({
        "files.com/good.bin": file_body(b"good"),
        "files.com/bad.bin": lambda _req: httpx.Response(200, stream=BrokenStream()),
    }, Counter()))
    results = orjson.loads(await tool.acall(
        urls=["https://files.com/good.bin", "https://files.com/bad.bin"],
        directory=str(tmp_path),
        filenames=["same.bin", "same.bin"],
        concurrency=1,
        maxRetries=1,
    ))

    assert [r["success"] for r in results] == [True, False]
    assert Path(results[0]["filepath"]).read_bytes() == b"good"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["same.bin"]


@pytest.mark.asyncio
async def test_download_rejects_names_escaping_directory(tmp_path: Path) -> None:
    calls: Counter[str] = Counter()
    target = tmp_path / "inner"
    tool = DownloadFilesTool(transport=transport({"files.com/x": file_body(b"x")}, calls))
    [result] = orjson.loads(await tool.acall(
        urls=["https://files.com/x"], directory=str(target), filenames=["../escape.txt"],
    ))
    assert result["success"] is False
    assert "would escape directory" in result["error"]
    assert result["filename"] == "../escape.txt"
    assert calls["files.com/x"] == 0
    assert not (tmp_path / "escape.txt").exists()


@pytest.mark.asyncio
async def test_download_filenames_length_mismatch_fails_whole_call(tmp_path: Path) -> None:
    calls: Counter[str] = Counter()
    tool = DownloadFilesTool(transport=transport({}, calls))
    with pytest.raises(ToolException) as info:
        await tool.acall(urls=["https://a.com/1", "https://a.com/2"], directory=str(tmp_path), filenames=["one"])
    assert info.value.error.code == ErrorCode.INVALID_PARAMS
    assert sum(calls.values()) == 0


@pytest.mark.asyncio
async def test_download_rejects_non_http_urls(tmp_path: Path) -> None:
    tool = DownloadFilesTool(transport=transport({}, Counter()))
    with pytest.raises(ToolException) as info:
        await tool.acall(urls=["ftp://files.com/a"], directory=str(tmp_path))
    assert info.value.error.code == ErrorCode.INVALID_PARAMS
    assert "Invalid URL" in info.value.error.message


def test_filename_from_url() -> None:
    assert filename_from_url("https://a.com/dir/file%20name.txt") == "file name.txt"
    assert filename_from_url("https://a.com/").startswith("download_")
