"""Download Files Tool - stream remote files into a local directory.

The target directory is created and checked up front; a bad directory or
a filenames/urls length mismatch fails the whole call before any request
is made. After that each URL is an independent batch item with its own
retries. Bodies are written to a temporary file and moved into place only
when complete; a failed download leaves the directory as it was.

Example:
    >>> tool = DownloadFilesTool()
    >>> await tool.acall(urls=["https://example.com/a.pdf"], directory="./downloads")
"""

from __future__ import annotations

import os
import time
import uuid
from pathlib import Path, PurePosixPath
from typing import Annotated, ClassVar
from urllib.parse import unquote, urlparse

import httpx
from pydantic import Field, field_validator

from webtools.foundation.core import BatchParams, Payload, ToolMetadata
from webtools.foundation.errors import ErrorCode, ToolException
from webtools.runtime.batch import BatchItem, run_batch
from webtools.runtime.retry import execute_with_retry
from webtools.tools.http import HttpTool, ensure_success

CHUNK_SIZE = 64 * 1024


def is_http_url(url: str) -> bool:
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def filename_from_url(url: str) -> str:
    """Last path segment of the URL, or ``download_<ms timestamp>`` when there is none."""
    try:
        name = PurePosixPath(unquote(urlparse(url).path)).name
    except ValueError:
        name = ""
    return name or f"download_{int(time.time() * 1000)}"


def partial_path(target: Path) -> Path:
    """Hidden per-attempt scratch file beside ``target``."""
    return target.with_name(f".{target.name}.{uuid.uuid4().hex[:8]}.part")


class DownloadFilesParams(BatchParams):
    """Parameters for bulk download."""

    urls: Annotated[list[str], Field(description="Array of URLs to download")]
    directory: Annotated[str, Field(min_length=1, description="Target directory path for downloads")]
    filenames: list[str] | None = Field(
        default=None, description="Optional array of custom filenames (same length as urls)",
    )
    timeout: Annotated[int, Field(default=30_000, ge=1, description="Request timeout in milliseconds")]

    @field_validator("urls")
    @classmethod
    def _http_only(cls, urls: list[str]) -> list[str]:
        for url in urls:
            if not is_http_url(url):
                raise ValueError(f"Invalid URL: {url}")
        return urls


class DownloadResult(Payload):
    url: str
    filepath: str
    filename: str
    size: int
    success: bool
    error: str | None = None


class DownloadFilesTool(HttpTool[DownloadFilesParams]):
    """Download files from URLs into a directory with bounded parallelism."""

    metadata: ClassVar[ToolMetadata] = ToolMetadata(
        name="download_files",
        description="Download files from URLs into a local directory with retries and bounded parallelism.",
        category="files",
    )
    params_schema: ClassVar[type[DownloadFilesParams]] = DownloadFilesParams

    async def _async_run(self, params: DownloadFilesParams) -> list[DownloadResult]:
        directory = self._prepare_directory(params.directory)
        if params.filenames is not None and len(params.filenames) != len(params.urls):
            raise ToolException.create(
                self.metadata.name,
                "Filenames array must have the same length as URLs array",
                ErrorCode.INVALID_PARAMS,
                recoverable=False,
            )

        policy = self.retry_policy(params)
        names = params.filenames or [""] * len(params.urls)

        async with self.client(timeout=params.timeout / 1000) as client:
            async def download_one(entry: tuple[str, str]) -> DownloadResult:
                url, custom = entry
                target = self._target_path(directory, custom or filename_from_url(url))
                return await execute_with_retry(lambda: self._download(client, url, target), policy, name=url)

            batch = await run_batch(
                list(zip(params.urls, names)),
                self.concurrency(params),
                download_one,
                name=self.metadata.name,
            )
        return [self._render(item) for item in batch]

    def _prepare_directory(self, directory: str) -> Path:
        path = Path(directory).expanduser().resolve()
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ToolException.create(
                self.metadata.name, f"Cannot create directory {path}: {e}", ErrorCode.PERMISSION_DENIED, recoverable=False,
            ) from e
        if not os.access(path, os.W_OK):
            raise ToolException.create(
                self.metadata.name, f"Directory is not writable: {path}", ErrorCode.PERMISSION_DENIED, recoverable=False,
            )
        return path

    @staticmethod
    def _target_path(directory: Path, filename: str) -> Path:
        target = (directory / filename).resolve()
        if target == directory or not target.is_relative_to(directory):
            raise ValueError(f"Invalid file path: {filename} would escape directory")
        return target

    async def _download(self, client: httpx.AsyncClient, url: str, target: Path) -> DownloadResult:
        """Stream one response body into ``target``.

        The body lands in a scratch file and replaces ``target`` only once
        complete. A failed attempt removes its scratch file and nothing else.
        """
        part = partial_path(target)
        try:
            async with client.stream("GET", url) as response:
                ensure_success(response)
                with part.open("wb") as fh:
                    async for chunk in response.aiter_bytes(CHUNK_SIZE):
                        fh.write(chunk)
            part.replace(target)
        except BaseException:
            part.unlink(missing_ok=True)
            raise
        size = target.stat().st_size
        self._log.debug("downloaded", url=url, filepath=str(target), size=size)
        return DownloadResult(url=url, filepath=str(target), filename=target.name, size=size, success=True)

    @staticmethod
    def _render(item: BatchItem[tuple[str, str], DownloadResult]) -> DownloadResult:
        if item.is_ok:
            return item.value  # type: ignore[return-value]
        url, custom = item.input
        return DownloadResult(
            url=url, filepath="", filename=custom, size=0, success=False,
            error=item.error.error_message,  # type: ignore[union-attr]
        )
