"""Tests for ArchiveFetcher.

HTTP traffic is served by ``httpx.MockTransport``.
"""

import gzip
from collections.abc import AsyncIterator, Callable
from pathlib import Path

import httpx
import pytest

from monteur.core.config.settings import FetcherSettings
from monteur.core.exceptions.errors import FetchError, FetchFailure
from monteur.pipeline.fetcher import ArchiveFetcher

ARCHIVE_URL = "https://example.com/downloads/proj.tar.gz"
PAYLOAD = b"\x1f\x8b" + b"archive-bytes" * 100


async def streamed(*chunks: bytes) -> AsyncIterator[bytes]:
    """Response body delivered chunk by chunk, as from a live connection."""
    for chunk in chunks:
        yield chunk


def fetcher_for(handler: Callable[[httpx.Request], httpx.Response]) -> ArchiveFetcher:
    """Create a fetcher whose requests are answered by ``handler``."""
    return ArchiveFetcher(
        FetcherSettings(chunk_size=1024),
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture
def destination(temp_dir: Path) -> Path:
    """Location the archive is written to."""
    return temp_dir / "archive.tar.gz"


class TestArchiveFetcher:
    """Tests for downloading archives."""

    @pytest.mark.asyncio
    async def test_download(self, destination: Path) -> None:
        """A successful response is written completely."""
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, content=streamed(PAYLOAD))

        result = await fetcher_for(handler).fetch(ARCHIVE_URL, destination)

        assert result == destination
        assert destination.read_bytes() == PAYLOAD
        assert not destination.with_name("archive.tar.gz.part").exists()
        assert requests[0].headers["User-Agent"].startswith("monteur/")

    @pytest.mark.asyncio
    async def test_redirect_followed(self, destination: Path) -> None:
        """Redirects to the real download location are followed."""

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/latest":
                return httpx.Response(302, headers={"Location": ARCHIVE_URL})
            return httpx.Response(200, content=streamed(PAYLOAD))

        await fetcher_for(handler).fetch("https://example.com/latest", destination)

        assert destination.read_bytes() == PAYLOAD

    @pytest.mark.asyncio
    async def test_error_status(self, destination: Path) -> None:
        """A non-success status is reported with its code."""
        fetcher = fetcher_for(lambda request: httpx.Response(404, content=b"not found"))

        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch(ARCHIVE_URL, destination)

        assert exc_info.value.reason == FetchFailure.STATUS
        assert exc_info.value.details["status_code"] == 404
        assert exc_info.value.exit_code == 10
        assert list(destination.parent.iterdir()) == []

    @pytest.mark.asyncio
    async def test_connection_failure(self, destination: Path) -> None:
        """Unreachable hosts are connection failures."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Name or service not known", request=request)

        with pytest.raises(FetchError) as exc_info:
            await fetcher_for(handler).fetch(ARCHIVE_URL, destination)

        assert exc_info.value.reason == FetchFailure.CONNECTION
        assert exc_info.value.details["url"] == ARCHIVE_URL

    @pytest.mark.asyncio
    async def test_content_encoding_not_decoded(self, destination: Path) -> None:
        """A server labelling the archive as gzip-encoded still yields the archive bytes."""
        wire = gzip.compress(b"ustar tree contents" * 50)

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                headers={
                    "Content-Type": "application/x-gzip",
                    "Content-Encoding": "gzip",
                    "Content-Length": str(len(wire)),
                },
                content=streamed(wire[:100], wire[100:]),
            )

        await fetcher_for(handler).fetch(ARCHIVE_URL, destination)

        assert destination.read_bytes() == wire

    @pytest.mark.asyncio
    async def test_short_body(self, destination: Path) -> None:
        """A body shorter than Content-Length is a truncated transfer."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, headers={"Content-Length": "5000"}, content=streamed(b"partial")
            )

        with pytest.raises(FetchError) as exc_info:
            await fetcher_for(handler).fetch(ARCHIVE_URL, destination)

        assert exc_info.value.reason == FetchFailure.TRUNCATED
        assert not destination.exists()
        assert list(destination.parent.iterdir()) == []

    @pytest.mark.asyncio
    async def test_interrupted_stream(self, destination: Path) -> None:
        """A connection dropped mid-body is a truncated transfer."""

        async def body() -> AsyncIterator[bytes]:
            yield b"first chunk"
            raise httpx.ReadError("connection reset")

        fetcher = fetcher_for(lambda request: httpx.Response(200, content=body()))

        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch(ARCHIVE_URL, destination)

        assert exc_info.value.reason == FetchFailure.TRUNCATED
        assert list(destination.parent.iterdir()) == []

    @pytest.mark.asyncio
    async def test_write_failure(self, temp_dir: Path) -> None:
        """A destination that cannot be written is a write failure."""
        fetcher = fetcher_for(lambda request: httpx.Response(200, content=streamed(PAYLOAD)))

        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch(ARCHIVE_URL, temp_dir / "missing" / "archive.tar.gz")

        assert exc_info.value.reason == FetchFailure.WRITE

    @pytest.mark.asyncio
    async def test_unsupported_scheme(self, destination: Path) -> None:
        """Only http(s) and file URLs are accepted."""
        fetcher = ArchiveFetcher(FetcherSettings())

        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch("ftp://example.com/proj.tar.gz", destination)

        assert exc_info.value.reason == FetchFailure.CONNECTION

    @pytest.mark.asyncio
    async def test_file_url(self, temp_dir: Path, destination: Path) -> None:
        """file:// URLs copy a local archive."""
        source = temp_dir / "local proj.tar.gz"
        source.write_bytes(PAYLOAD)

        await ArchiveFetcher(FetcherSettings()).fetch(source.as_uri(), destination)

        assert destination.read_bytes() == PAYLOAD

    @pytest.mark.asyncio
    async def test_missing_file_url(self, temp_dir: Path, destination: Path) -> None:
        """A file:// URL to a missing file is reported like a missing resource."""
        url = (temp_dir / "nope.tar.gz").as_uri()

        with pytest.raises(FetchError) as exc_info:
            await ArchiveFetcher(FetcherSettings()).fetch(url, destination)

        assert exc_info.value.reason == FetchFailure.STATUS
        assert not destination.exists()
