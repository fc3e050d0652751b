"""Archive fetcher - downloads the source archive into a workspace."""

import shutil
from pathlib import Path
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

import httpx

from monteur import __version__
from monteur.core.config.settings import FetcherSettings, get_settings
from monteur.core.exceptions.errors import FetchError, FetchFailure
from monteur.core.logger.logger import get_logger

logger = get_logger(__name__)

SUPPORTED_SCHEMES = ("http", "https", "file")


class ArchiveFetcher:
    """Downloads a tar+gzip archive to a local file.

    The body is streamed into a ``.part`` file next to the destination and
    only renamed onto the destination once it is complete, so callers get
    either a fully written archive or a ``FetchError``.
    """

    def __init__(
        self,
        settings: FetcherSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the archive fetcher.

        Args:
            settings: Fetcher settings. Uses global settings if not provided.
            transport: Optional httpx transport (used to stub the network in tests).
        """
        self.settings = settings or get_settings().fetcher
        self._transport = transport

    def _create_client(self) -> httpx.AsyncClient:
        """Create the HTTP client for one download."""
        timeout = httpx.Timeout(
            self.settings.read_timeout,
            connect=self.settings.connect_timeout,
        )
        return httpx.AsyncClient(
            timeout=timeout,
            verify=self.settings.verify_ssl,
            follow_redirects=self.settings.follow_redirects,
            headers={"User-Agent": f"{self.settings.user_agent}/{__version__}"},
            transport=self._transport,
        )

    async def fetch(self, url: str, destination: Path) -> Path:
        """Download ``url`` to ``destination``.

        Args:
            url: URL of the archive.
            destination: File the archive is written to.

        Returns:
            Path to the completely written archive.

        Raises:
            FetchError: If the archive cannot be retrieved or stored.
        """
        scheme = urlparse(url).scheme.lower()
        if scheme not in SUPPORTED_SCHEMES:
            raise FetchError(
                f"Unsupported URL scheme: {scheme or '(none)'}",
                FetchFailure.CONNECTION,
                url=url,
            )

        logger.info(f"Downloading from: {url}")
        partial = destination.with_name(destination.name + ".part")

        try:
            if scheme == "file":
                size = self._copy_local(url, partial)
            else:
                size = await self._download(url, partial)
            partial.replace(destination)
        except OSError as e:
            raise FetchError(
                f"Failed to save archive to {destination}",
                FetchFailure.WRITE,
                url=url,
                details={"error": str(e)},
            ) from e
        finally:
            partial.unlink(missing_ok=True)

        logger.info(f"Downloaded {size} bytes to {destination}")
        return destination

    def _copy_local(self, url: str, partial: Path) -> int:
        """Copy an archive referenced by a file:// URL."""
        source = Path(url2pathname(unquote(urlparse(url).path)))
        if not source.is_file():
            raise FetchError(
                f"Archive not found: {source}",
                FetchFailure.STATUS,
                url=url,
            )
        shutil.copyfile(source, partial)
        return partial.stat().st_size

    async def _download(self, url: str, partial: Path) -> int:
        """Stream an HTTP(S) response body into ``partial``."""
        async with self._create_client() as client:
            try:
                async with client.stream("GET", url) as response:
                    if not response.is_success:
                        raise FetchError(
                            f"Failed to download file: HTTP status {response.status_code}",
                            FetchFailure.STATUS,
                            url=url,
                            details={"status_code": response.status_code},
                        )
                    return await self._write_body(url, response, partial)
            except httpx.StreamError as e:
                raise FetchError(
                    f"Download interrupted: {e}",
                    FetchFailure.TRUNCATED,
                    url=url,
                ) from e
            except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
                raise FetchError(
                    f"Invalid download URL: {e}",
                    FetchFailure.CONNECTION,
                    url=url,
                ) from e
            except httpx.TransportError as e:
                raise FetchError(
                    f"Failed to connect: {e}",
                    FetchFailure.CONNECTION,
                    url=url,
                    details={"error_type": type(e).__name__},
                ) from e

    async def _write_body(self, url: str, response: httpx.Response, partial: Path) -> int:
        """Write the body bytes as sent, checking them against Content-Length.

        A Content-Encoding header is not decoded: the archive is stored
        exactly as served.
        """
        written = 0
        try:
            with open(partial, "wb") as f:
                async for chunk in response.aiter_raw(self.settings.chunk_size):
                    f.write(chunk)
                    written += len(chunk)
        except httpx.TransportError as e:
            raise FetchError(
                f"Download interrupted after {written} bytes: {e}",
                FetchFailure.TRUNCATED,
                url=url,
                details={"bytes_received": written, "error_type": type(e).__name__},
            ) from e

        expected = response.headers.get("Content-Length")
        if expected is not None and expected.isdigit() and int(expected) != written:
            raise FetchError(
                f"Download truncated: received {written} of {expected} bytes",
                FetchFailure.TRUNCATED,
                url=url,
                details={"bytes_received": written, "content_length": int(expected)},
            )

        return written
