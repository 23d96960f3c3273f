"""HTTP image downloader on httpx."""

import logging

import httpx

from imagevault.domain.exceptions import DownloadError
from imagevault.domain.ports import IImageDownloader
from imagevault.infrastructure.integrations.http_pool import HttpClientPool

logger = logging.getLogger(__name__)


class HttpImageDownloader(IImageDownloader):
    """Downloads whole images into memory.

    All-or-nothing: the body is fully buffered before fetch() returns, so
    callers never see (or persist) a partial download.
    """

    # Hey future me, pass a client in tests (httpx.MockTransport) - without one we borrow the
    # shared HttpClientPool client, which is what production wants.
    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is not None:
            return self._client
        return await HttpClientPool.get_client()

    async def fetch(self, url: str) -> bytes:
        """Download an image.

        Args:
            url: Absolute image URL

        Returns:
            Complete response body

        Raises:
            DownloadError: Transport failure, non-2xx status or malformed URL
        """
        logger.debug("Downloading copy of image `%s`", url)
        client = await self._get_client()
        try:
            response = await client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Response from copying image `%s` -> Status: %d",
                url,
                e.response.status_code,
            )
            raise DownloadError(url, status_code=e.response.status_code) from e
        except httpx.HTTPError as e:
            logger.warning("Failed to download copy of image `%s`: %s", url, e)
            raise DownloadError(url, reason=type(e).__name__) from e
        # Malformed URLs fail before any request is sent; httpx raises these outside HTTPError
        except (httpx.InvalidURL, ValueError) as e:
            logger.warning("Invalid image URL `%s`: %s", url, e)
            raise DownloadError(url, reason=type(e).__name__) from e

        logger.debug("Downloaded copy of image `%s` (%d bytes)", url, len(response.content))
        return response.content
