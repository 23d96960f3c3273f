"""Kraken.io image optimizer.

Protocol (upload-and-wait):
    POST {api_url}/v1/upload
        multipart "upload" = image bytes
        form "data"        = JSON {"auth": {...}, "wait": true, "lossy": true, ...}

    200 {"success": true, "kraked_url": "https://dl.kraken.io/...", "original_size": ..,
         "kraked_size": ..}
    4xx/5xx or 200 {"success": false, "message": "..."}

With "wait": true Kraken holds the request open until the image is processed, so a
single POST covers submit + poll. The optimized bytes then have to be fetched from
kraked_url - Kraken only keeps them around for a limited time.
"""

import json
import logging
from dataclasses import replace
from typing import Any

import httpx

from imagevault.config import KrakenSettings
from imagevault.domain.exceptions import ConfigurationError, OptimizationError
from imagevault.domain.ports import IImageDownloader, IImageOptimizer, OptimizeOptions
from imagevault.infrastructure.integrations.http_pool import HttpClientPool

logger = logging.getLogger(__name__)


class KrakenOptimizer(IImageOptimizer):
    """Optimizes images through the Kraken.io upload API."""

    UPLOAD_PATH = "/v1/upload"

    def __init__(
        self,
        settings: KrakenSettings,
        downloader: IImageDownloader,
        client: httpx.AsyncClient | None = None,
        default_options: OptimizeOptions | None = None,
    ) -> None:
        """
        Initialize the optimizer.

        Args:
            settings: Kraken configuration (credentials, endpoint, timeout)
            downloader: Used to fetch the optimized result from kraked_url
            client: HTTP client for the API call (defaults to the shared pool)
            default_options: Options used when optimize() gets none

        Raises:
            ConfigurationError: API key or secret missing
        """
        if not settings.is_configured:
            raise ConfigurationError("Kraken API credentials not configured")

        self.settings = settings
        self.downloader = downloader
        self.default_options = default_options or OptimizeOptions(lossy=settings.lossy)
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is not None:
            return self._client
        return await HttpClientPool.get_client()

    def _build_request_data(self, options: OptimizeOptions) -> dict[str, Any]:
        assert self.settings.api_key is not None
        assert self.settings.api_secret is not None
        return {
            **options.extra,
            "auth": {
                "api_key": self.settings.api_key.get_secret_value(),
                "api_secret": self.settings.api_secret.get_secret_value(),
            },
            "wait": True,
            "lossy": options.lossy,
        }

    async def optimize(
        self,
        data: bytes,
        image_name: str,
        options: OptimizeOptions | None = None,
    ) -> bytes:
        """Optimize image bytes and return the optimized bytes.

        Args:
            data: Original image bytes
            image_name: Logical image name (may contain path segments)
            options: Per-call options; extra keys are merged over the defaults

        Returns:
            Optimized image bytes

        Raises:
            OptimizationError: Kraken reported a failure or answered garbage
            DownloadError: The optimized result could not be downloaded
        """
        if options is None:
            effective = self.default_options
        else:
            effective = replace(
                options, extra={**self.default_options.extra, **options.extra}
            )

        body = await self._upload(data, image_name, effective)

        kraked_url = body.get("kraked_url")
        if not kraked_url:
            raise OptimizationError(image_name, "Response did not contain kraked_url")

        logger.debug("Downloading optimized bytes for image `%s`", image_name)
        optimized = await self.downloader.fetch(kraked_url)
        logger.info(
            "Downloaded optimized bytes for image `%s`",
            image_name,
            extra={
                "image_name": image_name,
                "original_size": len(data),
                "optimized_size": len(optimized),
            },
        )
        return optimized

    async def _upload(
        self, data: bytes, image_name: str, options: OptimizeOptions
    ) -> dict[str, Any]:
        """Send the upload-and-wait request and return the decoded success body."""
        file_name = image_name.rsplit("/", 1)[-1] or "image"
        url = f"{self.settings.api_url.rstrip('/')}{self.UPLOAD_PATH}"

        logger.info("Sending optimization request for image `%s`", image_name)
        client = await self._get_client()
        try:
            response = await client.post(
                url,
                data={"data": json.dumps(self._build_request_data(options))},
                files={"upload": (file_name, data)},
                timeout=self.settings.timeout,
            )
        except httpx.HTTPError as e:
            raise OptimizationError(image_name, f"{type(e).__name__}: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise OptimizationError(
                image_name, f"HTTP {response.status_code}: response is not JSON"
            ) from e

        if not isinstance(body, dict) or not body.get("success"):
            detail = body.get("message") if isinstance(body, dict) else None
            raise OptimizationError(image_name, detail or f"HTTP {response.status_code}")

        return body
