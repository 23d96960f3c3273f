"""Raw copy cache: unmodified source image bytes kept under "original/"."""

from __future__ import annotations

import logging

from imagevault.application.services.images.artifact_cache import ArtifactCache
from imagevault.domain.entities import ArtifactKind, StoredArtifact
from imagevault.domain.ports import IBlobStore, IImageDownloader
from imagevault.infrastructure.observability import ImageCacheMetrics

logger = logging.getLogger(__name__)


class RawCopyCache(ArtifactCache):
    """Get-or-fetch for the raw copy of a source image."""

    kind = ArtifactKind.ORIGINAL

    def __init__(
        self,
        blob_store: IBlobStore,
        downloader: IImageDownloader,
        metrics: ImageCacheMetrics | None = None,
    ) -> None:
        super().__init__(blob_store, metrics)
        self.downloader = downloader

    async def get_or_fetch(
        self, site_id: str, source_url: str, image_name: str
    ) -> StoredArtifact | None:
        """Return the raw copy, downloading it from the source if needed.

        Flow:
        1. Non-empty "original/{image_name}" blob exists -> read it, no network
        2. Otherwise download source_url (fully buffered)
        3. Download failed or came back empty -> None, nothing written
        4. Persist the bytes (overwriting an empty leftover) and return them

        Returns:
            StoredArtifact, or None when the source could not be downloaded

        Raises:
            StorageIntegrityError: A blob read/write moved the wrong byte count
        """
        properties = await self.probe(site_id, image_name)
        if properties is not None:
            data = await self.read_verified(site_id, image_name, properties)
            return StoredArtifact(location=properties.location, data=data)

        logger.info(
            "Downloading copy of `%s` site image `%s`",
            site_id,
            source_url,
            extra={"site_id": site_id, "source_url": source_url},
        )
        data = await self.downloader.get_image_bytes(source_url)
        if not data:
            self.metrics.inc_downloads(success=False)
            logger.warning(
                "Failed to download copy of `%s` site image `%s`",
                site_id,
                source_url,
                extra={"site_id": site_id, "source_url": source_url},
            )
            return None

        self.metrics.inc_downloads(success=True)
        location = await self.write_verified(site_id, image_name, data)
        logger.info(
            "Copied bytes of `%s` site image `%s`",
            site_id,
            source_url,
            extra={"site_id": site_id, "source_url": source_url, "size_bytes": len(data)},
        )
        return StoredArtifact(location=location, data=data)
