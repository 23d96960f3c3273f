"""Optimized copy cache: optimizer output kept under "aaopt/"."""

from __future__ import annotations

import logging

from imagevault.application.services.images.artifact_cache import ArtifactCache
from imagevault.domain.entities import ArtifactKind
from imagevault.domain.exceptions import (
    EntityNotFoundException,
    OptimizationError,
    StorageIntegrityError,
)
from imagevault.domain.ports import IImageOptimizer

logger = logging.getLogger(__name__)


class OptimizedCopyCache(ArtifactCache):
    """Get-or-create for the optimized copy of an image."""

    kind = ArtifactKind.OPTIMIZED

    # Hey future me, THIS is the cost-avoidance point - every optimizer call is billed and
    # rate-limited. Two concurrent callers can both miss and both optimize; that's accepted,
    # they write equivalent bytes and the last writer wins.
    async def get_or_create(
        self,
        site_id: str,
        image_name: str,
        raw_bytes: bytes,
        optimizer: IImageOptimizer,
    ) -> str:
        """Return the optimized copy's location, optimizing raw_bytes if needed.

        Raises:
            OptimizationError: The optimizer failed or returned no bytes
            DownloadError: The optimizer could not fetch its result
            StorageIntegrityError: The blob store persisted the wrong byte count
        """
        properties = await self.probe(site_id, image_name)
        if properties is not None:
            return properties.location

        try:
            optimized = await optimizer.optimize(raw_bytes, image_name)
        except Exception:
            self.metrics.inc_optimizations(success=False)
            raise

        if not optimized:
            self.metrics.inc_optimizations(success=False)
            raise OptimizationError(image_name, "Optimizer returned no bytes")

        self.metrics.inc_optimizations(success=True)
        location = await self.write_verified(site_id, image_name, optimized)
        logger.info(
            "Saved optimized bytes for `%s` site image `%s`",
            site_id,
            image_name,
            extra={
                "site_id": site_id,
                "image_name": image_name,
                "original_size": len(raw_bytes),
                "optimized_size": len(optimized),
            },
        )
        return location

    async def read_optimized(self, site_id: str, image_name: str) -> bytes:
        """Read the optimized copy of an image.

        Raises:
            EntityNotFoundException: No container for the site, or no optimized blob
            StorageIntegrityError: The blob is empty or the read came back short
        """
        if not await self.blob_store.container_exists(site_id):
            raise EntityNotFoundException("Site images", site_id)

        blob_name = self.blob_name(image_name)
        properties = await self.blob_store.get_properties(site_id, blob_name)
        if properties is None:
            raise EntityNotFoundException("Optimized image", f"{site_id}/{blob_name}")
        if properties.is_empty:
            raise StorageIntegrityError.empty(properties.location)

        return await self.read_verified(site_id, image_name, properties)
