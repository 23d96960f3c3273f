"""Shared existence/read/write logic for the raw and optimized artifact caches."""

from __future__ import annotations

import logging

from imagevault.domain.entities import ArtifactKind
from imagevault.domain.exceptions import StorageIntegrityError
from imagevault.domain.ports import BlobProperties, IBlobStore
from imagevault.infrastructure.observability import (
    ImageCacheMetrics,
    get_image_cache_metrics,
    log_cache_event,
)

logger = logging.getLogger(__name__)


class ArtifactCache:
    """Base for caches that keep one artifact kind in the blob store.

    Future me note:
    Each cache only ever looks at its OWN namespace ("original/" or "aaopt/").
    Deciding whether the pipeline as a whole is complete is the image manager's job.
    """

    kind: ArtifactKind

    def __init__(self, blob_store: IBlobStore, metrics: ImageCacheMetrics | None = None) -> None:
        self.blob_store = blob_store
        self.metrics = metrics or get_image_cache_metrics()

    def blob_name(self, image_name: str) -> str:
        return self.kind.blob_name(image_name)

    # Hey future me, zero-length blobs are what a crashed or failed upload leaves behind, so
    # they count as MISSING. Storage errors during the check count as missing too: the worst
    # case is a redundant download/optimization, never a bad record.
    async def probe(self, site_id: str, image_name: str) -> BlobProperties | None:
        """Return the artifact's properties if it exists with content, else None."""
        blob_name = self.blob_name(image_name)
        try:
            properties = await self.blob_store.get_properties(site_id, blob_name)
        except OSError as e:
            logger.warning(
                "Existence check failed for `%s` blob `%s`; treating as missing: %s",
                site_id,
                blob_name,
                e,
            )
            properties = None

        if properties is not None and properties.is_empty:
            logger.warning(
                "%s copy of `%s` site image `%s` is zero bytes; ignoring.",
                self.kind.label.capitalize(),
                site_id,
                image_name,
            )
            properties = None

        hit = properties is not None
        self.metrics.inc_cache_lookup(self.kind.label, hit=hit)
        log_cache_event(
            logger,
            self.kind.label,
            hit=hit,
            size_bytes=properties.size if properties else None,
            site_id=site_id,
            image_name=image_name,
        )
        return properties

    async def read_verified(self, site_id: str, image_name: str, properties: BlobProperties) -> bytes:
        """Read an artifact and make sure every byte came back.

        Raises:
            StorageIntegrityError: The read returned a different byte count
        """
        data = await self.blob_store.read(site_id, self.blob_name(image_name))
        if len(data) != properties.size:
            raise StorageIntegrityError(properties.location, properties.size, len(data))
        return data

    async def write_verified(self, site_id: str, image_name: str, data: bytes) -> str:
        """Persist an artifact and return its location.

        Raises:
            StorageIntegrityError: The store persisted a different byte count
        """
        blob_name = self.blob_name(image_name)
        written = await self.blob_store.write(site_id, blob_name, data)
        location = self.blob_store.location_of(site_id, blob_name)
        if written != len(data):
            raise StorageIntegrityError(location, len(data), written)

        self.metrics.observe_artifact_size(self.kind.label, written)
        return location
