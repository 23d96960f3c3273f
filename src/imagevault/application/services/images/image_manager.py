"""Image manager - idempotent get-or-create for (site, source URL) -> optimized image.

Hey future me - this is the ONE place that ties the three tiers together:

    record store  ->  raw copy ("original/")  ->  optimized copy ("aaopt/")  ->  record

Ordering rule: the record is written LAST. A record you can read therefore always points at
two non-empty artifacts. Everything before the record write is check-before-write, so a crash
anywhere (or two callers racing) only costs redundant work, never a broken record.

There are NO locks here: concurrent callers for the same key may both
download and both optimize. The insert-only record write picks one winner; the loser gets a
ConflictError and re-reads the winner's row.
"""

from __future__ import annotations

from imagevault.application.services.images.optimized_copy_cache import OptimizedCopyCache
from imagevault.application.services.images.raw_copy_cache import RawCopyCache
from imagevault.domain.entities import ImageRecord
from imagevault.domain.exceptions import ConflictError
from imagevault.domain.ports import (
    IBlobStore,
    IImageDownloader,
    IImageOptimizer,
    IImageRecordStore,
)
from imagevault.infrastructure.observability import (
    ImageCacheMetrics,
    get_image_cache_metrics,
    get_module_logger,
    log_cache_event,
    log_operation,
)

logger = get_module_logger(__name__)


class ImageManager:
    """Get-or-create orchestration over the record store and the two artifact caches."""

    def __init__(
        self,
        record_store: IImageRecordStore,
        blob_store: IBlobStore,
        downloader: IImageDownloader,
        optimizer: IImageOptimizer,
        metrics: ImageCacheMetrics | None = None,
    ) -> None:
        self.record_store = record_store
        self.blob_store = blob_store
        self.optimizer = optimizer
        self.metrics = metrics or get_image_cache_metrics()
        self.raw_cache = RawCopyCache(blob_store, downloader, self.metrics)
        self.optimized_cache = OptimizedCopyCache(blob_store, self.metrics)

    async def get_if_exists(self, site_id: str, source_url: str) -> ImageRecord | None:
        """Return the stored record for a source URL, or None.

        None also covers record store failures (logged by the store).
        """
        return await self.record_store.get_if_exists(site_id, source_url)

    async def get_or_save(
        self, site_id: str, source_url: str, image_name: str
    ) -> ImageRecord | None:
        """Return the record for (site_id, source_url), creating everything it needs.

        Args:
            site_id: Tenant; also the blob container name
            source_url: Where the raw image is downloaded from
            image_name: Logical name of the artifacts (may contain "/")

        Returns:
            The (possibly pre-existing) record, or None when the source image
            could not be downloaded. Nothing is written in that case.

        Raises:
            OptimizationError: The optimizer failed
            DownloadError: The optimized result could not be fetched
            StorageIntegrityError: A blob read/write moved the wrong byte count
            ConflictError: Lost the record race but the winner's row is not readable
        """
        context = {"site_id": site_id, "image_name": image_name}

        async with log_operation(logger, "image_pipeline.record_lookup", **context) as op:
            existing = await self.record_store.get_if_exists(site_id, source_url)
            op["outcome"] = "hit" if existing else "miss"
        self.metrics.inc_cache_lookup("record", hit=existing is not None)
        log_cache_event(logger, "record", hit=existing is not None, **context)
        if existing is not None:
            return existing

        async with log_operation(logger, "image_pipeline.raw_acquire", **context) as op:
            await self.blob_store.ensure_container(site_id)
            raw = await self.raw_cache.get_or_fetch(site_id, source_url, image_name)
            op["outcome"] = "acquired" if raw else "unavailable"
            if raw is not None:
                op["size_bytes"] = raw.size
        if raw is None:
            return None

        # Always re-check the optimized copy on its own: a previous run may have crashed
        # between writing it and writing the record.
        async with log_operation(logger, "image_pipeline.optimize_acquire", **context):
            optimized_location = await self.optimized_cache.get_or_create(
                site_id, image_name, raw.data, self.optimizer
            )

        record = ImageRecord(
            site_id=site_id,
            source_url=source_url,
            raw_copy_location=raw.location,
            optimized_copy_location=optimized_location,
            image_name=image_name,
        )
        async with log_operation(logger, "image_pipeline.record_persist", **context) as op:
            try:
                saved = await self.record_store.create_if_absent(record)
                op["outcome"] = "created"
            except ConflictError:
                self.metrics.inc_record_conflicts()
                winner = await self.record_store.get_if_exists(site_id, source_url)
                if winner is None:
                    raise
                op["outcome"] = "conflict_reread"
                saved = winner

        return saved

    async def get_optimized_bytes(self, record: ImageRecord) -> bytes:
        """Read the optimized image bytes a record points at.

        Raises:
            EntityNotFoundException: Site container or optimized artifact missing
            StorageIntegrityError: Artifact empty or read came back short
        """
        return await self.optimized_cache.read_optimized(record.site_id, record.image_name)
