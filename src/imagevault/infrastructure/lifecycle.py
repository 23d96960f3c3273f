"""Startup and shutdown for an ImageManager wired to real infrastructure.

    async with image_manager_scope() as manager:
        record = await manager.get_or_save("blog", url, "2024/header.png")
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from imagevault.application.services.images import ImageManager
from imagevault.config import Settings, get_settings
from imagevault.domain.exceptions import ConfigurationError
from imagevault.infrastructure.integrations import (
    HttpClientPool,
    HttpImageDownloader,
    KrakenOptimizer,
)
from imagevault.infrastructure.observability import configure_logging
from imagevault.infrastructure.persistence import Database, ImageRecordRepository
from imagevault.infrastructure.storage import FileSystemBlobStore

logger = logging.getLogger(__name__)


# Hey future me, this runs BEFORE the engine exists. SQLite needs to create -journal/-wal files
# next to the .db file, so the directory must exist AND be writable. We don't create the .db
# file itself - SQLite initializes it on first connect. Non-SQLite URLs return early.
def _validate_sqlite_path(settings: Settings) -> None:
    """Make sure the SQLite database directory exists and is writable."""
    db_path = settings._get_sqlite_db_path()
    if db_path is None:
        return

    try:
        db_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigurationError(
            f"Unable to create SQLite database directory '{db_path.parent}': {exc}. "
            "Update IMAGEVAULT_DATABASE__URL or adjust directory permissions."
        ) from exc

    test_file = db_path.parent / f".{db_path.stem}_write_test"
    try:
        test_file.write_bytes(b"test")
        test_file.unlink()
    except OSError as exc:
        raise ConfigurationError(
            f"SQLite database directory '{db_path.parent}' is not writable: {exc}"
        ) from exc
    logger.debug("Verified SQLite directory: %s", db_path.parent)


@asynccontextmanager
async def image_manager_scope(
    settings: Settings | None = None,
) -> AsyncGenerator[ImageManager, None]:
    """Build an ImageManager from settings and tear everything down on exit.

    Raises:
        ConfigurationError: SQLite path unusable or Kraken credentials missing
    """
    settings = settings or get_settings()
    configure_logging(
        settings.log_level,
        json_format=settings.observability.log_json_format,
        app_name=settings.app_name,
    )
    settings.ensure_directories()
    _validate_sqlite_path(settings)

    database = Database(settings)
    try:
        client = await HttpClientPool.get_client(
            timeout=settings.http.timeout,
            max_keepalive=settings.http.max_keepalive,
            max_connections=settings.http.max_connections,
        )
        repository = ImageRecordRepository(database)
        await repository.create_schema()

        downloader = HttpImageDownloader(client)
        manager = ImageManager(
            record_store=repository,
            blob_store=FileSystemBlobStore(settings.storage.root_path),
            downloader=downloader,
            optimizer=KrakenOptimizer(settings.kraken, downloader, client=client),
        )
        logger.info(
            "Image manager ready (storage=%s)",
            settings.storage.root_path,
        )
        yield manager
    finally:
        await database.close()
        await HttpClientPool.close()
        logger.info("Image manager shut down")
