"""Repository implementations for domain entities."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from imagevault.domain.entities import ImageRecord
from imagevault.domain.exceptions import ConflictError
from imagevault.domain.ports import IImageRecordStore, RecordLookup
from imagevault.domain.value_objects import normalize_image_key

from .database import Database
from .models import ImageRecordModel, from_model, to_model

logger = logging.getLogger(__name__)


class ImageRecordRepository(IImageRecordStore):
    """SQLAlchemy implementation of the image record store."""

    # Hey future me, unlike a request-scoped repository this one owns its transactions: every
    # call runs in its own session_scope() and is committed before returning. The record is
    # the LAST thing get_or_save() writes, and a racing caller must see it on the very next
    # lookup - a staged-but-uncommitted insert would break that.
    def __init__(self, database: Database) -> None:
        """Initialize repository with the database."""
        self.database = database

    async def create_schema(self) -> None:
        """Create the records table if it does not exist."""
        await self.database.create_tables()

    async def lookup(self, site_id: str, source_url: str) -> RecordLookup:
        """Point lookup by (site_id, normalized source URL).

        Backend errors are returned as RecordLookup.failed(), never raised.
        """
        image_key = normalize_image_key(source_url)
        try:
            async with self.database.session_scope() as session:
                model = await session.get(ImageRecordModel, (site_id, image_key))
                if model is None:
                    return RecordLookup.absent()
                return RecordLookup.found(from_model(model))
        except Exception as e:
            logger.warning(
                "Image record lookup failed for `%s` site image `%s`: %s",
                site_id,
                source_url,
                e,
                exc_info=True,
            )
            return RecordLookup.failed(e)

    # Yo, insert-only! session.add() + flush() emits a plain INSERT; a second row for the same
    # (site_id, image_key) violates the primary key and comes back as IntegrityError, which we
    # translate to the domain's ConflictError. Never turn this into a merge()/upsert - records
    # are write-once.
    async def create_if_absent(self, record: ImageRecord) -> ImageRecord:
        """Insert a new image record.

        Raises:
            ConflictError: A record already exists for (site_id, image_key)
        """
        try:
            async with self.database.session_scope() as session:
                session.add(to_model(record))
                await session.flush()
        except IntegrityError as e:
            raise ConflictError(record.site_id, record.image_key) from e

        return record
