"""Tests for the SQLAlchemy image record store.

Runs against a temporary SQLite file through aiosqlite.
"""

import pytest
from sqlalchemy import Text
from sqlalchemy.exc import OperationalError

from imagevault.domain.entities import ImageRecord
from imagevault.domain.exceptions import ConflictError
from imagevault.domain.ports import LookupStatus
from imagevault.infrastructure.persistence import (
    Database,
    ImageRecordModel,
    ImageRecordRepository,
    from_model,
    to_model,
)


@pytest.fixture
def record() -> ImageRecord:
    return ImageRecord(
        site_id="blog",
        source_url="https://cdn.example.com/My Image!!.png",
        raw_copy_location="file:///blobs/blog/original/my.png",
        optimized_copy_location="file:///blobs/blog/aaopt/my.png",
        image_name="my.png",
    )


class TestModelMapping:
    """Tests for to_model()/from_model()."""

    def test_round_trip_keeps_all_fields(self, record: ImageRecord) -> None:
        model = to_model(record)
        assert isinstance(model, ImageRecordModel)
        assert model.image_key == record.image_key
        assert from_model(model) == record

    def test_image_key_column_is_unbounded(self) -> None:
        assert isinstance(ImageRecordModel.__table__.c.image_key.type, Text)


class TestImageRecordRepository:
    """Tests for ImageRecordRepository."""

    async def test_lookup_absent(self, repository: ImageRecordRepository) -> None:
        result = await repository.lookup("blog", "https://cdn.example.com/none.png")
        assert result.status is LookupStatus.ABSENT
        assert await repository.get_if_exists("blog", "https://cdn.example.com/none.png") is None

    async def test_create_then_get(
        self, repository: ImageRecordRepository, record: ImageRecord
    ) -> None:
        created = await repository.create_if_absent(record)

        assert created == record
        assert await repository.get_if_exists("blog", record.source_url) == record

    async def test_lookup_uses_normalized_key(
        self, repository: ImageRecordRepository, record: ImageRecord
    ) -> None:
        await repository.create_if_absent(record)
        # Same key after normalization
        found = await repository.get_if_exists("blog", "https://cdn.example.com/My  Image.png")
        assert found == record

    async def test_records_are_partitioned_by_site(
        self, repository: ImageRecordRepository, record: ImageRecord
    ) -> None:
        await repository.create_if_absent(record)
        assert await repository.get_if_exists("shop", record.source_url) is None

    async def test_second_insert_raises_conflict(
        self, repository: ImageRecordRepository, record: ImageRecord
    ) -> None:
        await repository.create_if_absent(record)

        with pytest.raises(ConflictError) as exc_info:
            await repository.create_if_absent(record)

        assert exc_info.value.site_id == "blog"
        assert exc_info.value.image_key == record.image_key

    async def test_conflict_never_overwrites(
        self, repository: ImageRecordRepository, record: ImageRecord
    ) -> None:
        await repository.create_if_absent(record)
        other = ImageRecord(
            site_id=record.site_id,
            source_url=record.source_url,
            raw_copy_location="file:///elsewhere/raw",
            optimized_copy_location="file:///elsewhere/opt",
            image_name="elsewhere.png",
        )

        with pytest.raises(ConflictError):
            await repository.create_if_absent(other)

        assert await repository.get_if_exists("blog", record.source_url) == record

    async def test_backend_error_is_reported_by_lookup(
        self, database: Database, record: ImageRecord
    ) -> None:
        repository = ImageRecordRepository(database)
        await database.drop_tables()

        result = await repository.lookup("blog", record.source_url)

        assert result.status is LookupStatus.ERROR
        assert isinstance(result.error, OperationalError)
        # get_if_exists() folds the error into "absent"
        assert await repository.get_if_exists("blog", record.source_url) is None

    async def test_create_schema_is_idempotent(self, repository: ImageRecordRepository) -> None:
        await repository.create_schema()
        await repository.create_schema()

    async def test_very_long_source_url(self, repository: ImageRecordRepository) -> None:
        long_url = "https://cdn.example.com/" + "a" * 5000 + ".png"
        record = ImageRecord(
            site_id="blog",
            source_url=long_url,
            raw_copy_location="file:///blobs/blog/original/long.png",
            optimized_copy_location="file:///blobs/blog/aaopt/long.png",
            image_name="long.png",
        )

        await repository.create_if_absent(record)

        assert len(record.image_key) > 5000
        assert await repository.get_if_exists("blog", long_url) == record
