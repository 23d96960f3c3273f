"""SQLAlchemy ORM models for ImageVault."""

from datetime import UTC, datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from imagevault.domain.entities import ImageRecord


def utc_now() -> datetime:
    """Get current UTC time."""
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# Hey future me, (site_id, image_key) is the PRIMARY KEY on purpose - the insert-only
# create_if_absent() relies on the database rejecting the second row with an IntegrityError.
# Don't swap it for a surrogate id + non-unique index or concurrent get_or_save() calls
# will happily write duplicate records. image_key is normalize_image_key(source_url),
# so it can be "" - that's a valid key, not a missing one.
class ImageRecordModel(Base):
    """Row linking a source image URL to its raw and optimized copies."""

    __tablename__ = "image_records"

    site_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    image_key: Mapped[str] = mapped_column(Text, primary_key=True)
    source_url: Mapped[str] = mapped_column(Text, nullable=False)
    raw_copy_location: Mapped[str] = mapped_column(Text, nullable=False)
    optimized_copy_location: Mapped[str] = mapped_column(Text, nullable=False)
    image_name: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )


def to_model(record: ImageRecord) -> ImageRecordModel:
    """Map the domain value type to its table row."""
    return ImageRecordModel(
        site_id=record.site_id,
        image_key=record.image_key,
        source_url=record.source_url,
        raw_copy_location=record.raw_copy_location,
        optimized_copy_location=record.optimized_copy_location,
        image_name=record.image_name,
    )


def from_model(model: ImageRecordModel) -> ImageRecord:
    """Map a table row back to the domain value type."""
    return ImageRecord(
        site_id=model.site_id,
        source_url=model.source_url,
        raw_copy_location=model.raw_copy_location,
        optimized_copy_location=model.optimized_copy_location,
        image_name=model.image_name,
    )
