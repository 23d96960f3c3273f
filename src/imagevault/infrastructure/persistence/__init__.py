"""Persistence layer: database session management and the image record store."""

from .database import Database
from .models import Base, ImageRecordModel, from_model, to_model
from .repositories import ImageRecordRepository

__all__ = [
    "Base",
    "Database",
    "ImageRecordModel",
    "ImageRecordRepository",
    "from_model",
    "to_model",
]
