"""Domain entities."""

from dataclasses import dataclass
from enum import Enum

from imagevault.domain.value_objects import normalize_image_key


# Hey future me, these prefixes are part of the on-disk/on-blob layout! Existing sites
# already have "original/..." and "aaopt/..." blobs, so renaming them loses every cached
# artifact. The "aa" keeps optimized copies sorted first in storage browsers.
class ArtifactKind(str, Enum):
    """Reserved blob namespaces inside a site container."""

    ORIGINAL = "original/"
    OPTIMIZED = "aaopt/"

    def blob_name(self, image_name: str) -> str:
        """Blob name for an image inside this namespace."""
        return f"{self.value}{image_name}"

    @property
    def label(self) -> str:
        """Short name used in logs and metric labels."""
        return "raw" if self is ArtifactKind.ORIGINAL else "optimized"


@dataclass(frozen=True)
class ImageRecord:
    """Metadata tying a source URL to its raw and optimized copies.

    Identity is (site_id, image_key). Written once, after both artifacts
    exist; never mutated afterwards. This is a plain value type - the
    persistence layer maps it to its own row shape.
    """

    site_id: str
    source_url: str
    raw_copy_location: str
    optimized_copy_location: str
    image_name: str

    @property
    def image_key(self) -> str:
        """Row key derived from the source URL."""
        return normalize_image_key(self.source_url)


@dataclass(frozen=True)
class StoredArtifact:
    """Bytes of an artifact together with where they live."""

    location: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


__all__ = ["ArtifactKind", "ImageRecord", "StoredArtifact"]
