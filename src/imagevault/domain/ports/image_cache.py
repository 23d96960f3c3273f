"""Image Cache Ports (Interfaces).

Future me note:
These are the CONTRACTS the image manager talks to. Concrete implementations live in
infrastructure/ (SQLAlchemy record store, filesystem blob store, httpx downloader,
Kraken optimizer). The application layer only ever sees these interfaces, so tests can
swap any of them for a fake.

Collaborators:
- IImageRecordStore: keyed table, (site_id, image_key) -> ImageRecord, insert-only
- IBlobStore: per-site containers holding "original/" and "aaopt/" blobs
- IImageDownloader: GET a URL into memory, all-or-nothing
- IImageOptimizer: bytes in, optimized bytes out (blocks until the service is done)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from imagevault.domain.entities import ImageRecord
from imagevault.domain.exceptions import DownloadError

# === Result / Data Transfer Objects ===


class LookupStatus(Enum):
    """Outcome of a record lookup."""

    FOUND = "found"
    ABSENT = "absent"
    ERROR = "error"


@dataclass(frozen=True)
class RecordLookup:
    """Result of a record store lookup.

    Future me note:
    get_if_exists() collapses ABSENT and ERROR into None (that's the contract the
    orchestrator relies on). Use lookup() when you need to know whether the backend
    actually answered.
    """

    status: LookupStatus
    record: ImageRecord | None = None
    error: Exception | None = None

    @classmethod
    def found(cls, record: ImageRecord) -> RecordLookup:
        return cls(status=LookupStatus.FOUND, record=record)

    @classmethod
    def absent(cls) -> RecordLookup:
        return cls(status=LookupStatus.ABSENT)

    @classmethod
    def failed(cls, error: Exception) -> RecordLookup:
        return cls(status=LookupStatus.ERROR, error=error)

    @property
    def is_found(self) -> bool:
        return self.status is LookupStatus.FOUND


@dataclass(frozen=True)
class BlobProperties:
    """Existence check result for a blob."""

    location: str
    size: int

    @property
    def is_empty(self) -> bool:
        return self.size <= 0


@dataclass(frozen=True)
class OptimizeOptions:
    """Options sent along with an optimization request.

    lossy=True matches what every site has been optimized with so far.
    extra is merged verbatim into the request (resize, quality, webp, ...).
    """

    lossy: bool = True
    extra: dict[str, Any] = field(default_factory=dict)


# === Interfaces ===


class IImageRecordStore(ABC):
    """Keyed durable table of image records.

    Must be strongly consistent within a site: a get_if_exists() after a
    successful create_if_absent() in the same process sees the record.
    """

    @abstractmethod
    async def lookup(self, site_id: str, source_url: str) -> RecordLookup:
        """Look up a record, keeping misses and backend errors apart."""
        pass

    async def get_if_exists(self, site_id: str, source_url: str) -> ImageRecord | None:
        """Get a record, or None when it is missing OR the lookup failed."""
        result = await self.lookup(site_id, source_url)
        return result.record if result.is_found else None

    @abstractmethod
    async def create_if_absent(self, record: ImageRecord) -> ImageRecord:
        """Insert a new record.

        Raises:
            ConflictError: A record already exists for (site_id, image_key)
        """
        pass


class IBlobStore(ABC):
    """Blob storage organised as one container per site."""

    @abstractmethod
    async def ensure_container(self, site_id: str) -> None:
        """Create the site's container if it does not exist yet."""
        pass

    @abstractmethod
    async def container_exists(self, site_id: str) -> bool:
        pass

    @abstractmethod
    async def get_properties(self, site_id: str, blob_name: str) -> BlobProperties | None:
        """Return size and location, or None if the blob does not exist."""
        pass

    @abstractmethod
    async def read(self, site_id: str, blob_name: str) -> bytes:
        """Read a whole blob."""
        pass

    @abstractmethod
    async def write(self, site_id: str, blob_name: str, data: bytes) -> int:
        """Write a whole blob (replacing any previous content).

        Returns:
            Number of bytes persisted
        """
        pass

    @abstractmethod
    def location_of(self, site_id: str, blob_name: str) -> str:
        """Opaque URI of a blob, whether or not it exists yet."""
        pass


class IImageDownloader(ABC):
    """Fetches remote images fully into memory."""

    @abstractmethod
    async def fetch(self, url: str) -> bytes:
        """Download a URL.

        Raises:
            DownloadError: Transport failure or non-2xx status
        """
        pass

    async def get_image_bytes(self, url: str) -> bytes | None:
        """Soft variant of fetch(): None instead of DownloadError."""
        try:
            return await self.fetch(url)
        except DownloadError:
            return None


class IImageOptimizer(ABC):
    """External image optimization service."""

    @abstractmethod
    async def optimize(self, data: bytes, image_name: str) -> bytes:
        """Optimize image bytes.

        Raises:
            OptimizationError: The service reported a failure
            DownloadError: The optimized result could not be fetched
        """
        pass
