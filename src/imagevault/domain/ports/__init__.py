"""Domain ports (interfaces) for dependency inversion."""

from imagevault.domain.ports.image_cache import (
    BlobProperties,
    IBlobStore,
    IImageDownloader,
    IImageOptimizer,
    IImageRecordStore,
    LookupStatus,
    OptimizeOptions,
    RecordLookup,
)

__all__ = [
    "BlobProperties",
    "IBlobStore",
    "IImageDownloader",
    "IImageOptimizer",
    "IImageRecordStore",
    "LookupStatus",
    "OptimizeOptions",
    "RecordLookup",
]
