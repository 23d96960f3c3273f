"""Image caching services: raw copy cache, optimized copy cache and the image manager."""

from imagevault.application.services.images.image_manager import ImageManager
from imagevault.application.services.images.optimized_copy_cache import OptimizedCopyCache
from imagevault.application.services.images.raw_copy_cache import RawCopyCache

__all__ = ["ImageManager", "OptimizedCopyCache", "RawCopyCache"]
