"""Domain value objects."""

from imagevault.domain.value_objects.image_key import normalize_image_key

__all__ = ["normalize_image_key"]
