"""Domain exceptions."""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    # Hey future me, message is stored as an attribute so handlers can read it without
    # parsing str(exception). Don't raise this directly - always pick a specific subclass
    # so callers can catch precisely.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class EntityNotFoundException(DomainException):
    """Raised when an entity is not found."""

    # Used where "not found" is exceptional (reading the optimized bytes of a record that
    # should have them). Plain cache misses return None instead.
    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(f"{entity_type} with id {entity_id} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class DuplicateEntityException(DomainException):
    """Raised when trying to create a duplicate entity."""

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(f"{entity_type} with id {entity_id} already exists")
        self.entity_type = entity_type
        self.entity_id = entity_id


class ConflictError(DuplicateEntityException):
    """An image record already exists for (site_id, image_key).

    Raised by the record store's insert-only write. The image manager
    recovers from it by re-reading the winning record; it only reaches
    callers of get_or_save() when that re-read comes back empty.
    """

    def __init__(self, site_id: str, image_key: str) -> None:
        super().__init__("ImageRecord", f"{site_id}/{image_key}")
        self.site_id = site_id
        self.image_key = image_key


class ValidationError(DomainException):
    """Input validation failed.

    Example:
        raise ValidationError("Blob name escapes its container: ../etc/passwd")
    """

    pass


class ConfigurationError(DomainException):
    """Application misconfiguration.

    Example:
        raise ConfigurationError("Kraken API credentials not configured")
    """

    pass


class ExternalServiceError(DomainException):
    """External service (image host, Kraken, ...) failed."""

    pass


class DownloadError(ExternalServiceError):
    """An HTTP download did not complete.

    Raised for any transport error or non-2xx status. For source images the
    raw copy cache turns this into a soft "absent" result; for the optimized
    result fetched after Kraken succeeds it is fatal.
    """

    def __init__(
        self,
        url: str,
        status_code: int | None = None,
        reason: str | None = None,
    ) -> None:
        detail = f"status {status_code}" if status_code is not None else reason or "error"
        super().__init__(f"Failed to download `{url}` ({detail})")
        self.url = url
        self.status_code = status_code
        self.reason = reason


class OptimizationError(ExternalServiceError):
    """The optimization service reported a failure.

    Carries the service's own error detail so it ends up in the logs.
    """

    def __init__(self, image_name: str, detail: str | None) -> None:
        super().__init__(
            f"Not able to optimize image `{image_name}`.  Error: `{detail}`."
        )
        self.image_name = image_name
        self.detail = detail


class StorageIntegrityError(DomainException):
    """A blob read or write moved a different number of bytes than expected.

    Always fatal: the call is aborted instead of returning partial data.
    """

    def __init__(self, location: str, expected: int, actual: int) -> None:
        super().__init__(
            f"Unexpected number of bytes for `{location}`: "
            f"expected {expected}, got {actual}"
        )
        self.location = location
        self.expected = expected
        self.actual = actual

    @classmethod
    def empty(cls, location: str) -> "StorageIntegrityError":
        """A stored artifact that should hold image bytes has none."""
        error = cls(location, expected=1, actual=0)
        error.message = f"Stored artifact `{location}` is empty"
        error.args = (error.message,)
        return error


__all__ = [
    # Base
    "DomainException",
    # Entity exceptions
    "EntityNotFoundException",
    "DuplicateEntityException",
    "ConflictError",
    # Validation / configuration
    "ValidationError",
    "ConfigurationError",
    # External service exceptions
    "ExternalServiceError",
    "DownloadError",
    "OptimizationError",
    # Storage
    "StorageIntegrityError",
]
