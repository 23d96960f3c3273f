"""Blob storage for raw and optimized image artifacts."""

from .blob_store import FileSystemBlobStore

__all__ = ["FileSystemBlobStore"]
