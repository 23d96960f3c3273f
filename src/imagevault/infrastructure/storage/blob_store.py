"""Filesystem-backed blob store.

Layout:
    {root}/{site_id}/original/{image_name}   raw copy of the source image
    {root}/{site_id}/aaopt/{image_name}      optimized copy

Each site is a "container" (one directory). Blob names may contain "/" - they map to
sub-directories - but they can never point outside their container.

Disk I/O runs in a worker thread (asyncio.to_thread) so the event loop is never blocked
by a slow disk.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import stat
import tempfile
from pathlib import Path

from imagevault.domain.exceptions import ValidationError
from imagevault.domain.ports import BlobProperties, IBlobStore

logger = logging.getLogger(__name__)


class FileSystemBlobStore(IBlobStore):
    """Blob store keeping one directory per site under a root path."""

    def __init__(self, root_path: str | Path) -> None:
        self.root_path = Path(root_path).resolve()

    # === Path helpers ===

    def _container_path(self, site_id: str) -> Path:
        if (
            not site_id
            or site_id in (".", "..")
            or "/" in site_id
            or "\\" in site_id
            or "\x00" in site_id
        ):
            raise ValidationError(f"Invalid site id: {site_id!r}")
        return self.root_path / site_id

    def _blob_path(self, site_id: str, blob_name: str) -> Path:
        container = self._container_path(site_id)
        if not blob_name or "\x00" in blob_name or Path(blob_name).is_absolute():
            raise ValidationError(f"Invalid blob name: {blob_name!r}")

        path = (container / blob_name).resolve()
        if path == container or not path.is_relative_to(container):
            raise ValidationError(f"Blob name escapes its container: {blob_name!r}")
        return path

    def location_of(self, site_id: str, blob_name: str) -> str:
        return self._blob_path(site_id, blob_name).as_uri()

    # === Containers ===

    async def ensure_container(self, site_id: str) -> None:
        container = self._container_path(site_id)
        await asyncio.to_thread(container.mkdir, parents=True, exist_ok=True)

    async def container_exists(self, site_id: str) -> bool:
        return await asyncio.to_thread(self._container_path(site_id).is_dir)

    # === Blobs ===

    async def get_properties(self, site_id: str, blob_name: str) -> BlobProperties | None:
        path = self._blob_path(site_id, blob_name)
        try:
            st = await asyncio.to_thread(path.stat)
        except FileNotFoundError:
            return None

        # A directory named like the blob (e.g. "a" when "a/b.png" exists) is not a blob
        if not stat.S_ISREG(st.st_mode):
            return None
        return BlobProperties(location=path.as_uri(), size=st.st_size)

    async def read(self, site_id: str, blob_name: str) -> bytes:
        path = self._blob_path(site_id, blob_name)
        return await asyncio.to_thread(path.read_bytes)

    async def write(self, site_id: str, blob_name: str, data: bytes) -> int:
        path = self._blob_path(site_id, blob_name)
        size = await asyncio.to_thread(self._write_atomic, path, data)
        logger.debug("Wrote blob %s (%d bytes)", path, size)
        return size

    @staticmethod
    def _write_atomic(path: Path, data: bytes) -> int:
        """Write via a temp file + rename so readers never see a half-written blob."""
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(data)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp_name)
            raise
        return path.stat().st_size

