"""Tests for FileSystemBlobStore."""

from pathlib import Path

import pytest

from imagevault.domain.exceptions import ValidationError
from imagevault.infrastructure.storage import FileSystemBlobStore


class TestContainers:
    """Tests for per-site containers."""

    async def test_ensure_container_creates_directory(
        self, blob_store: FileSystemBlobStore, tmp_path: Path
    ) -> None:
        assert not await blob_store.container_exists("blog")
        await blob_store.ensure_container("blog")
        await blob_store.ensure_container("blog")
        assert await blob_store.container_exists("blog")
        assert (tmp_path / "blobs" / "blog").is_dir()

    @pytest.mark.parametrize("site_id", ["", ".", "..", "a/b", "a\\b", "a\x00b"])
    async def test_rejects_invalid_site_ids(
        self, blob_store: FileSystemBlobStore, site_id: str
    ) -> None:
        with pytest.raises(ValidationError):
            await blob_store.ensure_container(site_id)


class TestBlobs:
    """Tests for blob read/write/properties."""

    async def test_missing_blob_has_no_properties(self, blob_store: FileSystemBlobStore) -> None:
        assert await blob_store.get_properties("blog", "original/a.png") is None

    async def test_write_then_read(self, blob_store: FileSystemBlobStore) -> None:
        written = await blob_store.write("blog", "original/2024/a.png", b"abcdef")

        properties = await blob_store.get_properties("blog", "original/2024/a.png")
        assert written == 6
        assert properties is not None
        assert properties.size == 6
        assert properties.location == blob_store.location_of("blog", "original/2024/a.png")
        assert await blob_store.read("blog", "original/2024/a.png") == b"abcdef"

    async def test_write_replaces_content(self, blob_store: FileSystemBlobStore) -> None:
        await blob_store.write("blog", "aaopt/a.png", b"")
        await blob_store.write("blog", "aaopt/a.png", b"new")
        assert await blob_store.read("blog", "aaopt/a.png") == b"new"

    async def test_zero_length_blob_reports_empty(self, blob_store: FileSystemBlobStore) -> None:
        await blob_store.write("blog", "aaopt/a.png", b"")
        properties = await blob_store.get_properties("blog", "aaopt/a.png")
        assert properties is not None
        assert properties.is_empty

    async def test_directory_is_not_a_blob(self, blob_store: FileSystemBlobStore) -> None:
        await blob_store.write("blog", "original/dir/a.png", b"x")
        assert await blob_store.get_properties("blog", "original/dir") is None

    async def test_write_leaves_no_temp_files(
        self, blob_store: FileSystemBlobStore, tmp_path: Path
    ) -> None:
        await blob_store.write("blog", "original/a.png", b"x")
        files = sorted(p.name for p in (tmp_path / "blobs" / "blog" / "original").iterdir())
        assert files == ["a.png"]

    def test_location_is_file_uri(self, blob_store: FileSystemBlobStore) -> None:
        location = blob_store.location_of("blog", "aaopt/a.png")
        assert location.startswith("file://")
        assert location.endswith("/blog/aaopt/a.png")

    @pytest.mark.parametrize("blob_name", ["", "../other/a.png", "original/../../x", "/etc/passwd"])
    async def test_rejects_escaping_blob_names(
        self, blob_store: FileSystemBlobStore, blob_name: str
    ) -> None:
        with pytest.raises(ValidationError):
            await blob_store.write("blog", blob_name, b"x")
