"""Tests for domain entities and port helpers."""

import pytest

from imagevault.domain.entities import ArtifactKind, ImageRecord, StoredArtifact
from imagevault.domain.exceptions import DownloadError
from imagevault.domain.ports import IImageDownloader, LookupStatus, RecordLookup


def _record(**overrides: str) -> ImageRecord:
    fields = {
        "site_id": "blog",
        "source_url": "https://cdn.example.com/My Image!!.png",
        "raw_copy_location": "file:///blobs/blog/original/my.png",
        "optimized_copy_location": "file:///blobs/blog/aaopt/my.png",
        "image_name": "my.png",
    }
    fields.update(overrides)
    return ImageRecord(**fields)


class TestArtifactKind:
    """Tests for the reserved blob namespaces."""

    def test_prefixes_are_stable(self) -> None:
        assert ArtifactKind.ORIGINAL.value == "original/"
        assert ArtifactKind.OPTIMIZED.value == "aaopt/"

    def test_blob_name_keeps_path_segments(self) -> None:
        assert ArtifactKind.OPTIMIZED.blob_name("2024/05/a.png") == "aaopt/2024/05/a.png"

    def test_labels(self) -> None:
        assert ArtifactKind.ORIGINAL.label == "raw"
        assert ArtifactKind.OPTIMIZED.label == "optimized"


class TestImageRecord:
    """Tests for ImageRecord."""

    def test_image_key_is_normalized_source_url(self) -> None:
        assert _record().image_key == "httpscdn.example.comMy-Image.png"

    def test_records_are_immutable(self) -> None:
        record = _record()
        with pytest.raises(AttributeError):
            record.image_name = "other.png"  # type: ignore[misc]

    def test_equal_fields_mean_equal_records(self) -> None:
        assert _record() == _record()
        assert _record() != _record(image_name="other.png")

    def test_stored_artifact_size(self) -> None:
        assert StoredArtifact(location="file:///x", data=b"abc").size == 3


class TestRecordLookup:
    """Tests for the explicit lookup result."""

    def test_found(self) -> None:
        result = RecordLookup.found(_record())
        assert result.is_found
        assert result.status is LookupStatus.FOUND

    def test_absent_and_failed_are_not_found(self) -> None:
        error = RuntimeError("db down")
        failed = RecordLookup.failed(error)
        assert not RecordLookup.absent().is_found
        assert not failed.is_found
        assert failed.status is LookupStatus.ERROR
        assert failed.error is error


class _ScriptedDownloader(IImageDownloader):
    def __init__(self, result: bytes | Exception) -> None:
        self.result = result

    async def fetch(self, url: str) -> bytes:
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


class TestGetImageBytes:
    """Tests for the soft download variant."""

    async def test_returns_bytes(self) -> None:
        assert await _ScriptedDownloader(b"img").get_image_bytes("https://x/a.png") == b"img"

    async def test_download_error_becomes_none(self) -> None:
        downloader = _ScriptedDownloader(DownloadError("https://x/a.png", status_code=500))
        assert await downloader.get_image_bytes("https://x/a.png") is None

    async def test_other_errors_propagate(self) -> None:
        downloader = _ScriptedDownloader(RuntimeError("bug"))
        with pytest.raises(RuntimeError):
            await downloader.get_image_bytes("https://x/a.png")
