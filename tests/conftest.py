"""Shared fixtures: temp SQLite record store, temp blob store, fake HTTP source and optimizer."""

from collections import Counter
from collections.abc import AsyncIterator
from pathlib import Path

import httpx
import pytest

from imagevault.config import DatabaseSettings, KrakenSettings, Settings, StorageSettings
from imagevault.domain.exceptions import OptimizationError
from imagevault.domain.ports import IImageOptimizer
from imagevault.infrastructure.integrations import HttpImageDownloader
from imagevault.infrastructure.observability import ImageCacheMetrics
from imagevault.infrastructure.persistence import Database, ImageRecordRepository
from imagevault.infrastructure.storage import FileSystemBlobStore

SOURCE_URL = "https://cdn.example.com/images/header.png"
SOURCE_BYTES = b"\x89PNG raw header bytes"


class FakeImageSource:
    """In-memory image host behind httpx.MockTransport.

    Responses are queued per URL; the last queued response repeats. Unknown URLs get 404.
    """

    def __init__(self) -> None:
        self._responses: dict[str, list[tuple[int, bytes]]] = {}
        self.calls: Counter[str] = Counter()

    def serve(self, url: str, content: bytes, status_code: int = 200) -> None:
        self._responses.setdefault(url, []).append((status_code, content))

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.calls[url] += 1
        queued = self._responses.get(url)
        if not queued:
            return httpx.Response(404, content=b"not found")
        status_code, content = queued[0] if len(queued) == 1 else queued.pop(0)
        return httpx.Response(status_code, content=content)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


class FakeOptimizer(IImageOptimizer):
    """Optimizer double that counts calls and prefixes the bytes."""

    def __init__(self, fail_with: Exception | None = None, result: bytes | None = None) -> None:
        self.calls: list[str] = []
        self.fail_with = fail_with
        self.result = result

    async def optimize(self, data: bytes, image_name: str) -> bytes:
        self.calls.append(image_name)
        if self.fail_with is not None:
            raise self.fail_with
        if self.result is not None:
            return self.result
        return b"optimized:" + data


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        database=DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path / 'records.db'}"),
        storage=StorageSettings(root_path=tmp_path / "blobs"),
        kraken=KrakenSettings(api_key="test-key", api_secret="test-secret"),
    )


@pytest.fixture
async def database(settings: Settings) -> AsyncIterator[Database]:
    db = Database(settings)
    await db.create_tables()
    yield db
    await db.close()


@pytest.fixture
def repository(database: Database) -> ImageRecordRepository:
    return ImageRecordRepository(database)


@pytest.fixture
def blob_store(tmp_path: Path) -> FileSystemBlobStore:
    return FileSystemBlobStore(tmp_path / "blobs")


@pytest.fixture
def metrics() -> ImageCacheMetrics:
    return ImageCacheMetrics()


@pytest.fixture
def image_source() -> FakeImageSource:
    source = FakeImageSource()
    source.serve(SOURCE_URL, SOURCE_BYTES)
    return source


@pytest.fixture
async def downloader(image_source: FakeImageSource) -> AsyncIterator[HttpImageDownloader]:
    client = image_source.client()
    yield HttpImageDownloader(client)
    await client.aclose()


@pytest.fixture
def optimizer() -> FakeOptimizer:
    return FakeOptimizer()


@pytest.fixture
def failing_optimizer() -> FakeOptimizer:
    return FakeOptimizer(fail_with=OptimizationError("header.png", "Kraken is down"))


@pytest.fixture
def source_url() -> str:
    return SOURCE_URL


@pytest.fixture
def source_bytes() -> bytes:
    return SOURCE_BYTES


@pytest.fixture
def make_optimizer() -> type[FakeOptimizer]:
    """FakeOptimizer class, for tests that need a custom result or failure."""
    return FakeOptimizer
