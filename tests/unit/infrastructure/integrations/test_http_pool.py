"""Tests for the shared HTTP client pool."""

from collections.abc import AsyncIterator

import pytest

from imagevault.infrastructure.integrations import HttpClientPool


@pytest.fixture
async def pool() -> AsyncIterator[type[HttpClientPool]]:
    await HttpClientPool.close()
    yield HttpClientPool
    await HttpClientPool.close()


class TestHttpClientPool:
    """Tests for HttpClientPool."""

    async def test_returns_same_client(self, pool: type[HttpClientPool]) -> None:
        first = await pool.get_client(timeout=5.0)
        second = await pool.get_client(timeout=99.0)

        assert first is second
        assert pool.is_initialized()

    async def test_close_resets(self, pool: type[HttpClientPool]) -> None:
        client = await pool.get_client()
        await pool.close()

        assert not pool.is_initialized()
        assert client.is_closed
