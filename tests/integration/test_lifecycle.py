"""Tests for image_manager_scope()."""

import pytest

from imagevault.application.services.images import ImageManager
from imagevault.config import KrakenSettings, Settings
from imagevault.domain.exceptions import ConfigurationError
from imagevault.infrastructure.integrations import HttpClientPool, KrakenOptimizer
from imagevault.infrastructure.lifecycle import image_manager_scope


class TestImageManagerScope:
    """Tests for the wiring factory."""

    async def test_yields_wired_manager_and_cleans_up(self, settings: Settings) -> None:
        async with image_manager_scope(settings) as manager:
            assert isinstance(manager, ImageManager)
            assert isinstance(manager.optimizer, KrakenOptimizer)
            assert HttpClientPool.is_initialized()
            # Schema exists: a lookup answers instead of failing
            lookup = await manager.record_store.lookup("blog", "https://x/a.png")
            assert not lookup.is_found
            assert lookup.error is None

        assert not HttpClientPool.is_initialized()
        assert settings.storage.root_path.is_dir()

    async def test_missing_kraken_credentials(self, settings: Settings) -> None:
        settings.kraken = KrakenSettings()

        with pytest.raises(ConfigurationError):
            async with image_manager_scope(settings):
                pass

        assert not HttpClientPool.is_initialized()
