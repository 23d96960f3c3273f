"""External service integrations: HTTP downloads and the Kraken optimizer."""

from .http_pool import HttpClientPool
from .image_downloader import HttpImageDownloader
from .kraken_optimizer import KrakenOptimizer

__all__ = ["HttpClientPool", "HttpImageDownloader", "KrakenOptimizer"]
