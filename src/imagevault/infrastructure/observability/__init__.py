"""Observability infrastructure for structured logging and metrics."""

from imagevault.infrastructure.observability.logger_template import (
    get_module_logger,
    log_cache_event,
    log_operation,
)
from imagevault.infrastructure.observability.logging import (
    configure_logging,
    get_correlation_id,
    set_correlation_id,
)
from imagevault.infrastructure.observability.metrics import (
    ImageCacheMetrics,
    get_image_cache_metrics,
    reset_image_cache_metrics,
)

__all__ = [
    "ImageCacheMetrics",
    "configure_logging",
    "get_correlation_id",
    "get_image_cache_metrics",
    "get_module_logger",
    "log_cache_event",
    "log_operation",
    "reset_image_cache_metrics",
    "set_correlation_id",
]
