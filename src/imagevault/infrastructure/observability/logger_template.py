"""Shared logger utilities and templates.

Use these helpers instead of hand-written "Checking for ... site image ..." messages so every
pipeline stage logs the same event names and fields.

USAGE:
    from imagevault.infrastructure.observability.logger_template import (
        get_module_logger,
        log_cache_event,
        log_operation,
    )

    logger = get_module_logger(__name__)

    async with log_operation(logger, "image_pipeline.raw_acquire", site_id="blog"):
        ...

    log_cache_event(logger, "raw", hit=True, site_id="blog", size_bytes=1234)
"""

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any


def get_module_logger(name: str) -> logging.Logger:
    """Get logger for module with standard config.

    Args:
        name: Module name (use __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


# Yo, this wraps one pipeline stage: {operation}.started, then .completed or .failed, both
# with duration_ms. On failure the exception is logged with traceback and RE-RAISED - this
# never swallows anything. **context becomes extra fields on all three events.
@asynccontextmanager
async def log_operation(
    logger: logging.Logger,
    operation: str,
    **context: Any,
) -> AsyncIterator[dict[str, Any]]:
    """Context manager for logging operation start/end with automatic timing.

    Logs:
    - {operation}.started with context fields
    - {operation}.completed with context + duration_ms (+ anything added to the
      yielded dict, e.g. outcome="hit")
    - {operation}.failed with context + duration_ms + error details

    Args:
        logger: Logger instance from get_module_logger()
        operation: Operation name (e.g., "image_pipeline.record_lookup")
        **context: Additional fields to include in logs (e.g., site_id="blog")

    Example:
        >>> async with log_operation(logger, "image_pipeline.raw_acquire", site_id="blog") as op:
        ...     op["outcome"] = "downloaded"
    """
    start = time.monotonic()
    result_fields: dict[str, Any] = {}
    logger.info(f"{operation}.started", extra=context)

    try:
        yield result_fields
    except Exception as e:
        duration_ms = int((time.monotonic() - start) * 1000)
        logger.error(
            f"{operation}.failed",
            extra={
                **context,
                "duration_ms": duration_ms,
                "error": str(e),
                "error_type": type(e).__name__,
            },
            exc_info=True,
        )
        raise

    duration_ms = int((time.monotonic() - start) * 1000)
    logger.info(
        f"{operation}.completed",
        extra={**context, **result_fields, "duration_ms": duration_ms},
    )


def log_cache_event(
    logger: logging.Logger,
    artifact: str,
    hit: bool,
    size_bytes: int | None = None,
    **context: Any,
) -> None:
    """Log a cache hit or miss for one artifact kind.

    Args:
        logger: Logger instance
        artifact: "record", "raw" or "optimized"
        hit: Whether the artifact was usable
        size_bytes: Artifact size when known
        **context: Additional fields (site_id, image_name, ...)
    """
    extra: dict[str, Any] = {**context, "artifact": artifact}
    if size_bytes is not None:
        extra["size_bytes"] = size_bytes
    logger.info(f"image_cache.{artifact}.{'hit' if hit else 'miss'}", extra=extra)
