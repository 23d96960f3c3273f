"""Image cache metrics - Prometheus-compatible.

Hey future me - these counters answer "how much money/bandwidth is the cache saving?"
Every optimization call is billed by Kraken, so optimizations_total{result="success"}
staying flat while cache_lookups_total{artifact="optimized",result="hit"} grows is the
whole point of this library.

METRICS:
- cache_lookups_total{artifact, result}: record/raw/optimized hit or miss
- downloads_total{result}: source downloads (success, failed)
- optimizations_total{result}: optimizer calls (success, failed)
- record_conflicts_total: insert races lost to another writer
- artifact_size_bytes{artifact}: histogram of written/read artifact sizes

NOTE: no prometheus_client dependency - the text exposition format is rendered here.
"""

import logging
from dataclasses import dataclass, field
from threading import Lock
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class MetricDefinition:
    """Metric definition with name, type, help text."""

    name: str
    type: str  # "counter", "gauge", "histogram"
    help: str
    labels: list[str] = field(default_factory=list)


class ImageCacheMetrics:
    """Prometheus-compatible metrics for the image cache.

    Usage:
        metrics = ImageCacheMetrics()
        metrics.inc_cache_lookup("optimized", hit=True)
        metrics.observe_artifact_size("raw", 48213)
        text = metrics.to_prometheus_format()

    Thread-safe: the image manager may be driven from several event loops/threads.
    """

    def __init__(self, prefix: str = "imagevault") -> None:
        self._lock = Lock()
        self._prefix = prefix

        self._definitions: dict[str, MetricDefinition] = {
            "cache_lookups_total": MetricDefinition(
                name="cache_lookups_total",
                type="counter",
                help="Cache lookups by artifact and result",
                labels=["artifact", "result"],
            ),
            "downloads_total": MetricDefinition(
                name="downloads_total",
                type="counter",
                help="Source image downloads by result",
                labels=["result"],
            ),
            "optimizations_total": MetricDefinition(
                name="optimizations_total",
                type="counter",
                help="Optimization service calls by result",
                labels=["result"],
            ),
            "record_conflicts_total": MetricDefinition(
                name="record_conflicts_total",
                type="counter",
                help="Record inserts that lost a race to another writer",
            ),
            "artifact_size_bytes": MetricDefinition(
                name="artifact_size_bytes",
                type="histogram",
                help="Artifact size in bytes",
                labels=["artifact"],
            ),
        }

        self._counters: dict[str, dict[str, float]] = {}
        # Histograms keep only a running [count, sum] per label set - that is all we export
        self._histograms: dict[str, dict[str, list[float]]] = {}

    def _make_label_key(self, labels: dict[str, str]) -> str:
        """Create a sortable key from labels dict."""
        return "|".join(f"{k}={v}" for k, v in sorted(labels.items()))

    def _inc(self, metric: str, labels: dict[str, str] | None = None) -> None:
        with self._lock:
            key = self._make_label_key(labels or {})
            values = self._counters.setdefault(metric, {})
            values[key] = values.get(key, 0) + 1

    # ==========================================================================
    # COUNTER METHODS
    # ==========================================================================

    def inc_cache_lookup(self, artifact: str, hit: bool) -> None:
        """Count a cache lookup.

        Args:
            artifact: "record", "raw" or "optimized"
            hit: Whether a usable entry was found
        """
        self._inc(
            "cache_lookups_total",
            {"artifact": artifact, "result": "hit" if hit else "miss"},
        )

    def inc_downloads(self, success: bool) -> None:
        self._inc("downloads_total", {"result": "success" if success else "failed"})

    def inc_optimizations(self, success: bool) -> None:
        self._inc("optimizations_total", {"result": "success" if success else "failed"})

    def inc_record_conflicts(self) -> None:
        self._inc("record_conflicts_total")

    def get_counter(self, metric: str, **labels: str) -> float:
        """Current value of one counter series (0 if never incremented)."""
        with self._lock:
            return self._counters.get(metric, {}).get(self._make_label_key(labels), 0)

    # ==========================================================================
    # HISTOGRAM METHODS
    # ==========================================================================

    def observe_artifact_size(self, artifact: str, size_bytes: int) -> None:
        """Record an artifact size observation."""
        with self._lock:
            key = self._make_label_key({"artifact": artifact})
            series = self._histograms.setdefault("artifact_size_bytes", {})
            totals = series.setdefault(key, [0, 0.0])
            totals[0] += 1
            totals[1] += float(size_bytes)

    # ==========================================================================
    # PROMETHEUS EXPOSITION FORMAT
    # ==========================================================================

    def _format_labels(self, labels: dict[str, str]) -> str:
        """Format labels as Prometheus label string."""
        if not labels:
            return ""
        parts = [f'{k}="{v}"' for k, v in sorted(labels.items())]
        return "{" + ",".join(parts) + "}"

    def _parse_label_key(self, key: str) -> dict[str, str]:
        """Parse label key back to dict."""
        if not key:
            return {}
        labels = {}
        for part in key.split("|"):
            if "=" in part:
                k, v = part.split("=", 1)
                labels[k] = v
        return labels

    def to_prometheus_format(self) -> str:
        """Export all metrics in Prometheus text exposition format."""
        lines = []

        with self._lock:
            for metric_name, values in self._counters.items():
                defn = self._definitions[metric_name]
                full_name = f"{self._prefix}_{defn.name}"
                lines.append(f"# HELP {full_name} {defn.help}")
                lines.append(f"# TYPE {full_name} counter")
                for label_key, value in values.items():
                    label_str = self._format_labels(self._parse_label_key(label_key))
                    lines.append(f"{full_name}{label_str} {value}")

            # Histograms are simplified to _count and _sum
            for metric_name, series in self._histograms.items():
                defn = self._definitions[metric_name]
                full_name = f"{self._prefix}_{defn.name}"
                lines.append(f"# HELP {full_name} {defn.help}")
                lines.append(f"# TYPE {full_name} histogram")

                for label_key, (count, total) in series.items():
                    label_str = self._format_labels(self._parse_label_key(label_key))
                    lines.append(f"{full_name}_count{label_str} {count}")
                    lines.append(f"{full_name}_sum{label_str} {total}")

        return "\n".join(lines) + "\n"

    def get_summary(self) -> dict[str, Any]:
        """Get metrics summary as JSON-friendly dict."""
        with self._lock:
            return {
                "counters": {
                    name: dict(values) for name, values in self._counters.items()
                },
                "histograms": {
                    name: {
                        "count": sum(count for count, _ in series.values()),
                        "sum": sum(total for _, total in series.values()),
                    }
                    for name, series in self._histograms.items()
                },
            }


# =============================================================================
# GLOBAL METRICS INSTANCE
# =============================================================================

_image_cache_metrics: ImageCacheMetrics | None = None


def get_image_cache_metrics() -> ImageCacheMetrics:
    """Get the global metrics instance (created on first call)."""
    global _image_cache_metrics
    if _image_cache_metrics is None:
        _image_cache_metrics = ImageCacheMetrics()
    return _image_cache_metrics


def reset_image_cache_metrics() -> None:
    """Reset the global metrics (for testing)."""
    global _image_cache_metrics
    _image_cache_metrics = None
