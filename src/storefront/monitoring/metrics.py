"""
Metrics Collection
Prometheus metrics for document lifecycle, rendering and action dispatch
"""

import time
from contextlib import contextmanager
from typing import Callable, Iterator

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, generate_latest


class MetricsCollector:
    """
    Collects and exposes Prometheus metrics for the storefront runtime.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()

        # Document lifecycle
        self.documents_saved = Counter(
            "storefront_documents_saved_total",
            "Draft saves by document kind and outcome",
            ["kind", "status"],
            registry=self.registry,
        )
        self.documents_published = Counter(
            "storefront_documents_published_total",
            "Publish operations by document kind and outcome",
            ["kind", "status"],
            registry=self.registry,
        )

        # Rendering
        self.renders_total = Counter(
            "storefront_renders_total",
            "Document renders by mode and outcome",
            ["mode", "status"],
            registry=self.registry,
        )
        self.render_duration = Histogram(
            "storefront_render_duration_seconds",
            "Render duration in seconds",
            ["mode"],
            buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0],
            registry=self.registry,
        )
        self.broken_references = Counter(
            "storefront_broken_references_total",
            "Prefab references that could not be resolved",
            ["reason"],
            registry=self.registry,
        )

        # Actions
        self.actions_total = Counter(
            "storefront_actions_total",
            "Action dispatches by action id and outcome",
            ["action_id", "status"],
            registry=self.registry,
        )

        # Style cache
        self.style_cache_hits = Counter(
            "storefront_style_cache_hits_total",
            "Compiled style cache hits",
            registry=self.registry,
        )
        self.style_cache_misses = Counter(
            "storefront_style_cache_misses_total",
            "Compiled style cache misses",
            registry=self.registry,
        )

        self.uptime = Gauge(
            "storefront_uptime_seconds",
            "Service uptime in seconds",
            registry=self.registry,
        )
        self.start_time = time.time()

    def record_save(self, kind: str, status: str) -> None:
        self.documents_saved.labels(kind=kind, status=status).inc()

    def record_publish(self, kind: str, status: str) -> None:
        self.documents_published.labels(kind=kind, status=status).inc()

    def record_render(self, mode: str, status: str, duration: float) -> None:
        """Record a document render."""
        self.renders_total.labels(mode=mode, status=status).inc()
        self.render_duration.labels(mode=mode).observe(duration)

    def record_broken_reference(self, reason: str) -> None:
        self.broken_references.labels(reason=reason).inc()

    def record_action(self, action_id: str, status: str) -> None:
        self.actions_total.labels(action_id=action_id, status=status).inc()

    def record_style_cache(self, hit: bool) -> None:
        (self.style_cache_hits if hit else self.style_cache_misses).inc()

    @contextmanager
    def measure_duration(self, callback: Callable[[float], None]) -> Iterator[None]:
        """Context manager to measure operation duration."""
        start = time.perf_counter()
        try:
            yield
        finally:
            callback(time.perf_counter() - start)

    def get_metrics(self) -> bytes:
        """Get metrics in Prometheus format."""
        self.uptime.set(time.time() - self.start_time)
        return generate_latest(self.registry)


# Process-wide collector for the default wiring
metrics_collector = MetricsCollector()
