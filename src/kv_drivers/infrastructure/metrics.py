"""Prometheus metrics for the key-value drivers."""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Generator

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    Info,
    start_http_server,
    REGISTRY,
    CollectorRegistry,
)

from kv_drivers.infrastructure.config import ObservabilityConfig


class MetricsRegistry:
    """Registry of all driver metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Operation metrics
        self.operations_total = Counter(
            "kv_operations_total",
            "Total number of store operations",
            ["engine", "operation", "status"],  # status: success, error
            registry=self._registry,
        )

        self.operation_latency_seconds = Histogram(
            "kv_operation_latency_seconds",
            "Store operation latency in seconds",
            ["engine", "operation"],
            buckets=(0.0001, 0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.5, 1.0, 5.0),
            registry=self._registry,
        )

        # Transaction metrics
        self.transactions_total = Counter(
            "kv_transactions_total",
            "Total number of update() transactions",
            ["engine", "status"],  # commit, abort
            registry=self._registry,
        )

        # Cache consistency metrics
        self.visibility_wait_seconds = Histogram(
            "kv_visibility_wait_seconds",
            "Time spent waiting for a cache write or delete to become visible",
            ["expected"],  # present, absent
            buckets=(0.0001, 0.001, 0.01, 0.02, 0.05, 0.1, 0.5, 1.0, 5.0),
            registry=self._registry,
        )

        self.visibility_timeouts_total = Counter(
            "kv_visibility_timeouts_total",
            "Visibility waits that hit their upper bound",
            registry=self._registry,
        )

        self.admission_rejections_total = Counter(
            "kv_admission_rejections_total",
            "Writes declined by the cache admission policy",
            registry=self._registry,
        )

        # Lifecycle metrics
        self.open_stores = Gauge(
            "kv_open_stores",
            "Number of open store handles",
            ["engine"],
            registry=self._registry,
        )

        self.info = Info(
            "kv_drivers",
            "Key-value drivers information",
            registry=self._registry,
        )

    @contextmanager
    def track(self, engine: str, operation: str) -> Generator[None, None, None]:
        """Count and time one operation, labelling failures as errors."""
        start = time.perf_counter()
        status = "error"
        try:
            yield
            status = "success"
        finally:
            self.operation_latency_seconds.labels(engine=engine, operation=operation).observe(
                time.perf_counter() - start
            )
            self.operations_total.labels(engine=engine, operation=operation, status=status).inc()


# Global metrics registry
_metrics: MetricsRegistry | None = None


def setup_metrics(port: int = 8001, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up Prometheus metrics server.

    Args:
        port: Port for the metrics HTTP server
        registry: Optional custom registry

    Returns:
        The metrics registry
    """
    global _metrics
    _metrics = MetricsRegistry(registry)

    from kv_drivers import __version__
    _metrics.info.info({
        "version": __version__,
    })

    start_http_server(port, registry=registry or REGISTRY)

    return _metrics


def setup_metrics_from_config(config: ObservabilityConfig) -> MetricsRegistry:
    """Start the metrics server on the configured port."""
    return setup_metrics(port=config.metrics_port)


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
