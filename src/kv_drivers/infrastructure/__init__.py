"""Infrastructure layer - cross-cutting concerns."""

from kv_drivers.infrastructure.config import Config, get_config
from kv_drivers.infrastructure.logging import get_logger, setup_logging, setup_logging_from_config
from kv_drivers.infrastructure.metrics import (
    MetricsRegistry,
    get_metrics,
    setup_metrics,
    setup_metrics_from_config,
)
from kv_drivers.infrastructure.tracing import (
    get_tracer,
    setup_tracing,
    setup_tracing_from_config,
    store_span,
)

__all__ = [
    "Config",
    "get_config",
    "setup_logging",
    "setup_logging_from_config",
    "get_logger",
    "setup_metrics",
    "setup_metrics_from_config",
    "get_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "setup_tracing_from_config",
    "get_tracer",
    "store_span",
]
