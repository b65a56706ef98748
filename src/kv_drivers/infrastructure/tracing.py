"""OpenTelemetry tracing configuration."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

from kv_drivers.infrastructure.config import ObservabilityConfig


_tracer: trace.Tracer | None = None


def setup_tracing(
    service_name: str = "kv_drivers",
    otlp_endpoint: str | None = None,
    console_export: bool = False,
) -> trace.Tracer:
    """
    Set up OpenTelemetry tracing.

    Args:
        service_name: Name of the service for tracing
        otlp_endpoint: OTLP collector endpoint (e.g., "http://localhost:4317")
        console_export: Whether to also export to console (for debugging)

    Returns:
        Configured tracer instance
    """
    global _tracer

    from kv_drivers import __version__

    resource = Resource.create(
        {
            "service.name": service_name,
            "service.version": __version__,
        }
    )
    provider = TracerProvider(resource=resource)

    if otlp_endpoint:
        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True))
        )
    if console_export:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
    _tracer = trace.get_tracer(service_name)
    return _tracer


def setup_tracing_from_config(config: ObservabilityConfig) -> trace.Tracer:
    """Apply the tracing fields of the observability configuration."""
    return setup_tracing(service_name=config.otel_service_name, otlp_endpoint=config.otel_endpoint)


def get_tracer() -> trace.Tracer:
    """Get the global tracer instance."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer("kv_drivers")
    return _tracer


@contextmanager
def store_span(
    operation: str,
    engine: str,
    path: str,
) -> Generator[trace.Span, None, None]:
    """
    Open a span for a store-level operation.

    Args:
        operation: Operation name, used as the span suffix (``kv.<operation>``)
        engine: Engine type name
        path: Store path or cache name

    Yields:
        The created span
    """
    with get_tracer().start_as_current_span(f"kv.{operation}") as span:
        span.set_attribute("kv.engine", engine)
        span.set_attribute("kv.path", path)
        yield span
