"""OpenTelemetry setup with conditional initialization.

SDK and exporter imports are lazy, so nothing beyond the OTEL API is loaded
while telemetry is disabled.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from opentelemetry.trace import Tracer

# Module-level state
_tracer: Tracer | None = None
_initialized = False

logger = logging.getLogger(__name__)


def init_telemetry(extra_resource_attributes: dict[str, str] | None = None) -> bool:
    """Initialize OpenTelemetry tracing if enabled.

    Safe to call multiple times; subsequent calls are no-ops.

    Args:
        extra_resource_attributes: Additional resource attributes to include

    Returns:
        True if telemetry is active, False if disabled
    """
    global _tracer, _initialized

    if _initialized:
        return True

    from knowmap_core.settings import get_settings

    settings = get_settings()

    if not settings.otel_enabled:
        logger.debug("OpenTelemetry disabled (KNOWMAP_OTEL_ENABLED=false)")
        return False

    from opentelemetry import trace
    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor

    resource_attrs: dict[str, str] = {
        SERVICE_NAME: settings.otel_service_name,
        SERVICE_VERSION: "0.1.0",
    }
    if extra_resource_attributes:
        resource_attrs.update(extra_resource_attributes)

    tracer_provider = TracerProvider(resource=Resource.create(resource_attrs))
    span_exporter = OTLPSpanExporter(endpoint=settings.otel_exporter_otlp_endpoint)
    tracer_provider.add_span_processor(BatchSpanProcessor(span_exporter))
    trace.set_tracer_provider(tracer_provider)
    _tracer = trace.get_tracer(__name__)

    _initialized = True
    logger.info(
        "OpenTelemetry initialized: service=%s, endpoint=%s",
        settings.otel_service_name,
        settings.otel_exporter_otlp_endpoint,
    )
    return True


def shutdown_telemetry() -> None:
    """Flush pending spans. Safe to call even if telemetry was never initialized."""
    global _initialized

    if not _initialized:
        return

    from opentelemetry import trace

    tracer_provider = trace.get_tracer_provider()
    if hasattr(tracer_provider, "shutdown"):
        tracer_provider.shutdown()

    _initialized = False
    logger.info("OpenTelemetry shutdown complete")


def get_tracer(name: str = __name__) -> Tracer:
    """Get a tracer instance; a no-op tracer while telemetry is disabled."""
    from opentelemetry import trace

    if _tracer is not None:
        return _tracer
    return trace.get_tracer(name)
