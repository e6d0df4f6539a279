"""OpenTelemetry initialization and span helpers.

Telemetry is disabled by default. When KNOWMAP_OTEL_ENABLED is false, spans
go to the OpenTelemetry API's no-op tracer.

Usage:
    from knowmap_core.telemetry import init_telemetry, shutdown_telemetry

    init_telemetry()
    ...
    shutdown_telemetry()
"""

from knowmap_core.telemetry.setup import get_tracer, init_telemetry, shutdown_telemetry
from knowmap_core.telemetry.spans import trace_operation, traced_operation

__all__ = [
    "init_telemetry",
    "shutdown_telemetry",
    "get_tracer",
    "trace_operation",
    "traced_operation",
]
