"""Tests for the telemetry module."""

from unittest.mock import patch

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import StatusCode


@pytest.fixture
def exporter():
    """Route span helpers to an in-memory exporter."""
    span_exporter = InMemorySpanExporter()
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))
    with patch("knowmap_core.telemetry.spans.get_tracer", return_value=provider.get_tracer("test")):
        yield span_exporter


class TestTelemetryDisabled:
    """Tests for telemetry when disabled (default)."""

    def test_init_is_a_noop_when_disabled(self) -> None:
        from knowmap_core.telemetry import init_telemetry, shutdown_telemetry

        assert init_telemetry() is False
        # Should not raise when nothing was initialized
        shutdown_telemetry()

    def test_get_tracer_returns_noop_when_disabled(self) -> None:
        """get_tracer should return a no-op tracer when telemetry is disabled."""
        from knowmap_core.telemetry.setup import get_tracer

        tracer = get_tracer("test")
        assert tracer is not None
        with tracer.start_as_current_span("noop") as span:
            span.set_attribute("k", "v")


class TestSpanHelpers:
    """Tests for span helper decorators and context managers."""

    def test_trace_operation_records_attributes(self, exporter: InMemorySpanExporter) -> None:
        from knowmap_core.telemetry import trace_operation

        with trace_operation("knowmap.knowledge_update", mode="delta") as span:
            span.set_attribute("knowmap.files_written", 3)

        (finished,) = exporter.get_finished_spans()
        assert finished.name == "knowmap.knowledge_update"
        assert finished.attributes["mode"] == "delta"
        assert finished.attributes["knowmap.files_written"] == 3

    def test_trace_operation_records_exception(self, exporter: InMemorySpanExporter) -> None:
        from knowmap_core.telemetry import trace_operation

        with pytest.raises(ValueError):
            with trace_operation("knowmap.failing"):
                raise ValueError("Test error")

        (finished,) = exporter.get_finished_spans()
        assert finished.status.status_code == StatusCode.ERROR
        assert any(event.name == "exception" for event in finished.events)

    def test_traced_operation_decorator(self, exporter: InMemorySpanExporter) -> None:
        from knowmap_core.telemetry import traced_operation

        @traced_operation()
        def detect() -> str:
            return "done"

        @traced_operation("knowmap.custom")
        def other() -> int:
            return 1

        assert detect() == "done"
        assert other() == 1
        assert [s.name for s in exporter.get_finished_spans()] == ["knowmap.detect", "knowmap.custom"]


class TestSettingsIntegration:
    """Tests for OTEL settings integration."""

    def test_otel_settings_have_defaults(self) -> None:
        """OTEL settings should have sensible defaults."""
        from knowmap_core.settings import Settings

        settings = Settings(_env_file=None)

        assert settings.otel_enabled is False
        assert settings.otel_service_name == "knowmap"
        assert settings.otel_exporter_otlp_endpoint == "http://localhost:4317"
        assert settings.scan_max_depth == 10
        assert settings.relationship_sample_size == 20
        assert settings.key_files_limit == 20
        assert settings.templates_dir is None

    def test_settings_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Settings should be configurable via KNOWMAP_* environment variables."""
        from knowmap_core.settings import get_settings, reset_settings

        monkeypatch.setenv("KNOWMAP_OTEL_ENABLED", "true")
        monkeypatch.setenv("KNOWMAP_OTEL_SERVICE_NAME", "my-service")
        monkeypatch.setenv("KNOWMAP_SCAN_MAX_DEPTH", "3")
        reset_settings()

        settings = get_settings()

        assert settings.otel_enabled is True
        assert settings.otel_service_name == "my-service"
        assert settings.scan_max_depth == 3
        assert get_settings() is settings
