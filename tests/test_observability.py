from unittest.mock import patch

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from schema_engine import observability
from schema_engine.observability import (
    create_resource,
    init_observability,
    shutdown_observability,
    trace_async_function,
)


@pytest.fixture
def exporter():
    """Route the module tracer to an in-memory exporter."""
    span_exporter = InMemorySpanExporter()
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))

    with patch.object(observability, "tracer", provider.get_tracer("tests")):
        yield span_exporter

    provider.shutdown()


class TestTraceAsyncFunction:
    """Test the tracing decorator."""

    async def test_success(self, exporter):
        @trace_async_function("work.unit", attributes={"work.kind": "test"})
        async def work(value):
            return value * 2

        assert await work(21) == 42

        (span,) = exporter.get_finished_spans()
        assert span.name == "work.unit"
        assert span.attributes["work.kind"] == "test"
        assert span.attributes["function.success"] is True

    async def test_failure_propagates(self, exporter):
        @trace_async_function()
        async def broken():
            raise ValueError("boom")

        with pytest.raises(ValueError, match="boom"):
            await broken()

        (span,) = exporter.get_finished_spans()
        assert span.name.endswith("broken")
        assert span.attributes["function.success"] is False
        assert span.attributes["function.error"] == "boom"


class TestObservabilitySetup:
    """Test tracer provider setup and teardown."""

    def test_resource_attributes(self):
        resource = create_resource()

        assert resource.attributes["service.name"] == observability.settings.OTEL_SERVICE_NAME

    def test_disabled_does_nothing(self):
        with patch.object(observability.settings, "TRACING_ENABLED", False):
            with patch.object(observability, "setup_tracing") as mock_setup:
                init_observability()

        mock_setup.assert_not_called()

    def test_enabled_sets_provider(self):
        with patch.object(observability.settings, "TRACING_ENABLED", True):
            with patch.object(observability.settings, "OTLP_ENDPOINT", None):
                with patch("schema_engine.observability.trace.set_tracer_provider") as mock_set:
                    with patch.object(observability, "instrument_libraries") as mock_instrument:
                        init_observability()

        provider = mock_set.call_args[0][0]
        assert isinstance(provider, TracerProvider)
        mock_instrument.assert_called_once()
        assert observability.tracer is not None

        shutdown_observability()
        assert observability.tracer is None

    def test_setup_failure_is_logged(self):
        with patch.object(observability.settings, "TRACING_ENABLED", True):
            with patch.object(observability, "setup_tracing", side_effect=RuntimeError("no exporter")):
                with patch.object(observability, "logger") as mock_logger:
                    init_observability()

        assert mock_logger.error.call_args[0][0] == "observability_init_failed"

    def test_instrument_libraries(self):
        with patch.object(observability, "SQLAlchemyInstrumentor") as mock_sqlalchemy:
            with patch.object(observability, "RedisInstrumentor") as mock_redis:
                observability.instrument_libraries()

        mock_sqlalchemy.return_value.instrument.assert_called_once()
        mock_redis.return_value.instrument.assert_called_once()
