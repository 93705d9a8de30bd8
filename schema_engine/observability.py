import functools
from typing import Any, Dict, List, Optional

from opentelemetry import trace
from opentelemetry.instrumentation.redis import RedisInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased

from schema_engine.config import settings
from schema_engine.logging import get_logger

logger = get_logger(__name__)

# Global instances
tracer: Optional[trace.Tracer] = None
_trace_provider: Optional[TracerProvider] = None
_span_processors: List[BatchSpanProcessor] = []


def create_resource() -> Resource:
    """Create OpenTelemetry resource with service information."""
    return Resource.create(
        {
            "service.name": settings.OTEL_SERVICE_NAME,
            "service.version": settings.OTEL_SERVICE_VERSION,
            "service.environment": settings.ENVIRONMENT.value,
        }
    )


def setup_tracing() -> None:
    """Configure the OpenTelemetry tracer provider and its exporters."""
    global tracer, _trace_provider

    provider = TracerProvider(
        resource=create_resource(),
        sampler=TraceIdRatioBased(rate=settings.TRACE_SAMPLING_RATE),
    )
    trace.set_tracer_provider(provider)
    _trace_provider = provider

    if settings.OTLP_ENDPOINT:
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

            processor = BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.OTLP_ENDPOINT, insecure=True))
            provider.add_span_processor(processor)
            _span_processors.append(processor)
            logger.info("otlp_trace_exporter_configured", endpoint=settings.OTLP_ENDPOINT)
        except ImportError:
            logger.warning("otlp_trace_exporter_unavailable", endpoint=settings.OTLP_ENDPOINT)

    instrument_libraries()

    tracer = trace.get_tracer(__name__)
    logger.info(
        "tracing_configured",
        sampling_rate=settings.TRACE_SAMPLING_RATE,
        exporters_count=len(_span_processors),
    )


def instrument_libraries() -> None:
    """Trace store reads and cache calls made through SQLAlchemy and redis-py."""
    try:
        SQLAlchemyInstrumentor().instrument()
        logger.info("sqlalchemy_instrumentation_enabled")

        RedisInstrumentor().instrument()
        logger.info("redis_instrumentation_enabled")
    except Exception as e:
        logger.error("library_instrumentation_failed", error=str(e))


def get_tracer() -> trace.Tracer:
    """Get the configured tracer, falling back to the global provider's tracer."""
    return tracer or trace.get_tracer(__name__)


def trace_async_function(name: Optional[str] = None, attributes: Optional[Dict[str, Any]] = None):
    """Decorator to trace async function calls."""

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            span_name = name or f"{func.__module__}.{func.__qualname__}"
            with get_tracer().start_as_current_span(span_name) as span:
                if attributes:
                    for key, value in attributes.items():
                        span.set_attribute(key, value)

                try:
                    result = await func(*args, **kwargs)
                    span.set_attribute("function.success", True)
                    return result
                except Exception as e:
                    span.set_attribute("function.success", False)
                    span.set_attribute("function.error", str(e))
                    raise

        return wrapper

    return decorator


def shutdown_observability() -> None:
    """Flush and shut down span processors."""
    global _trace_provider, tracer

    for processor in _span_processors:
        try:
            processor.force_flush(timeout_millis=1000)
            processor.shutdown()
        except Exception as e:
            logger.warning("span_processor_shutdown_failed", error=str(e))

    _span_processors.clear()
    _trace_provider = None
    tracer = None
    logger.info("observability_shutdown_completed")


def init_observability() -> None:
    """Initialize tracing when enabled in settings."""
    if not settings.TRACING_ENABLED:
        logger.debug("tracing_disabled")
        return

    try:
        setup_tracing()
    except Exception as e:
        # Resolution must keep working without an exporter
        logger.error("observability_init_failed", error=str(e))
