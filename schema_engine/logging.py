import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from typing import Any, Optional

import structlog
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from schema_engine.config import settings

# Correlation ID shared by every log line emitted while serving one caller
correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

_MAX_ATTRIBUTE_LENGTH = 500


def get_correlation_id() -> str:
    """Get or create a correlation ID for the current context."""
    correlation_id = correlation_id_var.get()
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())
        correlation_id_var.set(correlation_id)
    return correlation_id


def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID for the current context."""
    correlation_id_var.set(correlation_id)


def add_correlation_id(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Add correlation ID to log entries."""
    event_dict["correlation_id"] = get_correlation_id()
    return event_dict


def add_service_info(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Add service information to log entries."""
    event_dict["service"] = settings.OTEL_SERVICE_NAME
    event_dict["version"] = settings.OTEL_SERVICE_VERSION
    event_dict["environment"] = settings.ENVIRONMENT.value
    return event_dict


def get_trace_id() -> Optional[str]:
    """Get the current trace ID as a 32 character hex string."""
    span_context = trace.get_current_span().get_span_context()
    if span_context.trace_id == trace.INVALID_TRACE_ID:
        return None
    return f"{span_context.trace_id:032x}"


def get_span_id() -> Optional[str]:
    """Get the current span ID as a 16 character hex string."""
    span_context = trace.get_current_span().get_span_context()
    if span_context.span_id == trace.INVALID_SPAN_ID:
        return None
    return f"{span_context.span_id:016x}"


def add_trace_context(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Add trace and span IDs to log entries."""
    trace_id = get_trace_id()
    span_id = get_span_id()

    if trace_id:
        event_dict["trace_id"] = trace_id
    if span_id:
        event_dict["span_id"] = span_id

    return event_dict


def configure_logging() -> None:
    """Configure structured logging with structlog."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.LOG_LEVEL.value),
    )

    common_processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_correlation_id,
        add_trace_context,
        add_service_info,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.LOG_FORMAT == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=settings.ENVIRONMENT.value == "development")

    structlog.configure(
        processors=common_processors + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    # Redis and SQLAlchemy are chatty below WARNING in production
    if settings.is_production:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
        logging.getLogger("redis").setLevel(logging.WARNING)


def _safe_attribute(value: Any) -> Any:
    """Coerce a log keyword into something a span attribute accepts."""
    if isinstance(value, bool) or isinstance(value, (str, float)):
        return value
    if isinstance(value, int):
        # Span attributes are int64
        if value > 2**63 - 1 or value < -(2**63):
            return str(value)
        return value
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, default=str)[:_MAX_ATTRIBUTE_LENGTH]
    return str(value)[:_MAX_ATTRIBUTE_LENGTH]


class CentralizedLogger:
    """Structured logger that mirrors every entry onto the active OpenTelemetry span."""

    def __init__(self, name: str = __name__):
        self.name = name
        self.logger = structlog.get_logger(name)

    def _log_with_trace(self, level: str, event: str, **kwargs):
        span = trace.get_current_span()

        if span is not None and span.is_recording():
            attributes = {
                "level": level.upper(),
                "logger": self.name,
                "timestamp": int(time.time() * 1000),
                "event_name": event,
            }
            for key, value in kwargs.items():
                if key == "exc_info" or value is None:
                    continue
                attributes[key] = _safe_attribute(value)

            span.add_event(f"[{level.upper()}] {event}", attributes=attributes)

            if level in ("error", "critical"):
                span.set_status(Status(StatusCode.ERROR, event))

        getattr(self.logger, level)(event, **kwargs)

    def debug(self, event: str, **kwargs):
        self._log_with_trace("debug", event, **kwargs)

    def info(self, event: str, **kwargs):
        self._log_with_trace("info", event, **kwargs)

    def warning(self, event: str, **kwargs):
        self._log_with_trace("warning", event, **kwargs)

    def warn(self, event: str, **kwargs):
        """Alias for warning to match the standard logging interface."""
        self.warning(event, **kwargs)

    def error(self, event: str, **kwargs):
        self._log_with_trace("error", event, **kwargs)

    def critical(self, event: str, **kwargs):
        self._log_with_trace("critical", event, **kwargs)

    def exception(self, event: str, **kwargs):
        """Log at error level with the active exception's traceback."""
        kwargs["exc_info"] = True
        self._log_with_trace("error", event, **kwargs)

        span = trace.get_current_span()
        exc_value = sys.exc_info()[1]
        if exc_value is not None and span.is_recording():
            span.record_exception(exc_value)

    def bind(self, **kwargs) -> "CentralizedLogger":
        """Return a new logger carrying the given context on every entry."""
        bound = CentralizedLogger(self.name)
        bound.logger = self.logger.bind(**kwargs)
        return bound

    with_context = bind


def get_logger(name: str) -> CentralizedLogger:
    """Get a configured centralized logger instance."""
    return CentralizedLogger(name)
