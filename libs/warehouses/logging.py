"""Structured logging setup for warehouse clients."""

import logging
import sys
from typing import Any

import structlog
from opentelemetry import trace

from .settings import WarehouseSettings, get_settings


def configure_structured_logging(settings: WarehouseSettings | None = None) -> None:
    """Configure structlog and stdlib logging from warehouse settings."""
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level.upper())

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
    ]

    if settings.enable_tracing_integration:
        processors.append(add_trace_context)

    if settings.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.WriteLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def add_trace_context(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add the caller's OpenTelemetry trace context to log entries."""
    span = trace.get_current_span()

    if span and span.is_recording():
        span_context = span.get_span_context()
        event_dict.update(
            {
                "trace_id": format(span_context.trace_id, "032x"),
                "span_id": format(span_context.span_id, "016x"),
            }
        )

    return event_dict


def sql_preview(sql: str, settings: WarehouseSettings | None = None) -> str | None:
    """Truncate SQL text for logging, or None when SQL logging is disabled."""
    max_chars = (settings or get_settings()).sql_log_max_chars
    if max_chars == 0:
        return None
    return sql if len(sql) <= max_chars else sql[:max_chars] + "..."
