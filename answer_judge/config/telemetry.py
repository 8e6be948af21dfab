"""OpenTelemetry and structured logging configuration.

The library itself only creates module loggers and spans. A host
application wires them up once at start-up, before the first evaluation::

    from answer_judge import build_orchestrator, configure_telemetry

    configure_telemetry()            # JSON logs on stderr, OTLP spans if enabled
    orchestrator = build_orchestrator()

Every log line emitted while an evaluation runs then carries its
``request_id``, ``mode`` and ladder ``tier`` through :class:`CorrelationFilter`.
"""

from __future__ import annotations

import contextvars
import logging
from dataclasses import dataclass

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from pythonjsonlogger.json import JsonFormatter

from answer_judge.config.settings import Settings, get_settings


# ---------------------------------------------------------------------------
# Correlation context - set by the orchestrator, read by CorrelationFilter
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _CorrelationContext:
    request_id: str = ""
    mode: str = ""
    tier: str = ""


_correlation_ctx: contextvars.ContextVar[_CorrelationContext | None] = contextvars.ContextVar(
    "correlation_ctx",
    default=None,
)

_EMPTY_CONTEXT = _CorrelationContext()


def set_correlation_context(
    *,
    request_id: str | None = None,
    mode: str | None = None,
    tier: str | None = None,
) -> None:
    """Update correlation fields available to all log records in the current context.

    Only provided (non-None) fields are changed; the rest keep their current value.
    """
    current = _correlation_ctx.get() or _EMPTY_CONTEXT
    _correlation_ctx.set(
        _CorrelationContext(
            request_id=request_id if request_id is not None else current.request_id,
            mode=mode if mode is not None else current.mode,
            tier=tier if tier is not None else current.tier,
        )
    )


def clear_correlation_context() -> None:
    """Drop all correlation fields for the current context."""
    _correlation_ctx.set(None)


# ---------------------------------------------------------------------------
# Logging filter that injects correlation fields
# ---------------------------------------------------------------------------


class CorrelationFilter(logging.Filter):
    """Injects ``request_id``, ``mode``, and ``tier`` into every log record.

    Values come from the current :func:`set_correlation_context` call (via
    *contextvars*), defaulting to ``""`` when unset.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = _correlation_ctx.get() or _EMPTY_CONTEXT
        record.request_id = ctx.request_id  # type: ignore[attr-defined]
        record.mode = ctx.mode  # type: ignore[attr-defined]
        record.tier = ctx.tier  # type: ignore[attr-defined]
        return True


# ---------------------------------------------------------------------------
# Idempotency guard
# ---------------------------------------------------------------------------

_configured = False


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------


def configure_telemetry(settings: Settings | None = None) -> None:
    """Set up JSON structured logging and, optionally, OpenTelemetry tracing.

    Safe to call multiple times - subsequent calls are no-ops. Reads
    ``LOG_LEVEL``, ``OTEL_TRACES_ENABLED``, ``OTEL_SERVICE_NAME`` and
    ``OTEL_EXPORTER_OTLP_ENDPOINT`` from *settings* (default: :func:`get_settings`).
    """
    global _configured
    if _configured:
        return
    _configured = True

    settings = settings or get_settings()

    # ── Tracing ──────────────────────────────────────────────────────────
    if settings.OTEL_TRACES_ENABLED:
        resource = Resource.create({"service.name": settings.OTEL_SERVICE_NAME})
        provider = TracerProvider(resource=resource)
        exporter = OTLPSpanExporter(endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT, insecure=True)
        provider.add_span_processor(BatchSpanProcessor(exporter))
        trace.set_tracer_provider(provider)

    # ── LoggingInstrumentor ──────────────────────────────────────────────
    # Injects otelTraceID / otelSpanID / otelServiceName into log records.
    LoggingInstrumentor().instrument(set_logging_format=False)

    # ── JSON structured logging ──────────────────────────────────────────
    formatter = JsonFormatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(message)s "
        "%(otelTraceID)s %(otelSpanID)s %(otelServiceName)s "
        "%(request_id)s %(mode)s %(tier)s",
        rename_fields={
            "asctime": "timestamp",
            "levelname": "level",
            "otelTraceID": "trace_id",
            "otelSpanID": "span_id",
            "otelServiceName": "service",
        },
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    handler.addFilter(CorrelationFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(settings.LOG_LEVEL.upper())
