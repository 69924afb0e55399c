"""OpenTelemetry tracing for statement execution.

Until ``setup_tracing`` installs a provider, spans come from the global
no-op tracer, so the executor can always open one.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Generator

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.trace import Status, StatusCode

if TYPE_CHECKING:
    from minidb.infrastructure.config import ObservabilityConfig


TRACER_NAME = "minidb"
STATEMENT_SPAN = "minidb.execute"

_tracer: trace.Tracer | None = None


def setup_tracing(
    service_name: str = "minidb",
    otlp_endpoint: str | None = None,
    console_export: bool = False,
) -> trace.Tracer:
    """
    Install a tracer provider for the engine.

    Args:
        service_name: Service name reported with every span
        otlp_endpoint: OTLP collector endpoint (e.g., "http://localhost:4317")
        console_export: Whether to also print finished spans to stdout

    Returns:
        Configured tracer instance
    """
    global _tracer

    from minidb import __version__

    resource = Resource.create(
        {
            "service.name": service_name,
            "service.version": __version__,
        }
    )
    provider = TracerProvider(resource=resource)

    if otlp_endpoint:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True))
        )

    if console_export:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
    _tracer = trace.get_tracer(TRACER_NAME)
    return _tracer


def setup_tracing_from(config: ObservabilityConfig) -> trace.Tracer:
    """Configure tracing from the observability section of the config."""
    return setup_tracing(
        service_name=config.otel_service_name,
        otlp_endpoint=config.otel_endpoint,
    )


def get_tracer() -> trace.Tracer:
    """Get the engine tracer."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer(TRACER_NAME)
    return _tracer


@contextmanager
def statement_span(sql: str) -> Generator[trace.Span, None, None]:
    """
    Span around the execution of one statement.

    The statement text is recorded as ``db.statement``. An exception
    leaving the block marks the span as failed and is re-raised.

    Args:
        sql: Statement text as received

    Yields:
        The active span, for the caller to add statement attributes
    """
    tracer = get_tracer()
    with tracer.start_as_current_span(
        STATEMENT_SPAN,
        attributes={"db.system": "minidb", "db.statement": sql},
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        try:
            yield span
        except Exception as e:
            span.record_exception(e)
            span.set_status(Status(StatusCode.ERROR, str(e)))
            raise
