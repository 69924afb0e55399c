"""Infrastructure layer - cross-cutting concerns."""

from minidb.infrastructure.config import Config, get_config
from minidb.infrastructure.logging import get_logger, setup_logging, setup_logging_from
from minidb.infrastructure.metrics import MetricsRegistry, get_metrics, setup_metrics
from minidb.infrastructure.tracing import get_tracer, setup_tracing, setup_tracing_from, statement_span

__all__ = [
    "Config",
    "get_config",
    "setup_logging",
    "setup_logging_from",
    "get_logger",
    "setup_metrics",
    "get_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "get_tracer",
    "setup_tracing_from",
    "statement_span",
]
