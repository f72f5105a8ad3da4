"""
Observability module.
Contains logging, metrics, and tracing setup.
"""

from lsp_queue.observability.logging import job_context, setup_logging
from lsp_queue.observability.metrics import (
    MetricsCollector,
    get_metrics,
    setup_metrics,
)
from lsp_queue.observability.tracing import create_span, get_tracer, setup_tracing

__all__ = [
    "setup_logging",
    "job_context",
    "setup_metrics",
    "get_metrics",
    "MetricsCollector",
    "setup_tracing",
    "get_tracer",
    "create_span",
]
