"""
Structured logging setup using structlog.

Modules log through the standard library (``logging.getLogger(__name__)``);
structlog renders those records, so ``extra=`` fields and bound job context
come out as structured keys.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from opentelemetry import trace

from lsp_queue.config import Settings, get_settings


def add_trace_context(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Attach the ids of the active span, if one is recording."""
    span = trace.get_current_span()
    if span.is_recording():
        ctx = span.get_span_context()
        event_dict["trace_id"] = format(ctx.trace_id, "032x")
        event_dict["span_id"] = format(ctx.span_id, "016x")
    return event_dict


def setup_logging(settings: Settings | None = None) -> None:
    """
    Route all logging through a single structlog-formatted stderr handler.

    Args:
        settings: Optional settings override; ``log_level`` and
            ``log_format`` ("json" or "console") are read from it.
    """
    settings = settings or get_settings()

    pre_chain: list[Any] = [
        structlog.contextvars.merge_contextvars,
        add_trace_context,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.ExtraAdder(),
    ]

    if settings.log_format == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    # stdout belongs to the client connection in stdio mode
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    logging.getLogger("opentelemetry").setLevel(logging.WARNING)


@contextmanager
def job_context(job_id: str, request: str) -> Iterator[None]:
    """
    Tag every record logged inside the block with the job being handled.

    Usage:
        with job_context(job.id, job.request):
            logger.debug("Dispatched job")
    """
    with structlog.contextvars.bound_contextvars(job_id=job_id, request=str(request)):
        yield
