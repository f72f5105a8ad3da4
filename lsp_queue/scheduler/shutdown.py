"""
Shutdown coordination.
"""

import logging
from collections.abc import Callable

from lsp_queue.constants import SHUTDOWN_JOB_ID, SPAN_TERMINATE_QUEUE, Request
from lsp_queue.observability.metrics import get_metrics
from lsp_queue.observability.tracing import create_span
from lsp_queue.scheduler.protocols import Transport
from lsp_queue.types.job import EnqueuedJob

logger = logging.getLogger(__name__)


class ShutdownCoordinator:
    """
    Stops the worker and clears the queues once it has acknowledged.

    The shutdown job skips both lanes: it must not wait behind queued work.
    There is no retry; if the worker never answers, ``terminate`` never
    returns, so callers that need a bound must impose their own timeout.
    """

    def __init__(self, transport: Transport, on_drained: Callable[[], None]):
        """
        Initialize the coordinator.

        Args:
            transport: Channel to the worker.
            on_drained: Clears all queue state after the worker acknowledged.
        """
        self._transport = transport
        self._on_drained = on_drained
        self._metrics = get_metrics()

    async def terminate(self) -> None:
        """Send the shutdown job, wait for its completion, then clear state."""
        job = EnqueuedJob(id=SHUTDOWN_JOB_ID, request=Request.API_SHUTDOWN)

        with create_span(SPAN_TERMINATE_QUEUE, job_id=job.id):
            completed = self._transport.completion(job.id)
            self._transport.send(job)
            logger.info("Shutdown requested, waiting for worker")

            await completed

            self._on_drained()
            self._metrics.record_shutdown()
            logger.info("Worker shut down, queues cleared")
