"""
Priority coalescer.

API mutations submitted in a burst (several files saved together, a package
replaced twice in a row) are held briefly, keyed by URI, and then flushed
into the priority lane as one batch. A later mutation for the same URI
replaces the pending one.
"""

import asyncio
import logging
from collections.abc import Callable

from lsp_queue.observability.metrics import get_metrics
from lsp_queue.scheduler.lanes import DualQueue
from lsp_queue.scheduler.registry import JobRegistry
from lsp_queue.types.job import EnqueuedJob

logger = logging.getLogger(__name__)


class PriorityCoalescer:
    """
    Batches priority jobs per URI before they reach the priority lane.

    The first submission after a flush schedules the next flush on the event
    loop; everything submitted before it runs joins the same batch.
    """

    def __init__(
        self,
        queue: DualQueue,
        registry: JobRegistry,
        request_pump: Callable[[], None],
        delay_seconds: float = 0.0,
    ):
        """
        Initialize the coalescer.

        Args:
            queue: The queue receiving flushed batches.
            registry: Forgets jobs superseded before they were flushed.
            request_pump: Called after every flush.
            delay_seconds: How long to hold a batch. 0 flushes on the next tick.
        """
        self._queue = queue
        self._registry = registry
        self._request_pump = request_pump
        self._delay = delay_seconds
        self._pending: dict[str, EnqueuedJob] = {}
        self._flush_handle: asyncio.Handle | None = None
        self._metrics = get_metrics()

    def submit(self, job: EnqueuedJob) -> EnqueuedJob:
        """
        Hold a priority job until the next flush.

        Args:
            job: A priority job. Its ``uri`` must be set.

        Returns:
            The same job.
        """
        superseded = self._pending.get(job.uri)
        if superseded is not None:
            logger.debug(
                "Coalesced priority job",
                extra={"uri": job.uri, "job_id": job.id, "superseded_id": superseded.id},
            )
            self._registry.pop(superseded.id)
            self._metrics.record_job_coalesced(job.request)
        self._pending[job.uri] = job

        if self._flush_handle is None:
            loop = asyncio.get_running_loop()
            if self._delay > 0:
                self._flush_handle = loop.call_later(self._delay, self.flush)
            else:
                self._flush_handle = loop.call_soon(self.flush)
        return job

    def flush(self) -> int:
        """
        Move every pending job into the priority lane and request the pump.

        Returns:
            Number of jobs flushed.
        """
        if self._flush_handle is not None:
            self._flush_handle.cancel()
            self._flush_handle = None

        if not self._pending:
            return 0

        batch = list(self._pending.values())
        self._pending.clear()
        self._queue.push_priority(batch)
        logger.debug("Flushed priority batch", extra={"count": len(batch)})
        self._request_pump()
        return len(batch)

    def pending_count(self) -> int:
        return len(self._pending)

    def pending(self) -> list[EnqueuedJob]:
        """Get the jobs waiting for the next flush."""
        return list(self._pending.values())

    def clear(self) -> int:
        """Drop pending jobs and cancel the scheduled flush."""
        if self._flush_handle is not None:
            self._flush_handle.cancel()
            self._flush_handle = None
        count = len(self._pending)
        self._pending.clear()
        return count
