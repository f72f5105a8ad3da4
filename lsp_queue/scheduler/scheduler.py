"""
Job scheduler.

Entry point used by the language server: owns the registry, the coalescer,
the dual queue, the dispatch loop and the shutdown coordinator for one
worker connection.
"""

import asyncio
import logging
from collections.abc import Iterable

from lsp_queue.config import Settings, get_settings
from lsp_queue.constants import Lane
from lsp_queue.loader import FileResourceLoader
from lsp_queue.observability.metrics import get_metrics
from lsp_queue.scheduler.coalescer import PriorityCoalescer
from lsp_queue.scheduler.dispatcher import DispatchLoop
from lsp_queue.scheduler.lanes import DualQueue, classify
from lsp_queue.scheduler.protocols import (
    ErrorSink,
    ResourceLoader,
    Transport,
    WorkerStatus,
    log_error_notification,
)
from lsp_queue.scheduler.registry import JobRegistry
from lsp_queue.scheduler.shutdown import ShutdownCoordinator
from lsp_queue.types.job import EnqueuedJob, Job

logger = logging.getLogger(__name__)


class JobScheduler:
    """
    Schedules jobs for a single compiler worker.

    All methods must be called from the event loop that runs the dispatch
    loop; queue state is never shared across threads.

    Usage:
        scheduler = JobScheduler(worker, transport)
        scheduler.initialize_queues(startup_jobs)
        scheduler.enqueue(Job(request=Request.LSP_HOVER, uri=uri, position=pos))
        ...
        await scheduler.terminate()
    """

    def __init__(
        self,
        worker: WorkerStatus,
        transport: Transport,
        loader: ResourceLoader | None = None,
        error_sink: ErrorSink | None = None,
        settings: Settings | None = None,
        name: str = "default",
    ):
        """
        Initialize the scheduler.

        Args:
            worker: Reports whether the worker can accept a job.
            transport: Sends jobs and reports their completion.
            loader: Reads resources for jobs sent without inline content.
            error_sink: Receives notifications for skipped jobs.
            settings: Optional settings override.
            name: Identifies this scheduler in metrics when a process runs
                more than one.
        """
        settings = settings or get_settings()

        self._transport = transport
        self._metrics = get_metrics()

        self.registry = JobRegistry()
        self.queue = DualQueue(self.registry, name=name)
        self.dispatcher = DispatchLoop(
            self.queue,
            self.registry,
            worker,
            transport,
            loader or FileResourceLoader(settings.source_encoding),
            error_sink or log_error_notification,
        )
        self.coalescer = PriorityCoalescer(
            self.queue,
            self.registry,
            self.dispatcher.request_pump,
            delay_seconds=settings.coalesce_delay_seconds,
        )
        self.shutdown = ShutdownCoordinator(transport, self.drain_all)

    def enqueue(self, job: Job) -> EnqueuedJob:
        """
        Submit a job.

        Priority jobs are held by the coalescer until the next flush; all
        other jobs go straight to the normal lane.

        Returns:
            The job with its identifier, for correlating the response.
        """
        enqueued = self.registry.register(job)
        lane = classify(enqueued)
        self._metrics.record_job_submitted(enqueued.request, lane)

        if lane is Lane.PRIORITY:
            return self.coalescer.submit(enqueued)

        self.queue.push_normal(enqueued)
        self.dispatcher.request_pump()
        return enqueued

    def initialize_queues(self, jobs: Iterable[Job]) -> list[EnqueuedJob]:
        """
        Bulk-load jobs at startup.

        The running state is reset first so that the pump actually starts.
        Priority jobs go straight to the priority lane: the batch is already
        a single wave.
        """
        self.dispatcher.reset()

        enqueued = []
        for job in jobs:
            registered = self.registry.register(job)
            self._metrics.record_job_submitted(registered.request, classify(registered))
            self.queue.push(registered)
            enqueued.append(registered)

        logger.info("Queues initialized", extra={"count": len(enqueued)})
        self.dispatcher.request_pump()
        return enqueued

    def pending_count(self) -> int:
        """
        The number of jobs added but not yet processed.

        Counts both lanes, priority jobs awaiting a flush, and jobs the
        transport has sent but not yet seen answered.
        """
        return len(self.queue) + self.coalescer.pending_count() + self._transport.in_flight()

    def notify_worker_ready(self) -> None:
        """Resume dispatching after the worker reported readiness."""
        self.dispatcher.notify_ready()

    def drain_all(self) -> None:
        """Discard all queued work and go idle."""
        held = self.coalescer.clear()
        queued = self.queue.drain_all()
        self.dispatcher.reset()
        unresolved = self.registry.clear()
        logger.info(
            "Queues drained",
            extra={"held": held, "queued": queued, "unresolved": unresolved},
        )

    async def terminate(self, timeout: float | None = None) -> None:
        """
        Shut the worker down and clear all queue state.

        Args:
            timeout: Seconds to wait for the worker's acknowledgement. None
                waits indefinitely.

        Raises:
            TimeoutError: If the worker did not acknowledge in time. Queue
                state is left untouched in that case.
        """
        await asyncio.wait_for(self.shutdown.terminate(), timeout)
