"""
Dispatch loop.

Feeds the worker one job at a time, in priority order, for as long as the
worker reports itself ready. The loop does not wait for results: the worker
serializes processing itself, the loop only keeps its input fed.
"""

import asyncio
import logging

from lsp_queue.constants import SPAN_DISPATCH_JOB, DispatchState, Request
from lsp_queue.errors import ResourceLoadError
from lsp_queue.observability.logging import job_context
from lsp_queue.observability.metrics import get_metrics
from lsp_queue.observability.tracing import get_tracer
from lsp_queue.scheduler.lanes import DualQueue
from lsp_queue.scheduler.protocols import (
    ErrorSink,
    ResourceLoader,
    Transport,
    WorkerStatus,
)
from lsp_queue.scheduler.registry import JobRegistry
from lsp_queue.types.events import ErrorNotification
from lsp_queue.types.job import EnqueuedJob

logger = logging.getLogger(__name__)


class DispatchLoop:
    """
    Single-flight pump between the dual queue and the transport.

    Features:
    - At most one dispatch cycle at a time; redundant wake-ups are coalesced
    - Suspends without consuming a job while the worker is not ready
    - Loads source text / package bytes for jobs that arrived without them
    - Skips jobs whose resources cannot be read, reporting them to the client
    """

    def __init__(
        self,
        queue: DualQueue,
        registry: JobRegistry,
        worker: WorkerStatus,
        transport: Transport,
        loader: ResourceLoader,
        error_sink: ErrorSink,
    ):
        self._queue = queue
        self._registry = registry
        self._worker = worker
        self._transport = transport
        self._loader = loader
        self._error_sink = error_sink

        self._state = DispatchState.IDLE
        self._task: asyncio.Task | None = None
        self._wakeup = asyncio.Event()
        self._metrics = get_metrics()

        self.pump_starts = 0

    @property
    def state(self) -> DispatchState:
        return self._state

    @property
    def running(self) -> bool:
        return self._state is DispatchState.PUMPING

    def request_pump(self) -> None:
        """
        Start a dispatch cycle unless one is already active.

        An active cycle that is waiting for the worker re-checks readiness.
        """
        if self._state is DispatchState.PUMPING:
            self._wakeup.set()
            return

        self._state = DispatchState.PUMPING
        self.pump_starts += 1
        self._metrics.record_dispatch_cycle()
        self._wakeup.clear()

        self._task = asyncio.get_running_loop().create_task(self._pump())
        self._task.add_done_callback(self._on_pump_done)

    def notify_ready(self) -> None:
        """Called when the worker reports that it can accept work."""
        if self._state is DispatchState.PUMPING:
            self._wakeup.set()
        elif len(self._queue):
            self.request_pump()

    def reset(self) -> None:
        """Abandon the current cycle, if any, and go idle."""
        task = self._task
        self._task = None
        self._state = DispatchState.IDLE
        self._wakeup.clear()
        if task is not None and not task.done():
            task.cancel()

    async def _pump(self) -> None:
        """Dispatch jobs until both lanes are empty."""
        try:
            while True:
                if not self._worker.is_ready():
                    # Wait for notify_ready or request_pump, do not poll
                    logger.debug("Worker not ready, dispatch suspended")
                    self._wakeup.clear()
                    await self._wakeup.wait()
                    continue

                job = self._queue.dequeue()
                if job is None:
                    break

                self._dispatch(job)

                # One job per tick, so new submissions can preempt
                await asyncio.sleep(0)
        finally:
            if self._task is asyncio.current_task():
                self._task = None
                self._state = DispatchState.IDLE

    def _dispatch(self, job: EnqueuedJob) -> None:
        """Load missing resources and hand a job to the transport."""
        with (
            job_context(job.id, job.request),
            get_tracer().start_as_current_span(SPAN_DISPATCH_JOB) as span,
        ):
            span.set_attribute("job_id", job.id)
            span.set_attribute("request", str(job.request))

            try:
                job = self._with_resources(job)
            except ResourceLoadError as e:
                logger.warning(
                    "Skipping job, resource could not be read",
                    extra={"uri": e.uri, "error": str(e.reason)},
                )
                span.record_exception(e)
                # Never sent, so no response will remove it
                self._registry.pop(job.id)
                self._metrics.record_resource_load_failure(job.request)
                self._error_sink(ErrorNotification.failed_to_read_file(e.uri, e.reason))
                return

            self._transport.send(job)
            self._metrics.record_job_dispatched(job.request)
            logger.debug("Dispatched job")

    def _with_resources(self, job: EnqueuedJob) -> EnqueuedJob:
        if job.request == Request.API_ADD_URI and job.src is None:
            return job.model_copy(update={"src": self._loader.read_text(job.uri)})
        if job.request == Request.API_ADD_PKG and job.src is None and job.base64 is None:
            return job.model_copy(
                update={"base64": self._loader.read_binary_as_base64(job.uri)}
            )
        return job

    def _on_pump_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(
                "Dispatch cycle failed",
                exc_info=(type(error), error, error.__traceback__),
            )
