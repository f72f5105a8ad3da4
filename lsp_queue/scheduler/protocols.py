"""
Interfaces of the collaborators the scheduler drives.

The worker process, its transport and the client connection live outside
this package. They are described here as protocols so that any object with
the right methods can be plugged into the scheduler.
"""

import asyncio
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Any, Protocol, runtime_checkable

from lsp_queue.scheduler.registry import JobRegistry
from lsp_queue.types.events import ErrorNotification
from lsp_queue.types.job import EnqueuedJob

logger = logging.getLogger(__name__)

# Receives notifications for work the scheduler had to drop
ErrorSink = Callable[[ErrorNotification], None]


@runtime_checkable
class WorkerStatus(Protocol):
    """Readiness of the compiler worker."""

    def is_ready(self) -> bool:
        """Return True when the worker can accept the next job."""
        ...


@runtime_checkable
class Transport(Protocol):
    """
    Protocol for the channel to the worker.

    The transport is responsible for:
    - Serializing and sending jobs (fire-and-forget)
    - Emitting completion/error events per job id
    - Reporting how many sent jobs are still unanswered
    """

    def send(self, job: EnqueuedJob) -> None:
        """Send a job to the worker."""
        ...

    def completion(self, job_id: str) -> Awaitable[Any]:
        """
        Return an awaitable that resolves when the worker answers ``job_id``.

        The awaitable must be obtainable before the job is sent.
        """
        ...

    def in_flight(self) -> int:
        """Number of jobs sent but not yet answered."""
        ...


@runtime_checkable
class ResourceLoader(Protocol):
    """Reads the contents a job needs before it can be dispatched."""

    def read_text(self, uri: str) -> str:
        """Read a source file. Raises ResourceLoadError."""
        ...

    def read_binary_as_base64(self, uri: str) -> str:
        """Read a binary package, base64 encoded. Raises ResourceLoadError."""
        ...


def log_error_notification(notification: ErrorNotification) -> None:
    """Default error sink: log the notification."""
    logger.error(notification.message, extra={"request": str(notification.request)})


class CompletionTracker:
    """
    Correlates worker responses with the jobs that caused them.

    Transport implementations create one tracker, hand out waiters through
    ``expect`` and call ``resolve``/``reject`` as responses arrive. Resolving
    a job removes it from the registry.
    """

    def __init__(self, registry: JobRegistry | None = None):
        self._registry = registry
        self._waiters: dict[str, list[asyncio.Future]] = defaultdict(list)

    def expect(self, job_id: str) -> asyncio.Future:
        """Get a future resolved by the next response for ``job_id``."""
        future = asyncio.get_running_loop().create_future()
        self._waiters[job_id].append(future)
        return future

    def resolve(self, job_id: str, result: Any = None) -> EnqueuedJob | None:
        """
        Deliver a completion event.

        Returns:
            The registered job, or None if the id was not registered.
        """
        for future in self._waiters.pop(job_id, []):
            if not future.done():
                future.set_result(result)
        return self._forget(job_id)

    def reject(self, job_id: str, error: BaseException) -> EnqueuedJob | None:
        """Deliver an error event."""
        for future in self._waiters.pop(job_id, []):
            if not future.done():
                future.set_exception(error)
        return self._forget(job_id)

    def waiting(self, job_id: str) -> bool:
        """Whether anyone is waiting for ``job_id``."""
        return bool(self._waiters.get(job_id))

    def _forget(self, job_id: str) -> EnqueuedJob | None:
        if self._registry is None:
            return None
        job = self._registry.pop(job_id)
        if job is None:
            logger.debug("Response for unknown job", extra={"job_id": job_id})
        return job
