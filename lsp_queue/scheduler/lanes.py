"""
The dual queue: a priority lane for API mutations and a normal lane for
everything else.
"""

import logging
from collections import deque
from collections.abc import Iterable

from lsp_queue.constants import PRIORITY_REQUESTS, Lane, Request
from lsp_queue.observability.metrics import get_metrics
from lsp_queue.scheduler.registry import JobRegistry
from lsp_queue.types.job import EnqueuedJob, Job

logger = logging.getLogger(__name__)


def classify(job: Job) -> Lane:
    """Get the lane a job travels in."""
    if job.request in PRIORITY_REQUESTS:
        return Lane.PRIORITY
    return Lane.NORMAL


def is_priority_job(job: Job) -> bool:
    """Check if a job is one of the fast-lane API mutations."""
    return classify(job) is Lane.PRIORITY


class DualQueue:
    """
    Jobs awaiting dispatch, in two lanes.

    Ordering rules:
    - The priority lane is always emptied before the normal lane is touched
    - Within a lane jobs are FIFO
    - The normal lane holds at most one check job, always at its head
    - Taking the last job off the priority lane queues a fresh check job
    """

    def __init__(self, registry: JobRegistry, name: str = "default"):
        """
        Initialize the queue.

        Args:
            registry: Registry that identifies synthesized check jobs and
                forgets replaced ones.
            name: Label for the depth gauge, one per scheduler.
        """
        self._registry = registry
        self.name = name
        self._lanes: dict[Lane, deque[EnqueuedJob]] = {
            Lane.PRIORITY: deque(),
            Lane.NORMAL: deque(),
        }
        self._metrics = get_metrics()

    def push_priority(self, jobs: Iterable[EnqueuedJob]) -> None:
        """Append a flushed batch of mutations to the priority lane."""
        self._lanes[Lane.PRIORITY].extend(jobs)
        self._update_depth(Lane.PRIORITY)

    def push_normal(self, job: EnqueuedJob) -> None:
        """
        Add a job to the normal lane.

        A check job replaces any queued check job and goes to the head;
        every other job goes to the tail. Replaced checks are never sent,
        so they are removed from the registry as well.
        """
        lane = self._lanes[Lane.NORMAL]
        if job.request == Request.LSP_CHECK:
            remaining = []
            for queued in lane:
                if queued.request != Request.LSP_CHECK:
                    remaining.append(queued)
                    continue
                self._registry.pop(queued.id)
                logger.debug(
                    "Replacing queued check job",
                    extra={"job_id": job.id, "replaced_id": queued.id},
                )
            lane.clear()
            lane.append(job)
            lane.extend(remaining)
        else:
            lane.append(job)
        self._update_depth(Lane.NORMAL)

    def push(self, job: EnqueuedJob) -> None:
        """Add a job to the lane it belongs to, without coalescing."""
        if classify(job) is Lane.PRIORITY:
            self.push_priority([job])
        else:
            self.push_normal(job)

    def dequeue(self) -> EnqueuedJob | None:
        """
        Take the next job to dispatch.

        Returns:
            The head of the priority lane if it has jobs, else the head of
            the normal lane, else None.
        """
        priority = self._lanes[Lane.PRIORITY]
        if priority:
            job = priority.popleft()
            self._update_depth(Lane.PRIORITY)
            if not priority:
                # A burst of mutations is always followed by a check
                self.push_normal(self._registry.register(Job(request=Request.LSP_CHECK)))
            return job

        normal = self._lanes[Lane.NORMAL]
        if normal:
            job = normal.popleft()
            self._update_depth(Lane.NORMAL)
            return job

        return None

    def drain_all(self) -> int:
        """Discard every queued job. Returns how many were discarded."""
        count = len(self)
        for lane, jobs in self._lanes.items():
            jobs.clear()
            self._update_depth(lane)
        return count

    def lane_length(self, lane: Lane) -> int:
        return len(self._lanes[lane])

    def snapshot(self, lane: Lane) -> list[EnqueuedJob]:
        """Get the jobs in a lane, head first."""
        return list(self._lanes[lane])

    def __len__(self) -> int:
        return sum(len(jobs) for jobs in self._lanes.values())

    def _update_depth(self, lane: Lane) -> None:
        self._metrics.update_queue_depth(self.name, lane, len(self._lanes[lane]))
