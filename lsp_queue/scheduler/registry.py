"""
Job registry.

Assigns identifiers to submitted jobs and keeps them until the worker's
response for that identifier has been delivered.
"""

import itertools

from lsp_queue.types.job import EnqueuedJob, Job


class JobRegistry:
    """Bookkeeping of submitted jobs by identifier."""

    def __init__(self) -> None:
        # Never reset, so ids stay unique across shutdowns
        self._counter = itertools.count()
        self._jobs: dict[str, EnqueuedJob] = {}

    def register(self, job: Job) -> EnqueuedJob:
        """
        Assign the next identifier to a job and remember it.

        Args:
            job: The submitted job.

        Returns:
            The job with its identifier attached.
        """
        job_id = str(next(self._counter))
        enqueued = EnqueuedJob.from_job(job, job_id)
        self._jobs[job_id] = enqueued
        return enqueued

    def get(self, job_id: str) -> EnqueuedJob | None:
        return self._jobs.get(job_id)

    def pop(self, job_id: str) -> EnqueuedJob | None:
        """Forget a job once answered, or once it can no longer be sent."""
        return self._jobs.pop(job_id, None)

    def clear(self) -> int:
        """Forget every job. Returns how many were unresolved."""
        count = len(self._jobs)
        self._jobs.clear()
        return count

    def __len__(self) -> int:
        return len(self._jobs)

    def __contains__(self, job_id: object) -> bool:
        return job_id in self._jobs
