"""
Job-related type definitions.
"""

from pydantic import BaseModel, ConfigDict

from lsp_queue.constants import Request


class Job(BaseModel):
    """
    A request for the compiler worker.

    Kind-specific payload (positions, names, ...) is carried as extra fields
    and forwarded to the transport untouched.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    request: Request
    uri: str | None = None
    src: str | None = None
    base64: str | None = None


class EnqueuedJob(Job):
    """
    A job that has been assigned an identifier by the registry.
    The identifier correlates the job with its asynchronous result.
    """

    id: str

    @classmethod
    def from_job(cls, job: Job, job_id: str) -> "EnqueuedJob":
        """Attach an identifier to a submitted job."""
        data = job.model_dump()
        data["id"] = job_id
        return cls(**data)
