"""
Type definitions for the job queue.
"""

from lsp_queue.types.events import ErrorNotification
from lsp_queue.types.job import EnqueuedJob, Job

__all__ = [
    # Job types
    "Job",
    "EnqueuedJob",
    # Event types
    "ErrorNotification",
]
