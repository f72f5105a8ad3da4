"""
Scheduler module.
Contains the job registry, the dual queue, the priority coalescer, the
dispatch loop and shutdown coordination.
"""

from lsp_queue.scheduler.coalescer import PriorityCoalescer
from lsp_queue.scheduler.dispatcher import DispatchLoop
from lsp_queue.scheduler.lanes import DualQueue, classify, is_priority_job
from lsp_queue.scheduler.protocols import (
    CompletionTracker,
    ErrorSink,
    ResourceLoader,
    Transport,
    WorkerStatus,
    log_error_notification,
)
from lsp_queue.scheduler.registry import JobRegistry
from lsp_queue.scheduler.scheduler import JobScheduler
from lsp_queue.scheduler.shutdown import ShutdownCoordinator

__all__ = [
    "JobRegistry",
    "CompletionTracker",
    "ErrorSink",
    "ResourceLoader",
    "Transport",
    "WorkerStatus",
    "log_error_notification",
    "DualQueue",
    "classify",
    "is_priority_job",
    "PriorityCoalescer",
    "DispatchLoop",
    "ShutdownCoordinator",
    "JobScheduler",
]
