"""
Exceptions raised by the job queue.
"""


class QueueError(Exception):
    """Base class for job queue errors."""


class ResourceLoadError(QueueError):
    """
    A source file or package could not be read before dispatch.

    The job that needed the resource is skipped, never retried.
    """

    def __init__(self, uri: str, reason: BaseException | str):
        self.uri = uri
        self.reason = reason
        super().__init__(f"{uri}: {reason}")
