"""
Event type definitions for client-facing notifications.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from lsp_queue.constants import Request


class ErrorNotification(BaseModel):
    """
    Notification surfaced to the client when the scheduler has to drop work.
    """

    request: Request = Request.INTERNAL_ERROR
    message: str
    actions: list[dict[str, Any]] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=datetime.utcnow)

    @classmethod
    def failed_to_read_file(cls, uri: str, error: BaseException) -> "ErrorNotification":
        """Create the notification for a resource that could not be loaded."""
        return cls(message=f"Failed to read file '{uri}': {error}")
