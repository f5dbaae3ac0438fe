"""
Error taxonomy for the task board.

Local problems (bad input, unknown id) never reach the network.
Remote problems are wrapped into FetchError (load) or SyncError (writes).
"""
from typing import Optional


class TaskBoardError(Exception):
    """Base class for all task board errors."""
    pass


class ValidationError(TaskBoardError):
    """Raised when a draft or patch fails client-side validation."""
    pass


class NotFoundError(TaskBoardError):
    """Raised when a task id is not present in the local collection."""
    pass


class StoreError(TaskBoardError):
    """Raised by the store clients on transport, status or decode failures."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class FetchError(TaskBoardError):
    """Loading the task list for an owner failed."""
    pass


class SyncError(TaskBoardError):
    """A create, patch or delete could not be applied remotely."""
    pass
