"""
PawFeed exception classes.

Errors raised below the service layer.  Services translate engine and
store failures into HTTP responses; :class:`PawFeedError` subclasses
that escape are rendered by the handler registered in
:mod:`pawfeed.main`.
"""

from typing import Optional


class PawFeedError(Exception):
    """Base exception carrying the HTTP status to report."""

    def __init__(self, message: str = "An error occurred", status_code: int = 500,
                 detail: Optional[str] = None):
        self.message = message
        self.status_code = status_code
        self.detail = detail or message
        super().__init__(self.message)


class ScheduleCommitError(PawFeedError):
    """The atomic schedule batch could not be committed.

    Nothing from the batch was applied.  Callers retry the whole
    recalculation from a fresh read, never the stale batch.
    """

    def __init__(self, message: str = "Could not save feeding schedules, please retry",
                 detail: Optional[str] = None):
        super().__init__(message=message, status_code=503, detail=detail)
