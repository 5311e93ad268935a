# leavesync/leaves/exceptions.py

"""
Error types raised by the leave ingestion engine.

The three categories are kept distinct so every caller can react differently:
the web API maps them to 400 / 409 / 500, and the Slack flow turns them into a
failure reply in the request thread.
"""

from datetime import date
from typing import Optional


class LeaveError(Exception):
    """Base class for every error raised while ingesting a leave."""


class LeaveValidationError(LeaveError):
    """An attribute of the leave is missing or breaks an aggregate rule."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class OverlappingLeaveError(LeaveError):
    """
    The requested dates collide with another leave of the same user.

    Attributes:
        user_id: The user whose leaves overlap.
        start_date / end_date: The dates that were requested.
        existing_leave_id: Identity of the colliding, already persisted leave.
        existing_start_date / existing_end_date: The colliding leave's dates.
    """

    def __init__(self, user_id: str, start_date: date, end_date: date,
                 existing_leave_id, existing_start_date: date, existing_end_date: date):
        super().__init__(
            f"User {user_id} already has a leave from {existing_start_date} to "
            f"{existing_end_date} that overlaps with the requested leave "
            f"{start_date} to {end_date} (ID: {existing_leave_id})"
        )
        self.user_id = user_id
        self.start_date = start_date
        self.end_date = end_date
        self.existing_leave_id = existing_leave_id
        self.existing_start_date = existing_start_date
        self.existing_end_date = existing_end_date


class DataInconsistencyError(LeaveError):
    """Stored data contradicts itself, e.g. an origin reference without its leave."""
