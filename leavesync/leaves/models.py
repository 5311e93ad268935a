# leavesync/leaves/models.py

"""
Database Models for the leavesync Application.

This module defines the canonical leave record and the origin references that
point at it. A leave can be announced by several systems (the web API, the
Slack bot, later calendar or timesheet sync); each announcement carries an
(origin kind, origin-local id) pair, and that pair is what makes ingestion
idempotent: seeing the same pair again updates the leave it already points to
instead of creating a second one.

The `Leave` model is also the aggregate root. Its `validate()` method holds the
invariants every persisted leave must satisfy, except the cross-record overlap
rule which needs a query and lives in `leaves.overlap`.
"""

# Standard library imports
import uuid
from typing import Any, Dict, List

# Django imports
from django.db import models

# Local application imports
from .dates import DateRange
from .exceptions import LeaveValidationError


# ==============================================================================
# CHOICES
# ==============================================================================

class LeaveType(models.TextChoices):
    ANNUAL_LEAVE = 'ANNUAL_LEAVE', 'Annual Leave'
    OPTIONAL_HOLIDAY = 'OPTIONAL_HOLIDAY', 'Optional Holiday'


class LeaveStatus(models.TextChoices):
    REQUESTED = 'REQUESTED', 'Requested'
    APPROVED = 'APPROVED', 'Approved'
    CANCELLED = 'CANCELLED', 'Cancelled'


class DurationType(models.TextChoices):
    FULL_DAY = 'FULL_DAY', 'Full Day'
    FIRST_HALF = 'FIRST_HALF', 'First Half'
    SECOND_HALF = 'SECOND_HALF', 'Second Half'


class OriginKind(models.TextChoices):
    WEB = 'WEB', 'Web'
    SLACK = 'SLACK', 'Slack'
    CALENDAR = 'CALENDAR', 'Calendar'
    KIMAI = 'KIMAI', 'Kimai'


# ==============================================================================
# CORE DATA MODELS
# ==============================================================================

class Leave(models.Model):
    """
    A single leave period for one person.

    Attributes:
        id (UUID): Assigned when the instance is built, persisted on first save.
        user_id (str): The person's identifier in the originating systems
                       (for Slack leaves, the Slack user ID).
        start_date (date): First day of leave, inclusive.
        end_date (date): Last day of leave, inclusive.
        leave_type (str): One of `LeaveType`.
        status (str): One of `LeaveStatus`.
        duration_type (str): One of `DurationType`; half days cover a single date.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user_id = models.CharField(max_length=255, db_index=True, help_text="Identifier of the person on leave")
    start_date = models.DateField(help_text="The first day of leave.")
    end_date = models.DateField(help_text="The last day of leave.")
    leave_type = models.CharField(max_length=50, choices=LeaveType.choices)
    status = models.CharField(max_length=50, choices=LeaveStatus.choices)
    duration_type = models.CharField(
        max_length=20,
        choices=DurationType.choices,
        default=DurationType.FULL_DAY,
    )

    # --- Timestamps ---
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Leave"
        verbose_name_plural = "Leaves"
        ordering = ['-start_date']
        indexes = [
            models.Index(fields=['user_id', 'start_date', 'end_date'], name='idx_leave_user_dates'),
            models.Index(fields=['status'], name='idx_leave_status'),
        ]

    def __str__(self) -> str:
        return f"Leave {self.id} for {self.user_id}: {self.date_range} ({self.status})"

    # --- Aggregate behaviour ---

    @property
    def date_range(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    @property
    def is_new(self) -> bool:
        """True until the leave has been written to the database once."""
        return self._state.adding

    @property
    def pending_origins(self) -> List["OriginReference"]:
        """Origin references attached in memory but not saved yet."""
        return self.__dict__.setdefault('_pending_origins', [])

    def apply(self, *, user_id: str, date_range: DateRange, leave_type: str,
              status: str, duration_type: str) -> None:
        """Replaces every mutable attribute with the values from an ingestion."""
        self.user_id = user_id
        self.start_date = date_range.start
        self.end_date = date_range.end
        self.leave_type = leave_type
        self.status = status
        self.duration_type = duration_type

    def attach_origin(self, origin_kind: str, origin_id: str) -> "OriginReference":
        """Attaches a new origin reference; it is saved together with the leave."""
        reference = OriginReference(leave=self, origin_kind=origin_kind, origin_id=origin_id)
        self.pending_origins.append(reference)
        return reference

    def has_origin_references(self) -> bool:
        if self.pending_origins:
            return True
        if self.is_new:
            return False
        return self.origin_references.exists()

    def validate(self) -> None:
        """
        Checks the rules a leave must satisfy before it can be persisted.

        Raises:
            LeaveValidationError: naming the first offending field.
        """
        if not self.user_id or not str(self.user_id).strip():
            raise LeaveValidationError("User ID is required", field="user_id")
        if self.start_date is None:
            raise LeaveValidationError("Start date is required", field="start_date")
        if self.end_date is None:
            raise LeaveValidationError("End date is required", field="end_date")
        if self.leave_type not in LeaveType.values:
            raise LeaveValidationError(f"Invalid leave type: {self.leave_type!r}", field="leave_type")
        if self.status not in LeaveStatus.values:
            raise LeaveValidationError(f"Invalid leave status: {self.status!r}", field="status")
        if self.duration_type not in DurationType.values:
            raise LeaveValidationError(f"Invalid duration type: {self.duration_type!r}", field="duration_type")

        if self.start_date > self.end_date:
            raise LeaveValidationError("Start date cannot be after end date", field="end_date")
        if self.duration_type != DurationType.FULL_DAY and self.start_date != self.end_date:
            raise LeaveValidationError(
                "Half-day leaves must have the same start and end date", field="end_date"
            )
        if self.status == LeaveStatus.APPROVED and self.date_range.day_count < 1:
            raise LeaveValidationError("Approved leaves must be at least 1 day long", field="end_date")

        if self.is_new and not self.has_origin_references():
            raise LeaveValidationError(
                "New leaves must have at least one origin reference", field="origin_references"
            )

    def save_with_origins(self) -> None:
        """Saves the leave and then every pending origin reference."""
        self.save()
        for reference in self.pending_origins:
            reference.leave = self
            reference.save()
        self.pending_origins.clear()

    def as_dict(self) -> Dict[str, Any]:
        """The canonical representation returned to ingestion callers."""
        return {
            "id": str(self.id),
            "user_id": self.user_id,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "type": self.leave_type,
            "status": self.status,
            "duration_type": self.duration_type,
            "origin_references": [
                {"origin_kind": ref.origin_kind, "origin_id": ref.origin_id}
                for ref in self.origin_references.order_by('created_at')
            ],
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class OriginReference(models.Model):
    """
    Points from one source system's local identifier to a Leave.

    The pair (origin_kind, origin_id) is globally unique; the database
    constraint is the last line of defence when two ingestions for the same
    brand-new pair race each other.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    leave = models.ForeignKey(Leave, on_delete=models.CASCADE, related_name='origin_references')
    origin_kind = models.CharField(max_length=50, choices=OriginKind.choices)
    origin_id = models.CharField(max_length=255, help_text="ID of the leave in the origin system")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Origin Reference"
        verbose_name_plural = "Origin References"
        constraints = [
            models.UniqueConstraint(fields=['origin_kind', 'origin_id'], name='uk_origin_reference_kind_id'),
        ]

    def __str__(self) -> str:
        return f"{self.origin_kind}:{self.origin_id}"
