# leavesync/leaves/ingestion.py

"""
Idempotent Multi-Origin Leave Ingestion.

Every origin (web API, Slack bot, calendar or timesheet sync) reports leaves
through `ingest_leave`. The (origin kind, origin-local id) pair identifies the
report: the first time a pair is seen a new Leave is created and the pair is
recorded as its OriginReference; every later report with the same pair
overwrites that leave in place. Either way the result must keep the user's
leaves free of date overlaps.

Each call runs in its own transaction. Outbound propagation to other channels
happens only after the transaction has committed and can never fail the call.
A caller that already holds an open transaction gets a savepoint inside it
instead, so its commit or rollback decides the outcome; none of the views or
Celery tasks open one (`ATOMIC_REQUESTS` is off).

Concurrent first reports for the same pair can both miss the lookup and try to
insert. The loser hits the unique constraint on the origin reference, its
transaction is rolled back and the whole find-or-create runs once more, this
time finding the winner's reference and updating that leave.
"""

# Standard library imports
import logging

# Django imports
from django.db import IntegrityError, transaction

# Local application imports
from .dates import DateRange
from .exceptions import DataInconsistencyError, OverlappingLeaveError
from .models import DurationType, Leave, OriginReference
from .overlap import first_overlapping_leave
from .sync import propagate_leave

LOGGER = logging.getLogger(__name__)

# One regular attempt plus one retry after losing an insert race.
MAX_INGEST_ATTEMPTS = 2


def ingest_leave(*, origin_kind: str, origin_id: str, user_id: str, date_range: DateRange,
                 leave_type: str, status: str, duration_type: str = DurationType.FULL_DAY) -> Leave:
    """
    Creates or updates the leave reported by one origin.

    Args:
        origin_kind: The reporting system, one of `OriginKind`.
        origin_id: The leave's identifier inside that system.
        user_id: The person on leave.
        date_range: Inclusive start and end dates.
        leave_type: One of `LeaveType`.
        status: One of `LeaveStatus`.
        duration_type: One of `DurationType`, full day by default.

    Returns:
        The persisted Leave.

    Raises:
        LeaveValidationError: an attribute breaks an aggregate rule.
        OverlappingLeaveError: another leave of the user overlaps the dates.
        DataInconsistencyError: stored references contradict each other.
    """
    LOGGER.info(
        f"Ingesting leave from {origin_kind}:{origin_id} for user {user_id} "
        f"({date_range}, {leave_type}, {status}, {duration_type})"
    )

    leave = None
    for attempt in range(1, MAX_INGEST_ATTEMPTS + 1):
        try:
            leave = _ingest_in_transaction(
                origin_kind=origin_kind,
                origin_id=origin_id,
                user_id=user_id,
                date_range=date_range,
                leave_type=leave_type,
                status=status,
                duration_type=duration_type,
            )
            break
        except IntegrityError as e:
            if attempt == MAX_INGEST_ATTEMPTS:
                LOGGER.error(
                    f"Origin reference {origin_kind}:{origin_id} still conflicts after "
                    f"{attempt} attempts: {e}"
                )
                raise DataInconsistencyError(
                    f"Could not record origin reference {origin_kind}:{origin_id}"
                ) from e
            LOGGER.warning(
                f"Origin reference {origin_kind}:{origin_id} was created concurrently; "
                f"retrying as an update"
            )

    propagate_leave(leave, origin_kind)

    LOGGER.info(f"Successfully ingested leave {leave.id} from {origin_kind}:{origin_id}")
    return leave


def _ingest_in_transaction(*, origin_kind, origin_id, user_id, date_range,
                           leave_type, status, duration_type) -> Leave:
    with transaction.atomic():
        leave = _find_leave_for_origin(origin_kind, origin_id)
        if leave is None:
            LOGGER.debug(f"No leave known for {origin_kind}:{origin_id}; creating one")
            leave = Leave()
            leave.attach_origin(origin_kind, origin_id)
        else:
            LOGGER.debug(f"Updating leave {leave.id} reported again by {origin_kind}:{origin_id}")

        leave.apply(
            user_id=user_id,
            date_range=date_range,
            leave_type=leave_type,
            status=status,
            duration_type=duration_type,
        )
        leave.validate()
        _check_no_overlap(leave)
        leave.save_with_origins()
    return leave


def _find_leave_for_origin(origin_kind: str, origin_id: str):
    """
    Returns the leave an origin reference points to, locked for update.

    Raises:
        DataInconsistencyError: the reference exists but its leave does not.
    """
    leave_id = (
        OriginReference.objects
        .filter(origin_kind=origin_kind, origin_id=origin_id)
        .values_list('leave_id', flat=True)
        .first()
    )
    if leave_id is None:
        return None

    leave = Leave.objects.select_for_update().filter(pk=leave_id).first()
    if leave is None:
        LOGGER.error(
            f"Origin reference {origin_kind}:{origin_id} points to non-existent leave {leave_id}"
        )
        raise DataInconsistencyError(
            f"Origin reference {origin_kind}:{origin_id} points to non-existent leave {leave_id}"
        )
    return leave


def _check_no_overlap(leave: Leave) -> None:
    exclude_id = None if leave.is_new else leave.id
    existing = first_overlapping_leave(leave.user_id, leave.date_range, exclude_leave_id=exclude_id)
    if existing is not None:
        LOGGER.info(
            f"Rejecting leave for user {leave.user_id} ({leave.date_range}): "
            f"overlaps leave {existing.id} ({existing.date_range})"
        )
        raise OverlappingLeaveError(
            user_id=leave.user_id,
            start_date=leave.start_date,
            end_date=leave.end_date,
            existing_leave_id=existing.id,
            existing_start_date=existing.start_date,
            existing_end_date=existing.end_date,
        )
