# leavesync/leaves/overlap.py

"""Queries for leaves whose dates collide with a candidate range."""

from typing import Optional

from django.db.models import QuerySet

from .dates import DateRange
from .models import Leave


def find_overlapping_leaves(user_id: str, date_range: DateRange, exclude_leave_id=None) -> QuerySet:
    """
    Returns the user's persisted leaves that overlap `date_range`.

    Both ranges are inclusive, so a leave ending on the day another starts
    counts as an overlap. Every status is considered.

    Args:
        user_id: The person whose leaves are searched.
        date_range: The candidate range.
        exclude_leave_id: Optional. The leave being updated, which must not
                          collide with itself.
    """
    overlapping = Leave.objects.filter(
        user_id=user_id,
        start_date__lte=date_range.end,
        end_date__gte=date_range.start,
    )
    if exclude_leave_id is not None:
        overlapping = overlapping.exclude(id=exclude_leave_id)
    return overlapping.order_by('start_date', 'created_at')


def first_overlapping_leave(user_id: str, date_range: DateRange, exclude_leave_id=None) -> Optional[Leave]:
    return find_overlapping_leaves(user_id, date_range, exclude_leave_id).first()
