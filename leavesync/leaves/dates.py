# leavesync/leaves/dates.py

"""Inclusive date range value used by the leave aggregate and the overlap query."""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class DateRange:
    """
    A closed interval of calendar days, `start` and `end` both included.

    The value does not reject `end < start`; the `Leave` aggregate reports that
    as a validation error so it can name the offending field.
    """
    start: date
    end: date

    @property
    def is_valid(self) -> bool:
        return self.start is not None and self.end is not None and self.start <= self.end

    @property
    def day_count(self) -> int:
        """Number of calendar days covered, 0 for an invalid range."""
        if not self.is_valid:
            return 0
        return (self.end - self.start).days + 1

    def contains(self, day: date) -> bool:
        return self.is_valid and self.start <= day <= self.end

    def __str__(self) -> str:
        if self.start == self.end:
            return self.start.isoformat()
        return f"{self.start.isoformat()} to {self.end.isoformat()}"
