"""
Time slot representation for the scheduling system.
"""

from datetime import datetime, timedelta
from .errors import SchedulingValidationError


class TimeSlot:
    """
    A half-open interval [start, end) of wall-clock time.

    Slots have no identity beyond their bounds and are never persisted.
    """
    __slots__ = ("start", "end")

    def __init__(self, start: datetime, end: datetime):
        if start >= end:
            raise SchedulingValidationError(f"Slot start {start} must be before end {end}")
        self.start = start
        self.end = end

    def duration(self) -> timedelta:
        return self.end - self.start

    def duration_minutes(self) -> float:
        return self.duration().total_seconds() / 60

    def overlaps(self, other) -> bool:
        return overlaps(self, other)

    def contains(self, other) -> bool:
        return self.start <= other.start and other.end <= self.end

    def trim_front(self, minutes: int) -> "TimeSlot":
        """Return the slot starting `minutes` later, with the same end."""
        return TimeSlot(self.start + timedelta(minutes=minutes), self.end)

    def take_front(self, minutes: int) -> "TimeSlot":
        """Return the leading `minutes` of this slot."""
        end = self.start + timedelta(minutes=minutes)
        if end > self.end:
            raise SchedulingValidationError(
                f"Cannot take {minutes} minutes from a {self.duration_minutes():.0f} minute slot"
            )
        return TimeSlot(self.start, end)

    def __eq__(self, other):
        if not isinstance(other, TimeSlot):
            return NotImplemented
        return self.start == other.start and self.end == other.end

    def __hash__(self):
        return hash((self.start, self.end))

    def __lt__(self, other):
        return (self.start, self.end) < (other.start, other.end)

    def __repr__(self):
        return f"TimeSlot({self.start.strftime('%Y-%m-%d %I:%M %p')} - {self.end.strftime('%I:%M %p')})"


def overlaps(a, b) -> bool:
    """Half-open overlap test; touching endpoints do not overlap."""
    return a.start < b.end and b.start < a.end
