"""
Free-time computation: gaps between busy intervals and per-day working windows.
"""

from datetime import datetime, timedelta, time
from typing import Iterable, List, Optional
from ..core.time_slot import TimeSlot
from ..core.errors import SchedulingValidationError
from ..core.constants import (
    MIN_SLOT_DURATION_MINUTES, WORK_DAY_START_HOUR, WORK_DAY_END_HOUR, START_ROUNDING_MINUTES
)


def find_available_slots(busy_intervals: Iterable, window_start: datetime, window_end: datetime,
                         min_duration_minutes: float = MIN_SLOT_DURATION_MINUTES) -> List[TimeSlot]:
    """
    Return the free gaps of [window_start, window_end) not covered by any busy interval.

    Busy intervals may be unsorted and may overlap each other. The cursor only
    moves forward, so an interval lying inside an already-passed region is
    absorbed rather than subtracted twice. Gaps shorter than
    `min_duration_minutes` are dropped.
    """
    if window_end <= window_start:
        raise SchedulingValidationError(f"Window end {window_end} must be after start {window_start}")
    if min_duration_minutes < 0:
        raise SchedulingValidationError("Minimum slot duration cannot be negative")

    min_duration = timedelta(minutes=min_duration_minutes)
    slots = []
    cursor = window_start

    for busy in sorted(busy_intervals, key=lambda interval: interval.start):
        if busy.start >= window_end:
            break
        if cursor < busy.start and busy.start - cursor >= min_duration:
            slots.append(TimeSlot(cursor, busy.start))
        if busy.end > cursor:
            cursor = busy.end

    if cursor < window_end and window_end - cursor >= min_duration:
        slots.append(TimeSlot(cursor, window_end))

    return slots


def round_up_to_interval(moment: datetime, minutes: int = START_ROUNDING_MINUTES) -> datetime:
    """Round up to the next `minutes` mark; exact marks are returned unchanged."""
    floored = moment.replace(second=0, microsecond=0)
    floored -= timedelta(minutes=floored.minute % minutes)
    if floored == moment:
        return moment
    return floored + timedelta(minutes=minutes)


def working_window_for_day(day: datetime, now: datetime,
                           start_hour: int = WORK_DAY_START_HOUR,
                           end_hour: int = WORK_DAY_END_HOUR) -> Optional[TimeSlot]:
    """
    Working hours of `day`, never starting before `now` (rounded up).

    Returns None when nothing of the day is left, e.g. today after the
    evening cutoff or a day in the past.
    """
    day_start = datetime.combine(day.date(), time(0, 0))
    window_start = day_start + timedelta(hours=start_hour)
    window_end = day_start + timedelta(hours=end_hour)

    window_start = max(window_start, round_up_to_interval(now))
    if window_start >= window_end:
        return None
    return TimeSlot(window_start, window_end)


def days_in_window(window_start: datetime, window_end: datetime) -> List[datetime]:
    """Midnight of every calendar day touched by [window_start, window_end)."""
    days = []
    current_day = datetime.combine(window_start.date(), time(0, 0))
    while current_day < window_end:
        days.append(current_day)
        current_day += timedelta(days=1)
    return days


def event_to_slot(event) -> Optional[TimeSlot]:
    """Busy slot for a calendar event; malformed events yield None."""
    if not event.start_time or not event.end_time or event.start_time >= event.end_time:
        return None
    return TimeSlot(event.start_time, event.end_time)


def task_to_slot(task) -> Optional[TimeSlot]:
    """Committed slot of a scheduled task, or None if it holds no valid schedule."""
    if not task.is_scheduled or not task.scheduled_start or not task.scheduled_end:
        return None
    if task.scheduled_start >= task.scheduled_end:
        return None
    return TimeSlot(task.scheduled_start, task.scheduled_end)


def subtract_slots(free_slots: Iterable[TimeSlot], taken: List[TimeSlot],
                   min_duration_minutes: float = 0) -> List[TimeSlot]:
    """Remove every `taken` interval from each free slot, keeping pieces of at least the minimum."""
    remaining = []
    for slot in free_slots:
        inside = [t for t in taken if t.overlaps(slot)]
        if not inside:
            if slot.duration_minutes() >= min_duration_minutes:
                remaining.append(slot)
            continue
        remaining.extend(find_available_slots(inside, slot.start, slot.end, min_duration_minutes))
    return remaining
