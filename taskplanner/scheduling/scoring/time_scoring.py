"""
Time-based scoring components for slot evaluation.
"""

from datetime import datetime, timedelta
from ..core.time_slot import TimeSlot
from ..core.constants import WORK_DAY_START_HOUR


def calculate_time_of_day_bonus(slot: TimeSlot) -> float:
    """
    Reward slots close to the start of the working day.
    20 points at 9 AM, dropping by 2 per hour and bottoming out at 0.
    """
    return max(0, 20 - (slot.start.hour - WORK_DAY_START_HOUR) * 2)


def calculate_day_ahead_penalty(slot: TimeSlot, now: datetime) -> float:
    """-5 for every whole day between now and the slot start."""
    days_ahead = (slot.start - now) // timedelta(days=1)
    return -5 * days_ahead


def calculate_extreme_hour_penalty(slot: TimeSlot) -> float:
    """Penalize very early (before 8 AM) and late (8 PM onwards) starts."""
    hour = slot.start.hour
    if hour < 8:
        return -30
    if hour >= 20:
        return -25
    return 0
