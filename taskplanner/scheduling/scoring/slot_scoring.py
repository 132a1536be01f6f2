"""
Main slot scoring aggregator that combines the individual scoring functions.
"""

from datetime import datetime
from ..core.time_slot import TimeSlot

from .time_scoring import (
    calculate_time_of_day_bonus, calculate_day_ahead_penalty, calculate_extreme_hour_penalty
)
from .priority_scoring import resolve_duration_minutes

BASE_SLOT_SCORE = 100
NOT_VIABLE = -1


def calculate_fragmentation_bonus(slot: TimeSlot, task_duration_minutes: float) -> float:
    """Prefer slots that fit the task snugly over ones that leave a large remainder."""
    slack = slot.duration_minutes() - task_duration_minutes
    if slack < 30:
        return 15
    elif slack < 60:
        return 10
    return 0


def calculate_slot_score(task, slot: TimeSlot, now: datetime) -> float:
    """
    Score a task-slot pairing. Slots too short for the task get -1.
    Only scores above zero are viable.
    """
    task_duration = resolve_duration_minutes(task)
    if slot.duration_minutes() < task_duration:
        return NOT_VIABLE

    return (
        BASE_SLOT_SCORE
        + calculate_time_of_day_bonus(slot)
        + calculate_day_ahead_penalty(slot, now)
        + calculate_fragmentation_bonus(slot, task_duration)
        + calculate_extreme_hour_penalty(slot)
    )


def is_viable_score(score: float) -> bool:
    return score > 0
