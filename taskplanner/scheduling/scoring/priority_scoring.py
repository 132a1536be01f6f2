"""
Priority-based scoring used to decide the order in which tasks are placed.
"""

from datetime import datetime, timedelta
from typing import List
from ..core.constants import DEFAULT_TASK_DURATION_MINUTES
from ..core.errors import SchedulingValidationError


PRIORITY_WEIGHTS = {
    "high": 100,
    "medium": 50,
    "low": 25,
}
DEFAULT_PRIORITY_WEIGHT = PRIORITY_WEIGHTS["medium"]

ESTIMATE_BONUS = 10


def enum_value(value) -> str:
    # Accepts plain strings as well as str-based enum members
    return getattr(value, "value", value)


def calculate_priority_weight(task) -> int:
    """Map priority to base weight: High: 100, Medium: 50, Low: 25, anything else: 50."""
    return PRIORITY_WEIGHTS.get(enum_value(task.priority), DEFAULT_PRIORITY_WEIGHT)


def calculate_deadline_urgency_score(task, now: datetime) -> int:
    """
    Urgency bonus based on how close the due date is.
    Due today or earlier: 100, within 1 day: 80, 3 days: 60, 7 days: 40, later: 20.
    Tasks without a due date get nothing.
    """
    due_at = task.due_at
    if not due_at:
        return 0

    if due_at.date() <= now.date():
        return 100

    time_until_due = due_at - now
    if time_until_due <= timedelta(days=1):
        return 80
    elif time_until_due <= timedelta(days=3):
        return 60
    elif time_until_due <= timedelta(days=7):
        return 40
    else:
        return 20


def calculate_priority_score(task, now: datetime) -> int:
    """
    Task ordering score: priority weight + deadline urgency + estimate bonus.
    Higher score = placed earlier.
    """
    score = calculate_priority_weight(task)
    score += calculate_deadline_urgency_score(task, now)

    # Tasks with an explicit estimate are easier to size correctly
    if task.estimated_duration_minutes:
        score += ESTIMATE_BONUS

    return score


def rank_tasks(tasks, now: datetime) -> List:
    """Sort tasks by priority score, highest first. Ties keep their original order."""
    return sorted(tasks, key=lambda task: calculate_priority_score(task, now), reverse=True)


def resolve_duration_minutes(task) -> int:
    """The task's estimate, or the default when none is set."""
    estimate = task.estimated_duration_minutes
    if estimate is None:
        return DEFAULT_TASK_DURATION_MINUTES
    if estimate <= 0:
        raise SchedulingValidationError(
            f"Task {task.id} has a non-positive duration estimate ({estimate} minutes)"
        )
    return estimate
