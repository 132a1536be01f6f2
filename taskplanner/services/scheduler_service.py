"""
Scheduling service: the entry point routes use to drive the engine and persist its results.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from ..config import local_now, to_local_naive
from ..scheduling.core.scheduler import SlotAllocator, ScheduleSuggestion
from ..scheduling.core.errors import SchedulingValidationError
from ..scheduling.algorithms.displacement import resolve_event_conflicts

logger = logging.getLogger(__name__)


class SchedulingService:
    """Combines the allocator with a repository for one request."""

    def __init__(self, repository, clock: Callable[[], datetime] = local_now):
        self.repository = repository
        self.clock = clock
        self.allocator = SlotAllocator(repository, clock=clock)

    def generate_suggestions(self, owner_id, window_start: Optional[datetime] = None,
                             window_end: Optional[datetime] = None) -> List[ScheduleSuggestion]:
        return self.allocator.generate_suggestions(
            owner_id, to_local_naive(window_start), to_local_naive(window_end)
        )

    def apply_suggestion(self, owner_id, task_id, scheduled_start: datetime, scheduled_end: datetime,
                         create_event: bool = True) -> Tuple[Optional[object], Optional[object]]:
        """
        Commit a suggestion to the task and optionally mirror it as a calendar event.

        Returns (task, event). `task` is None when the task does not exist for
        this owner. The mirror event is best-effort: if it cannot be created
        the commitment still stands and `event` is None.
        """
        scheduled_start = to_local_naive(scheduled_start)
        scheduled_end = to_local_naive(scheduled_end)
        if scheduled_start >= scheduled_end:
            raise SchedulingValidationError("Scheduled start must be before scheduled end")

        # A task has at most one mirror event: the one for its current commitment
        self.repository.delete_derived_events(owner_id, task_id)
        task = self.repository.update_task_schedule(
            owner_id, task_id, is_scheduled=True,
            scheduled_start=scheduled_start, scheduled_end=scheduled_end,
        )
        if task is None:
            return None, None

        logger.info(f"Task {task_id} of user {owner_id} scheduled for {scheduled_start} - {scheduled_end}")
        if not create_event:
            return task, None

        event = None
        try:
            event = self.repository.create_derived_event(owner_id, {
                "title": task.title,
                "description": task.description or "",
                "start_time": scheduled_start,
                "end_time": scheduled_end,
                "task_id": task.id,
            })
        except Exception:
            logger.exception(f"Could not create calendar event for task {task_id}; schedule kept")
        return task, event

    def reschedule_task(self, owner_id, task_id,
                        excluded_start: Optional[datetime] = None) -> Optional[ScheduleSuggestion]:
        return self.allocator.generate_single_suggestion(owner_id, task_id, to_local_naive(excluded_start))

    def unschedule_task(self, owner_id, task_id):
        """
        Manual unschedule: clears the commitment and removes its mirror event.
        Returns None if the task does not exist for this owner.
        """
        task = self.repository.update_task_schedule(owner_id, task_id, is_scheduled=False)
        if task is None:
            return None
        self.repository.delete_derived_events(owner_id, task_id)
        logger.info(f"Task {task_id} of user {owner_id} unscheduled")
        return task

    def handle_event_created(self, owner_id, event) -> List[ScheduleSuggestion]:
        """Displace tasks colliding with a new or moved event and propose new slots for them."""
        return resolve_event_conflicts(self.repository, self.allocator, owner_id, event)
