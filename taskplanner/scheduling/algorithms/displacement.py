"""
Displacement of scheduled tasks that collide with a newly created or moved calendar event.
"""

import logging
from datetime import datetime
from typing import List, Optional
from ..core.scheduler import SlotAllocator, ScheduleSuggestion, is_completed
from ..utils.slot_utils import event_to_slot, task_to_slot

logger = logging.getLogger(__name__)


def find_conflicting_tasks(tasks, event) -> List:
    """
    Scheduled, not yet completed tasks whose committed interval overlaps the event.
    The task an event mirrors never conflicts with it.
    """
    event_slot = event_to_slot(event)
    if event_slot is None:
        return []

    mirrored_task_id = getattr(event, "task_id", None)
    conflicting = []
    for task in tasks:
        if is_completed(task) or task.id == mirrored_task_id:
            continue
        task_slot = task_to_slot(task)
        if task_slot and task_slot.overlaps(event_slot):
            conflicting.append(task)
    return conflicting


def resolve_event_conflicts(repository, allocator: SlotAllocator, owner_id, new_event,
                            now: Optional[datetime] = None) -> List[ScheduleSuggestion]:
    """
    Unschedule every task displaced by `new_event` and propose replacement slots.

    Displaced tasks lose their mirror events along with their commitment.
    Only suggestions for the displaced tasks are returned; other pending tasks
    are left for the next regular suggestion run.
    """
    scheduled_tasks = repository.fetch_tasks(owner_id, include_completed=False, is_scheduled=True)
    displaced = find_conflicting_tasks(scheduled_tasks, new_event)
    if not displaced:
        return []

    displaced_ids = set()
    for task in displaced:
        repository.update_task_schedule(owner_id, task.id, is_scheduled=False)
        repository.delete_derived_events(owner_id, task.id)
        displaced_ids.add(task.id)
        logger.info(
            f"Unscheduled task {task.id} ('{task.title}') of user {owner_id}: "
            f"conflicts with event '{getattr(new_event, 'title', '')}'"
        )

    suggestions = allocator.generate_suggestions(owner_id, now=now)
    return [suggestion for suggestion in suggestions if suggestion.task_id in displaced_ids]
