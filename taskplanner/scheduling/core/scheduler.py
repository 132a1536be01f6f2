"""
Slot allocator that turns unscheduled tasks into concrete schedule suggestions.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, time
from typing import Callable, List, Optional, Tuple

from .time_slot import TimeSlot
from .errors import SchedulingValidationError
from .constants import DEFAULT_HORIZON_DAYS, WORK_DAY_START_HOUR, WORK_DAY_END_HOUR
from ..scoring.slot_scoring import calculate_slot_score, is_viable_score
from ..scoring.priority_scoring import rank_tasks, resolve_duration_minutes, enum_value
from ..utils.slot_utils import (
    find_available_slots, working_window_for_day, days_in_window, event_to_slot, task_to_slot,
    subtract_slots
)

logger = logging.getLogger(__name__)

COMPLETED = "completed"


@dataclass(frozen=True)
class ScheduleSuggestion:
    """A proposed placement for one task. Generated fresh on every call, never stored."""
    task_id: int
    task_title: str
    suggested_start: datetime
    suggested_end: datetime
    priority: str
    estimated_duration_minutes: int


def is_completed(task) -> bool:
    return enum_value(task.status) == COMPLETED


# ================================
# INITIALIZATION & SETUP
# ================================

class SlotAllocator:
    """
    Greedy allocator: tasks are placed one by one in priority order, each into
    its best-scoring free slot, and every placement is carried forward so later
    tasks cannot reuse it.

    `repository` is the owner-scoped data source (see
    services.repository.ScheduleRepository). `clock` supplies "now" when a
    call does not pass one explicitly.
    """
    def __init__(self, repository, clock: Callable[[], datetime] = datetime.now,
                 horizon_days: int = DEFAULT_HORIZON_DAYS,
                 work_day_start_hour: int = WORK_DAY_START_HOUR,
                 work_day_end_hour: int = WORK_DAY_END_HOUR):
        if horizon_days <= 0:
            raise SchedulingValidationError("Horizon must cover at least one day")
        if not 0 <= work_day_start_hour < work_day_end_hour <= 24:
            raise SchedulingValidationError(
                f"Invalid working hours {work_day_start_hour}-{work_day_end_hour}"
            )
        self.repository = repository
        self.clock = clock
        self.horizon_days = horizon_days
        self.work_day_start_hour = work_day_start_hour
        self.work_day_end_hour = work_day_end_hour

    def default_window(self, now: datetime) -> Tuple[datetime, datetime]:
        """Start of today through the end of the last horizon day."""
        start = datetime.combine(now.date(), time(0, 0))
        end = start + timedelta(days=self.horizon_days) - timedelta(microseconds=1)
        return start, end

    def _resolve_window(self, now: datetime, window_start: Optional[datetime] = None,
                        window_end: Optional[datetime] = None) -> Tuple[datetime, datetime]:
        default_start, default_end = self.default_window(now)
        if window_start is None:
            window_start = default_start
        if window_end is None:
            window_end = datetime.combine(window_start.date(), time(0, 0)) + (default_end - default_start)
        if window_end <= window_start:
            raise SchedulingValidationError(
                f"Window end {window_end} must be after window start {window_start}"
            )
        return window_start, window_end

# ================================
# SUGGESTION GENERATION
# ================================

    def generate_suggestions(self, owner_id, window_start: Optional[datetime] = None,
                             window_end: Optional[datetime] = None,
                             now: Optional[datetime] = None) -> List[ScheduleSuggestion]:
        """
        Propose a slot for every pending, unscheduled task of the owner.
        Tasks with no viable slot are left out of the result.
        """
        now = now or self.clock()
        window_start, window_end = self._resolve_window(now, window_start, window_end)

        tasks = self.repository.fetch_tasks(owner_id, include_completed=False, is_scheduled=False)
        events = self.repository.fetch_events(owner_id, window_start, window_end)
        tasks = [task for task in tasks if not is_completed(task) and not task.is_scheduled]

        # Reject bad estimates before any slot computation
        durations = {task.id: resolve_duration_minutes(task) for task in tasks}

        busy = [slot for slot in map(event_to_slot, events) if slot]
        pool = self.collect_free_slots(busy, window_start, window_end, now)
        ranked = rank_tasks(tasks, now)

        suggestions: List[ScheduleSuggestion] = []
        allocated: List[TimeSlot] = []
        for task in ranked:
            suggestion, allocated = self._place_task(task, durations[task.id], pool, allocated, now)
            if suggestion is None:
                logger.debug(f"No viable slot for task {task.id} ('{task.title}')")
                continue
            suggestions.append(suggestion)

        logger.info(
            f"Generated {len(suggestions)} suggestion(s) for {len(ranked)} task(s) "
            f"of user {owner_id} in {window_start:%Y-%m-%d %H:%M} - {window_end:%Y-%m-%d %H:%M}"
        )
        return suggestions

    def generate_single_suggestion(self, owner_id, task_id, excluded_start: Optional[datetime] = None,
                                   now: Optional[datetime] = None) -> Optional[ScheduleSuggestion]:
        """
        Find a slot for one task, optionally steering away from `excluded_start`
        (the start of a suggestion the user just rejected).

        Returns None when the task does not exist for this owner, is completed,
        or has no alternative slot.
        """
        now = now or self.clock()
        task = self.repository.get_task(owner_id, task_id)
        if task is None:
            return None
        if is_completed(task):
            logger.debug(f"Task {task_id} is completed; nothing to reschedule")
            return None

        duration = resolve_duration_minutes(task)
        window_start, window_end = self._resolve_window(now)

        events = self.repository.fetch_events(owner_id, window_start, window_end)
        scheduled_tasks = self.repository.fetch_tasks(owner_id, include_completed=True, is_scheduled=True)

        # Other tasks' commitments are busy time; this task's own one and its mirror event are not
        busy = [slot for slot in (event_to_slot(event) for event in events if event.task_id != task.id) if slot]
        busy.extend(
            slot for slot in (task_to_slot(other) for other in scheduled_tasks if other.id != task.id)
            if slot
        )
        if excluded_start is not None:
            busy.append(TimeSlot(excluded_start, excluded_start + timedelta(minutes=duration)))

        pool = self.collect_free_slots(busy, window_start, window_end, now)
        candidates = self.rank_slots(task, pool, now)
        if excluded_start is not None:
            candidates = [slot for slot in candidates if slot.start != excluded_start]
        if not candidates:
            logger.info(f"No alternative slot for task {task_id} of user {owner_id}")
            return None

        return self._build_suggestion(task, candidates[0].take_front(duration), duration)

# ================================
# SLOT FINDING & OPTIMIZATION
# ================================

    def collect_free_slots(self, busy: List[TimeSlot], window_start: datetime, window_end: datetime,
                           now: datetime) -> List[TimeSlot]:
        """Free slots within each day's working hours, in chronological order across days."""
        pool = []
        for day in days_in_window(window_start, window_end):
            working = working_window_for_day(day, now, self.work_day_start_hour, self.work_day_end_hour)
            if working is None:
                continue

            start = max(working.start, window_start)
            end = min(working.end, window_end)
            if start >= end:
                continue

            day_window = TimeSlot(start, end)
            day_busy = [slot for slot in busy if slot.overlaps(day_window)]
            pool.extend(find_available_slots(day_busy, start, end))
        return pool

    def rank_slots(self, task, slots: List[TimeSlot], now: datetime) -> List[TimeSlot]:
        """Viable slots for the task, best score first; ties go to the earliest start."""
        scored = []
        for slot in slots:
            score = calculate_slot_score(task, slot, now)
            if is_viable_score(score):
                scored.append((score, slot))
        scored.sort(key=lambda pair: (-pair[0], pair[1].start))
        return [slot for _, slot in scored]

    def _place_task(self, task, duration: int, pool: List[TimeSlot], allocated: List[TimeSlot],
                    now: datetime) -> Tuple[Optional[ScheduleSuggestion], List[TimeSlot]]:
        """
        Place one task given what earlier tasks already claimed in this run.
        Returns the suggestion (or None) and the updated allocation list.
        """
        # Only pieces long enough for this task survive the exclusion
        candidates = subtract_slots(pool, allocated, min_duration_minutes=duration)
        ranked = self.rank_slots(task, candidates, now)
        if not ranked:
            return None, allocated

        chosen = ranked[0].take_front(duration)
        return self._build_suggestion(task, chosen, duration), allocated + [chosen]

    def _build_suggestion(self, task, slot: TimeSlot, duration: int) -> ScheduleSuggestion:
        return ScheduleSuggestion(
            task_id=task.id,
            task_title=task.title,
            suggested_start=slot.start,
            suggested_end=slot.end,
            priority=enum_value(task.priority),
            estimated_duration_minutes=duration,
        )

    def __repr__(self):
        return (f"SlotAllocator({self.horizon_days} day horizon, "
                f"{self.work_day_start_hour}:00-{self.work_day_end_hour}:00)")
