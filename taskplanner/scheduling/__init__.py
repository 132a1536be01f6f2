"""
Task Planner Scheduling Engine

Proposes time slots for unscheduled tasks around existing calendar events.
Works on plain in-process data so it can be driven by the API or used on its own.
"""

from .core.scheduler import SlotAllocator, ScheduleSuggestion
from .core.time_slot import TimeSlot, overlaps
from .core.errors import SchedulingError, SchedulingValidationError, PersistenceError
from .algorithms.displacement import resolve_event_conflicts
from .utils.slot_utils import find_available_slots

__version__ = "1.0.0"
