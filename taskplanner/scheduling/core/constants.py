"""
Shared constants for the scheduling engine.
"""

# Working day boundaries (local hours)
WORK_DAY_START_HOUR = 9
WORK_DAY_END_HOUR = 21

# Number of days covered when no window is given
DEFAULT_HORIZON_DAYS = 7

DEFAULT_TASK_DURATION_MINUTES = 60
MIN_SLOT_DURATION_MINUTES = 30

# "now" is rounded up to this mark before it is used as today's lower bound
START_ROUNDING_MINUTES = 15
