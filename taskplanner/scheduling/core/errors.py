"""
Error taxonomy for the scheduling engine.

Missing tasks are not errors: lookups return ``None`` and the caller decides
how to answer.
"""


class SchedulingError(Exception):
    """Base class for scheduling failures."""


class SchedulingValidationError(SchedulingError, ValueError):
    """Malformed time range or non-positive duration."""


class PersistenceError(SchedulingError):
    """Reading from or writing to the data store failed."""
