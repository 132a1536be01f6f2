"""
Configuration settings for the Task Planner, read from the environment (.env supported).
"""

import os
from datetime import datetime
import pytz
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./taskplanner.db")
TIMEZONE = os.getenv("PLANNER_TIMEZONE", "UTC")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE")


def get_timezone(name: str = None):
    """Resolve a timezone name, raising pytz.UnknownTimeZoneError for bad names."""
    return pytz.timezone(name or TIMEZONE)


def local_now(timezone_name: str = None) -> datetime:
    """Current wall-clock time in the configured timezone, without tzinfo."""
    return datetime.now(get_timezone(timezone_name)).replace(tzinfo=None)


def to_local_naive(moment: datetime, timezone_name: str = None) -> datetime:
    """Convert an aware datetime to naive local wall-clock time; naive values pass through."""
    if moment is None or moment.tzinfo is None:
        return moment
    return moment.astimezone(get_timezone(timezone_name)).replace(tzinfo=None)
