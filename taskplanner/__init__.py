"""Task Planner: personal task/calendar manager with an automatic scheduling engine."""

__version__ = "1.0.0"
