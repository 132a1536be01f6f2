"""
Pytest fixtures for Task Planner testing.

Provides:
- A fixed "now" and a datetime helper
- Task and event factories
- An in-memory fake repository for driving the engine without a database
- An in-memory SQLite session and a FastAPI test client
"""

import os

# Must be set before taskplanner.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("PLANNER_TIMEZONE", "UTC")

import pytest
from datetime import datetime
from typing import List, Optional
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from taskplanner.database import Base, get_db
from taskplanner.models import Task, Event, User, TaskPriority, TaskStatus
from taskplanner.services.repository import SqlAlchemyScheduleRepository
from taskplanner.services.scheduler_service import SchedulingService
from taskplanner.scheduling.core.scheduler import SlotAllocator

# Monday morning, before working hours start
NOW = datetime(2026, 10, 19, 8, 0)
OWNER_ID = 1


def at(hour: int, minute: int = 0, day: int = 19) -> datetime:
    """Wall-clock time in the test week (October 2026)."""
    return datetime(2026, 10, day, hour, minute)


# =============================================================================
# FACTORIES
# =============================================================================

_next_id = {"task": 100, "event": 500}


def make_task(title: str = "Task", priority=TaskPriority.MEDIUM, estimated_duration_minutes: Optional[int] = 60,
              due_at: Optional[datetime] = None, status=TaskStatus.PENDING, scheduled_start=None,
              scheduled_end=None, task_id: Optional[int] = None, user_id: int = OWNER_ID) -> Task:
    if task_id is None:
        _next_id["task"] += 1
        task_id = _next_id["task"]
    return Task(
        id=task_id,
        user_id=user_id,
        title=title,
        description=None,
        priority=priority,
        estimated_duration_minutes=estimated_duration_minutes,
        due_at=due_at,
        status=status,
        is_scheduled=scheduled_start is not None,
        scheduled_start=scheduled_start,
        scheduled_end=scheduled_end,
    )


def make_event(start: datetime, end: datetime, title: str = "Meeting", user_id: int = OWNER_ID) -> Event:
    _next_id["event"] += 1
    return Event(id=_next_id["event"], user_id=user_id, title=title, description="",
                 start_time=start, end_time=end)


# =============================================================================
# FAKE REPOSITORY
# =============================================================================

class FakeRepository:
    """In-memory ScheduleRepository with the same owner scoping as the SQL one."""

    def __init__(self, tasks: List[Task] = None, events: List[Event] = None):
        self.tasks = list(tasks or [])
        self.events = list(events or [])
        self.updates = []
        self.created_events = []
        self.deleted_events = []

    def fetch_tasks(self, owner_id, *, include_completed=False, is_scheduled=None):
        result = [t for t in self.tasks if t.user_id == owner_id]
        if not include_completed:
            result = [t for t in result if t.status != TaskStatus.COMPLETED]
        if is_scheduled is not None:
            result = [t for t in result if bool(t.is_scheduled) == is_scheduled]
        return result

    def get_task(self, owner_id, task_id):
        for task in self.tasks:
            if task.id == task_id and task.user_id == owner_id:
                return task
        return None

    def fetch_events(self, owner_id, start, end):
        return [e for e in self.events
                if e.user_id == owner_id and e.start_time < end and e.end_time > start]

    def update_task_schedule(self, owner_id, task_id, is_scheduled, scheduled_start=None, scheduled_end=None):
        task = self.get_task(owner_id, task_id)
        if task is None:
            return None
        task.is_scheduled = is_scheduled
        task.scheduled_start = scheduled_start if is_scheduled else None
        task.scheduled_end = scheduled_end if is_scheduled else None
        self.updates.append((task_id, is_scheduled))
        return task

    def create_derived_event(self, owner_id, draft):
        event = make_event(draft["start_time"], draft["end_time"], title=draft["title"], user_id=owner_id)
        event.task_id = draft.get("task_id")
        self.events.append(event)
        self.created_events.append(event)
        return event

    def delete_derived_events(self, owner_id, task_id):
        mirrors = [e for e in self.events if e.user_id == owner_id and e.task_id == task_id]
        self.events = [e for e in self.events if e not in mirrors]
        self.deleted_events.extend(mirrors)
        return len(mirrors)


@pytest.fixture
def repository():
    return FakeRepository()


@pytest.fixture
def allocator(repository):
    return SlotAllocator(repository, clock=lambda: NOW)


# =============================================================================
# DATABASE & API FIXTURES
# =============================================================================

@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    session.add_all([User(id=OWNER_ID, username="owner"), User(id=2, username="someone_else")])
    session.commit()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    from fastapi.testclient import TestClient
    from taskplanner.main import app
    from taskplanner.dependencies import get_scheduling_service

    def override_get_db():
        yield db_session

    def override_get_scheduling_service():
        return SchedulingService(SqlAlchemyScheduleRepository(db_session), clock=lambda: NOW)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_scheduling_service] = override_get_scheduling_service
    try:
        yield TestClient(app, headers={"X-User-Id": str(OWNER_ID)})
    finally:
        app.dependency_overrides.clear()
