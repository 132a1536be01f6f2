import pytest
from unittest.mock import MagicMock
from sqlalchemy.exc import OperationalError

from taskplanner.models import Task, Event, TaskPriority, TaskStatus
from taskplanner.services.repository import SqlAlchemyScheduleRepository
from taskplanner.scheduling.core.errors import PersistenceError, SchedulingValidationError
from conftest import OWNER_ID, at


@pytest.fixture
def seeded(db_session):
    tasks = [
        Task(user_id=OWNER_ID, title="pending", priority=TaskPriority.HIGH),
        Task(user_id=OWNER_ID, title="done", status=TaskStatus.COMPLETED),
        Task(user_id=OWNER_ID, title="booked", is_scheduled=True, scheduled_start=at(9), scheduled_end=at(10)),
        Task(user_id=2, title="foreign"),
    ]
    events = [
        Event(user_id=OWNER_ID, title="standup", start_time=at(9), end_time=at(9, 30)),
        Event(user_id=OWNER_ID, title="lunch", start_time=at(12), end_time=at(13)),
        Event(user_id=2, title="foreign", start_time=at(10), end_time=at(11)),
    ]
    db_session.add_all(tasks + events)
    db_session.commit()
    return SqlAlchemyScheduleRepository(db_session)


def test_fetch_tasks_defaults_exclude_completed(seeded):
    titles = [t.title for t in seeded.fetch_tasks(OWNER_ID)]
    assert titles == ["pending", "booked"]


def test_fetch_tasks_filters_by_schedule_state(seeded):
    assert [t.title for t in seeded.fetch_tasks(OWNER_ID, is_scheduled=False)] == ["pending"]
    assert [t.title for t in seeded.fetch_tasks(OWNER_ID, is_scheduled=True)] == ["booked"]
    assert len(seeded.fetch_tasks(OWNER_ID, include_completed=True)) == 3


def test_get_task_is_owner_scoped(seeded):
    foreign = seeded.fetch_tasks(2)[0]
    assert seeded.get_task(OWNER_ID, foreign.id) is None
    assert seeded.get_task(2, foreign.id).title == "foreign"


def test_fetch_events_uses_half_open_overlap(seeded):
    assert [e.title for e in seeded.fetch_events(OWNER_ID, at(9), at(21))] == ["standup", "lunch"]
    # Touching at 9:30 and 12:00 is not overlapping
    assert seeded.fetch_events(OWNER_ID, at(9, 30), at(12)) == []


def test_update_task_schedule_round_trip(seeded):
    task = seeded.fetch_tasks(OWNER_ID, is_scheduled=False)[0]

    updated = seeded.update_task_schedule(OWNER_ID, task.id, True, at(14), at(15))
    assert updated.is_scheduled is True
    assert (updated.scheduled_start, updated.scheduled_end) == (at(14), at(15))

    cleared = seeded.update_task_schedule(OWNER_ID, task.id, False)
    assert cleared.is_scheduled is False
    assert cleared.scheduled_start is None and cleared.scheduled_end is None


def test_update_unknown_task_returns_none(seeded):
    assert seeded.update_task_schedule(OWNER_ID, 999, True, at(9), at(10)) is None


def test_create_derived_event(seeded):
    task = seeded.fetch_tasks(OWNER_ID)[0]
    event = seeded.create_derived_event(OWNER_ID, {
        "title": task.title, "start_time": at(15), "end_time": at(16), "task_id": task.id,
    })
    assert event.id is not None
    assert event.task_id == task.id
    assert [e.title for e in seeded.fetch_events(OWNER_ID, at(15), at(16))] == ["pending"]


def test_database_errors_become_persistence_errors():
    db = MagicMock()
    db.query.side_effect = OperationalError("SELECT 1", {}, Exception("database is locked"))
    repository = SqlAlchemyScheduleRepository(db)

    with pytest.raises(PersistenceError):
        repository.fetch_tasks(OWNER_ID)
    with pytest.raises(PersistenceError):
        repository.fetch_events(OWNER_ID, at(9), at(10))


def test_failed_commit_is_rolled_back():
    db = MagicMock()
    db.commit.side_effect = OperationalError("INSERT", {}, Exception("disk full"))
    repository = SqlAlchemyScheduleRepository(db)

    with pytest.raises(PersistenceError):
        repository.create_derived_event(OWNER_ID, {"title": "x", "start_time": at(9), "end_time": at(10)})
    db.rollback.assert_called_once()


def test_delete_derived_events_only_touches_that_task(seeded):
    task = seeded.fetch_tasks(OWNER_ID)[0]
    seeded.create_derived_event(OWNER_ID, {
        "title": task.title, "start_time": at(15), "end_time": at(16), "task_id": task.id,
    })

    assert seeded.delete_derived_events(2, task.id) == 0
    assert seeded.delete_derived_events(OWNER_ID, task.id) == 1
    assert [e.title for e in seeded.fetch_events(OWNER_ID, at(0), at(23))] == ["standup", "lunch"]


def test_update_event_merges_changes(seeded):
    lunch = seeded.fetch_events(OWNER_ID, at(12), at(13))[0]

    moved = seeded.update_event(OWNER_ID, lunch.id, {"start_time": at(12, 30)})

    assert (moved.start_time, moved.end_time) == (at(12, 30), at(13))
    with pytest.raises(SchedulingValidationError):
        seeded.update_event(OWNER_ID, lunch.id, {"end_time": at(12)})
    assert seeded.update_event(2, lunch.id, {"title": "stolen"}) is None


def test_delete_event_is_owner_scoped(seeded):
    lunch = seeded.fetch_events(OWNER_ID, at(12), at(13))[0]

    assert seeded.delete_event(2, lunch.id) is False
    assert seeded.delete_event(OWNER_ID, lunch.id) is True
    assert seeded.get_event(OWNER_ID, lunch.id) is None


def test_task_crud(seeded):
    task = seeded.create_task(OWNER_ID, {"title": "new", "priority": TaskPriority.LOW})
    assert task.id is not None
    assert task.status == TaskStatus.PENDING

    updated = seeded.update_task(OWNER_ID, task.id, {"status": TaskStatus.COMPLETED})
    assert updated.status == TaskStatus.COMPLETED
    assert seeded.update_task(2, task.id, {"title": "stolen"}) is None

    assert seeded.delete_task(2, task.id) is False
    assert seeded.delete_task(OWNER_ID, task.id) is True
    assert seeded.get_task(OWNER_ID, task.id) is None


def test_failed_task_create_is_rolled_back():
    db = MagicMock()
    db.commit.side_effect = OperationalError("INSERT", {}, Exception("disk full"))
    repository = SqlAlchemyScheduleRepository(db)

    with pytest.raises(PersistenceError):
        repository.create_task(OWNER_ID, {"title": "x"})
    db.rollback.assert_called_once()
