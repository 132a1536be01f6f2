"""
Owner-scoped data access used by the scheduling engine.
"""

import logging
from datetime import datetime
from typing import List, Optional, Protocol
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models import Task, Event, TaskStatus
from ..scheduling.core.errors import PersistenceError, SchedulingValidationError

logger = logging.getLogger(__name__)


class ScheduleRepository(Protocol):
    """Everything the engine reads and writes. Every call is scoped by owner id."""

    def fetch_tasks(self, owner_id, *, include_completed: bool = False,
                    is_scheduled: Optional[bool] = None) -> List: ...

    def get_task(self, owner_id, task_id): ...

    def fetch_events(self, owner_id, start: datetime, end: datetime) -> List: ...

    def update_task_schedule(self, owner_id, task_id, is_scheduled: bool,
                             scheduled_start: Optional[datetime] = None,
                             scheduled_end: Optional[datetime] = None): ...

    def create_derived_event(self, owner_id, draft: dict): ...

    def delete_derived_events(self, owner_id, task_id) -> int: ...


class SqlAlchemyScheduleRepository:
    """ScheduleRepository backed by a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def fetch_tasks(self, owner_id, *, include_completed: bool = False,
                    is_scheduled: Optional[bool] = None) -> List[Task]:
        try:
            query = self.db.query(Task).filter(Task.user_id == owner_id)
            if not include_completed:
                query = query.filter(Task.status != TaskStatus.COMPLETED)
            if is_scheduled is not None:
                query = query.filter(Task.is_scheduled == is_scheduled)
            return query.order_by(Task.id.asc()).all()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not load tasks for user {owner_id}") from e

    def get_task(self, owner_id, task_id) -> Optional[Task]:
        try:
            return self.db.query(Task).filter(Task.id == task_id, Task.user_id == owner_id).first()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not load task {task_id}") from e

    def fetch_events(self, owner_id, start: datetime, end: datetime) -> List[Event]:
        """Events overlapping the half-open range [start, end)."""
        try:
            return self.db.query(Event).filter(
                Event.user_id == owner_id,
                Event.start_time < end,
                Event.end_time > start,
            ).order_by(Event.start_time.asc()).all()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not load events for user {owner_id}") from e

    def update_task_schedule(self, owner_id, task_id, is_scheduled: bool,
                             scheduled_start: Optional[datetime] = None,
                             scheduled_end: Optional[datetime] = None) -> Optional[Task]:
        task = self.get_task(owner_id, task_id)
        if task is None:
            return None

        task.is_scheduled = is_scheduled
        task.scheduled_start = scheduled_start if is_scheduled else None
        task.scheduled_end = scheduled_end if is_scheduled else None
        try:
            self.db.commit()
            self.db.refresh(task)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Could not update schedule of task {task_id}") from e
        return task

    def create_derived_event(self, owner_id, draft: dict) -> Optional[Event]:
        event = Event(
            user_id=owner_id,
            title=draft["title"],
            description=draft.get("description", ""),
            start_time=draft["start_time"],
            end_time=draft["end_time"],
            task_id=draft.get("task_id"),
        )
        try:
            self.db.add(event)
            self.db.commit()
            self.db.refresh(event)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Could not create event for user {owner_id}") from e
        return event

    def create_event(self, owner_id, title: str, start_time: datetime, end_time: datetime,
                     description: str = "") -> Event:
        """Plain calendar event created by the user."""
        return self.create_derived_event(owner_id, {
            "title": title,
            "description": description,
            "start_time": start_time,
            "end_time": end_time,
        })

    def delete_derived_events(self, owner_id, task_id) -> int:
        """Remove the events mirroring a task's commitment. Returns how many were removed."""
        try:
            deleted = self.db.query(Event).filter(
                Event.user_id == owner_id,
                Event.task_id == task_id,
            ).delete(synchronize_session="fetch")
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Could not remove events of task {task_id}") from e
        if deleted:
            logger.debug(f"Removed {deleted} mirror event(s) of task {task_id}")
        return deleted

    def get_event(self, owner_id, event_id) -> Optional[Event]:
        try:
            return self.db.query(Event).filter(Event.id == event_id, Event.user_id == owner_id).first()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not load event {event_id}") from e

    def update_event(self, owner_id, event_id, changes: dict) -> Optional[Event]:
        """
        Apply `changes` (title, description, start_time, end_time) to an event.
        The resulting range must stay non-empty. Returns None if the event does
        not exist for this owner.
        """
        event = self.get_event(owner_id, event_id)
        if event is None:
            return None

        start_time = changes.get("start_time", event.start_time)
        end_time = changes.get("end_time", event.end_time)
        if start_time >= end_time:
            raise SchedulingValidationError("Event start must be before its end")

        for field, value in changes.items():
            setattr(event, field, value)
        try:
            self.db.commit()
            self.db.refresh(event)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Could not update event {event_id}") from e
        return event

    def delete_event(self, owner_id, event_id) -> bool:
        event = self.get_event(owner_id, event_id)
        if event is None:
            return False
        try:
            self.db.delete(event)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Could not delete event {event_id}") from e
        return True

    # Task CRUD

    def create_task(self, owner_id, fields: dict) -> Task:
        task = Task(user_id=owner_id, **fields)
        try:
            self.db.add(task)
            self.db.commit()
            self.db.refresh(task)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Could not create task for user {owner_id}") from e
        return task

    def update_task(self, owner_id, task_id, changes: dict) -> Optional[Task]:
        """Update a task's descriptive fields and status. Schedule state is left alone."""
        task = self.get_task(owner_id, task_id)
        if task is None:
            return None

        for field, value in changes.items():
            setattr(task, field, value)
        try:
            self.db.commit()
            self.db.refresh(task)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Could not update task {task_id}") from e
        return task

    def delete_task(self, owner_id, task_id) -> bool:
        """Delete a task together with its mirror events."""
        task = self.get_task(owner_id, task_id)
        if task is None:
            return False
        try:
            self.db.query(Event).filter(
                Event.user_id == owner_id,
                Event.task_id == task_id,
            ).delete(synchronize_session="fetch")
            self.db.delete(task)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Could not delete task {task_id}") from e
        return True
