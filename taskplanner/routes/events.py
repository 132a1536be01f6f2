"""Events API: event CRUD. Creating or moving an event displaces any tasks it collides with."""

from typing import List
from fastapi import APIRouter, Depends, HTTPException, Body
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Event, User
from ..schemas import EventOut, EventCreate, EventUpdate, EventSavedResponse
from ..dependencies import get_current_user, get_scheduling_service
from ..config import to_local_naive
from ..services.scheduler_service import SchedulingService
from ..scheduling.core.errors import SchedulingValidationError, PersistenceError

router = APIRouter(tags=["events"])


@router.get("/", response_model=List[EventOut])
async def list_events(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return db.query(Event).filter(Event.user_id == current_user.id).order_by(Event.start_time.asc()).all()


@router.get("/{event_id}", response_model=EventOut)
async def get_event(
    event_id: int,
    current_user: User = Depends(get_current_user),
    service: SchedulingService = Depends(get_scheduling_service),
):
    try:
        event = service.repository.get_event(current_user.id, event_id)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))

    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@router.post("/create", response_model=EventSavedResponse)
async def create_event(
    current_user: User = Depends(get_current_user),
    service: SchedulingService = Depends(get_scheduling_service),
    event_in: EventCreate = Body(...),
):
    """Save the event, then unschedule tasks it collides with and suggest new slots for them."""
    try:
        event = service.repository.create_event(
            current_user.id,
            title=event_in.title,
            description=event_in.description or "",
            start_time=to_local_naive(event_in.start_time),
            end_time=to_local_naive(event_in.end_time),
        )
        suggestions = service.handle_event_created(current_user.id, event)
    except SchedulingValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return {"event": event, "rescheduled_suggestions": suggestions}


@router.put("/update/{event_id}", response_model=EventSavedResponse)
async def update_event(
    event_id: int,
    current_user: User = Depends(get_current_user),
    service: SchedulingService = Depends(get_scheduling_service),
    event_in: EventUpdate = Body(...),
):
    """Update only the fields that were provided, then displace tasks the event now collides with."""
    changes = event_in.model_dump(exclude_none=True)
    for field in ("start_time", "end_time"):
        if field in changes:
            changes[field] = to_local_naive(changes[field])

    try:
        event = service.repository.update_event(current_user.id, event_id, changes)
        if event is None:
            raise HTTPException(status_code=404, detail="Event not found")
        suggestions = service.handle_event_created(current_user.id, event)
    except SchedulingValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return {"event": event, "rescheduled_suggestions": suggestions}


@router.delete("/delete/{event_id}")
async def delete_event(
    event_id: int,
    current_user: User = Depends(get_current_user),
    service: SchedulingService = Depends(get_scheduling_service),
):
    try:
        deleted = service.repository.delete_event(current_user.id, event_id)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))

    if not deleted:
        raise HTTPException(status_code=404, detail="Event not found")
    return {"message": "Event deleted"}
