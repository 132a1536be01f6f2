"""
Schedule API endpoints: suggestions, applying them, and re-rolling a single task.
"""

from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Body

from ..models import User
from ..schemas import (
    SuggestionsResponse, ApplySuggestionRequest, ApplySuggestionResponse, RescheduleRequest,
    RescheduleResponse
)
from ..dependencies import get_current_user, get_scheduling_service
from ..services.scheduler_service import SchedulingService
from ..scheduling.core.errors import SchedulingValidationError, PersistenceError

router = APIRouter()


@router.get("/suggestions", response_model=SuggestionsResponse)
async def get_suggestions(
    current_user: User = Depends(get_current_user),
    service: SchedulingService = Depends(get_scheduling_service),
    start_date: Optional[datetime] = Query(None, description="Start of the scheduling window"),
    end_date: Optional[datetime] = Query(None, description="End of the scheduling window"),
):
    """Propose slots for every pending, unscheduled task in the window (default: next 7 days)."""
    try:
        suggestions = service.generate_suggestions(current_user.id, start_date, end_date)
    except SchedulingValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return {
        "message": "Schedule suggestions generated successfully",
        "suggestions": suggestions,
        "count": len(suggestions),
    }


@router.post("/apply", response_model=ApplySuggestionResponse)
async def apply_suggestion(
    current_user: User = Depends(get_current_user),
    service: SchedulingService = Depends(get_scheduling_service),
    body: ApplySuggestionRequest = Body(...),
):
    try:
        task, event = service.apply_suggestion(
            current_user.id, body.task_id, body.scheduled_start, body.scheduled_end,
            create_event=body.create_event,
        )
    except SchedulingValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))

    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")

    return {"message": "Schedule applied successfully", "task": task, "event": event}


@router.post("/reschedule/{task_id}", response_model=RescheduleResponse)
async def reschedule_task(
    task_id: int,
    current_user: User = Depends(get_current_user),
    service: SchedulingService = Depends(get_scheduling_service),
    body: Optional[RescheduleRequest] = Body(None),
):
    """Find a new slot for one task, avoiding the previously suggested start if given."""
    try:
        if service.repository.get_task(current_user.id, task_id) is None:
            raise HTTPException(status_code=404, detail="Task not found")
        excluded_start = body.excluded_start if body else None
        suggestion = service.reschedule_task(current_user.id, task_id, excluded_start)
    except SchedulingValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return {
        "message": "New time found successfully" if suggestion else "No alternative time slots available",
        "new_suggestion": suggestion,
    }
