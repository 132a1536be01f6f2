"""Tasks API: task CRUD and manual unscheduling."""

from typing import List
from fastapi import APIRouter, Depends, HTTPException, Body
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Task, User
from ..schemas import TaskCreate, TaskUpdate, TaskOut
from ..dependencies import get_current_user, get_scheduling_service
from ..config import to_local_naive
from ..services.scheduler_service import SchedulingService
from ..scheduling.core.errors import PersistenceError

router = APIRouter(tags=["tasks"])


@router.get("/", response_model=List[TaskOut])
async def list_tasks(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return db.query(Task).filter(Task.user_id == current_user.id).order_by(Task.id.asc()).all()


@router.post("/create", response_model=TaskOut)
async def create_task(
    current_user: User = Depends(get_current_user),
    service: SchedulingService = Depends(get_scheduling_service),
    task_in: TaskCreate = Body(...),
):
    fields = task_in.model_dump()
    fields["due_at"] = to_local_naive(task_in.due_at)
    try:
        return service.repository.create_task(current_user.id, fields)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/{task_id}", response_model=TaskOut)
async def get_task(
    task_id: int,
    current_user: User = Depends(get_current_user),
    service: SchedulingService = Depends(get_scheduling_service),
):
    try:
        task = service.repository.get_task(current_user.id, task_id)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))

    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


@router.put("/{task_id}", response_model=TaskOut)
async def update_task(
    task_id: int,
    current_user: User = Depends(get_current_user),
    service: SchedulingService = Depends(get_scheduling_service),
    task_in: TaskUpdate = Body(...),
):
    """Update only the fields that were provided. Marking a task completed keeps its commitment."""
    changes = task_in.model_dump(exclude_none=True)
    if "due_at" in changes:
        changes["due_at"] = to_local_naive(changes["due_at"])
    try:
        task = service.repository.update_task(current_user.id, task_id, changes)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))

    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


@router.delete("/{task_id}")
async def delete_task(
    task_id: int,
    current_user: User = Depends(get_current_user),
    service: SchedulingService = Depends(get_scheduling_service),
):
    try:
        deleted = service.repository.delete_task(current_user.id, task_id)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))

    if not deleted:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"message": "Task deleted"}


@router.post("/{task_id}/unschedule", response_model=TaskOut)
async def unschedule_task(
    task_id: int,
    current_user: User = Depends(get_current_user),
    service: SchedulingService = Depends(get_scheduling_service),
):
    try:
        task = service.unschedule_task(current_user.id, task_id)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))

    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return task
