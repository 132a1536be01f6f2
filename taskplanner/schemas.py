from pydantic import BaseModel, Field, model_validator
from datetime import datetime
from typing import Optional, List
from .models import TaskPriority, TaskStatus

# ----------------- User Schemas ---------------------

class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)

class UserOut(BaseModel):
    id: int
    username: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# ----------------- Task Schemas ---------------------

class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    estimated_duration_minutes: Optional[int] = Field(None, gt=0)
    due_at: Optional[datetime] = None

class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    estimated_duration_minutes: Optional[int] = Field(None, gt=0)
    due_at: Optional[datetime] = None
    status: Optional[TaskStatus] = None

class TaskOut(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    priority: TaskPriority
    estimated_duration_minutes: Optional[int] = None
    due_at: Optional[datetime] = None
    status: TaskStatus
    is_scheduled: bool
    scheduled_start: Optional[datetime] = None
    scheduled_end: Optional[datetime] = None

    class Config:
        from_attributes = True

# ----------------- Event Schemas ---------------------

class EventCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = ""
    start_time: datetime
    end_time: datetime

    @model_validator(mode="after")
    def check_time_range(self):
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self

class EventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @model_validator(mode="after")
    def check_time_range(self):
        if self.start_time and self.end_time and self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self

class EventOut(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    task_id: Optional[int] = None

    class Config:
        from_attributes = True

# ----------------- Schedule Schemas ---------------------

class ScheduleSuggestionOut(BaseModel):
    task_id: int
    task_title: str
    suggested_start: datetime
    suggested_end: datetime
    priority: str
    estimated_duration_minutes: int

    class Config:
        from_attributes = True

class SuggestionsResponse(BaseModel):
    message: str
    suggestions: List[ScheduleSuggestionOut]
    count: int

class ApplySuggestionRequest(BaseModel):
    task_id: int
    scheduled_start: datetime
    scheduled_end: datetime
    create_event: bool = True

    @model_validator(mode="after")
    def check_time_range(self):
        if self.scheduled_start >= self.scheduled_end:
            raise ValueError("scheduled_start must be before scheduled_end")
        return self

class ApplySuggestionResponse(BaseModel):
    message: str
    task: TaskOut
    event: Optional[EventOut] = None

class RescheduleRequest(BaseModel):
    excluded_start: Optional[datetime] = None

class RescheduleResponse(BaseModel):
    message: str
    new_suggestion: Optional[ScheduleSuggestionOut] = None

class EventSavedResponse(BaseModel):
    event: EventOut
    rescheduled_suggestions: List[ScheduleSuggestionOut]
