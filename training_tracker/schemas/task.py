import re

from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import date, datetime
from training_tracker.models.task import TaskStatus
from training_tracker.models.edition import TrainingType
from training_tracker.utils.week_calendar import FIRST_WEEK, LAST_WEEK, week_number

WEEK_LABEL_PATTERN = re.compile(r"^(Week )?-?\d+$")


def check_week_label(value: Optional[str]) -> Optional[str]:
    """Accept "Week N" or "N" with N in -5..8"""
    if value is None:
        return value
    text = value.strip()
    if not WEEK_LABEL_PATTERN.match(text):
        raise ValueError(f"Invalid week '{value}', expected 'Week N' or 'N'")
    if not FIRST_WEEK <= week_number(text) <= LAST_WEEK:
        raise ValueError(f"Week must be between {FIRST_WEEK} and {LAST_WEEK}")
    return text


class TaskBase(BaseModel):
    """Task fields shared by create and response"""
    week: str = Field(..., max_length=10)
    name: str = Field(..., min_length=1)
    duration: Optional[str] = Field(None, max_length=10)
    due_date: Optional[date] = None
    training_type: TrainingType
    links: Optional[str] = None
    owner: Optional[str] = Field(None, max_length=100)
    assigned_to: Optional[str] = Field(None, max_length=100)
    assigned_user_id: Optional[int] = None
    inflexible: bool = False
    notes: Optional[str] = None

    @field_validator("week")
    @classmethod
    def validate_week(cls, value: str) -> str:
        return check_week_label(value)


class TaskCreate(TaskBase):
    """Create a task; task_code is generated from the week when omitted"""
    edition_id: int
    task_code: Optional[str] = Field(None, max_length=20)
    status: TaskStatus = TaskStatus.NOT_STARTED
    completion_date: Optional[datetime] = None


class TaskUpdate(BaseModel):
    """Partial task update"""
    task_code: Optional[str] = Field(None, max_length=20)
    week: Optional[str] = Field(None, max_length=10)
    name: Optional[str] = Field(None, min_length=1)
    duration: Optional[str] = Field(None, max_length=10)
    due_date: Optional[date] = None
    training_type: Optional[TrainingType] = None
    links: Optional[str] = None
    owner: Optional[str] = Field(None, max_length=100)
    assigned_to: Optional[str] = Field(None, max_length=100)
    assigned_user_id: Optional[int] = None
    status: Optional[TaskStatus] = None
    inflexible: Optional[bool] = None
    completion_date: Optional[datetime] = None
    notes: Optional[str] = None

    @field_validator("week")
    @classmethod
    def validate_week(cls, value: Optional[str]) -> Optional[str]:
        return check_week_label(value)

    class Config:
        extra = "forbid"


class TaskResponse(TaskBase):
    """Task as returned by the API"""
    id: int
    edition_id: int
    task_code: str
    training_type: str
    status: TaskStatus
    completion_date: Optional[datetime] = None

    class Config:
        from_attributes = True


class TaskTemplateResponse(BaseModel):
    """Template task preview"""
    task_code: str
    week: str
    name: str
    duration: Optional[str] = None
    training_type: str
    assigned_to: Optional[str] = None
    owner: Optional[str] = None
    inflexible: bool = False
    notes: Optional[str] = None

    class Config:
        from_attributes = True
