from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, Literal
from datetime import date, datetime
from training_tracker.models.edition import TrainingType
from training_tracker.utils.week_calendar import (
    EditionPhase,
    WeekStatus,
    WeekCompletion,
    edition_code,
    variant_for_training_type,
)

EDITION_CODE_PATTERN = r"^\d{4}-[AB]$"


def check_edition_code(code: str, training_type) -> str:
    """Code must be a real YYMM month with the variant of its route (A = GLR, B = SLR)"""
    try:
        expected = edition_code(int(code[:2]), int(code[2:4]), variant_for_training_type(training_type))
    except (KeyError, ValueError):
        raise ValueError(f"Invalid edition code {code}")
    if expected != code:
        route = getattr(training_type, "value", training_type)
        raise ValueError(f"Edition code {code} does not match training type {route}")
    return code


class EditionBase(BaseModel):
    """Edition fields supplied by the caller"""
    code: str = Field(..., pattern=EDITION_CODE_PATTERN, description="YYMM-A (GLR) or YYMM-B (SLR)")
    training_type: TrainingType
    start_date: date
    tasks_start_date: date

    @field_validator("training_type")
    @classmethod
    def reject_template_sentinel(cls, value: TrainingType) -> TrainingType:
        if value == TrainingType.ALL:
            raise ValueError("training_type must be GLR or SLR")
        return value

    @model_validator(mode="after")
    def check_code_matches_route(self):
        check_edition_code(self.code, self.training_type)
        return self


class EditionCreate(EditionBase):
    """Create an edition"""
    pass


class EditionCreateWithTemplate(EditionBase):
    """Create an edition and seed its tasks from a template"""
    template_kind: Optional[Literal["default", "glr", "slr"]] = None


class EditionDuplicate(EditionBase):
    """New edition fields for a duplicate"""
    pass


class EditionUpdate(BaseModel):
    """Partial edition update; start_date is fixed once created"""
    code: Optional[str] = Field(None, pattern=EDITION_CODE_PATTERN)
    training_type: Optional[TrainingType] = None
    tasks_start_date: Optional[date] = None
    status: Optional[str] = Field(None, max_length=20)
    current_week: Optional[int] = Field(None, ge=-5, le=8)
    archived: Optional[bool] = None

    class Config:
        extra = "forbid"


class EditionResponse(BaseModel):
    """Edition as returned by the API"""
    id: int
    code: str
    training_type: str
    start_date: date
    tasks_start_date: date
    status: Optional[str]
    current_week: Optional[int]
    archived: bool
    phase: Optional[EditionPhase]
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class WeekOverview(BaseModel):
    """One row of an edition's timeline"""
    week: str
    week_number: int
    week_status: WeekStatus
    completion: WeekCompletion
    task_count: int
    done_count: int
