from training_tracker.schemas.edition import (
    EditionCreate,
    EditionCreateWithTemplate,
    EditionDuplicate,
    EditionUpdate,
    EditionResponse,
    WeekOverview,
)
from training_tracker.schemas.task import TaskCreate, TaskUpdate, TaskResponse, TaskTemplateResponse
from training_tracker.schemas.audit import AuditLogResponse, NotificationResponse

__all__ = [
    "EditionCreate",
    "EditionCreateWithTemplate",
    "EditionDuplicate",
    "EditionUpdate",
    "EditionResponse",
    "WeekOverview",
    "TaskCreate",
    "TaskUpdate",
    "TaskResponse",
    "TaskTemplateResponse",
    "AuditLogResponse",
    "NotificationResponse",
]
