from fastapi import APIRouter, Query
from typing import List, Optional

from training_tracker.data.task_templates import DEFAULT_CATALOG
from training_tracker.exceptions import NotFoundError
from training_tracker.schemas.task import TaskTemplateResponse

router = APIRouter(prefix="/api/templates", tags=["templates"])


@router.get("")
async def list_template_kinds():
    """Available template kinds with their task counts"""
    return [
        {"kind": kind, "task_count": len(DEFAULT_CATALOG.get_template(kind))}
        for kind in DEFAULT_CATALOG.kinds
    ]


@router.get("/{kind}", response_model=List[TaskTemplateResponse])
async def get_template(kind: str, week: Optional[str] = Query(default=None)):
    """Template tasks of one kind, Week -5 to Week 8, or of one week ("5" or "Week 5")"""
    if kind not in DEFAULT_CATALOG.kinds:
        raise NotFoundError(f"Template {kind} not found")
    if week:
        return DEFAULT_CATALOG.get_week(kind, week)
    return DEFAULT_CATALOG.get_template(kind)
