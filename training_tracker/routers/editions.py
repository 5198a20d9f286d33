from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session
from typing import List, Optional

from training_tracker.database import get_db
from training_tracker.exceptions import NotFoundError
from training_tracker.services.edition_service import EditionService
from training_tracker.services.edition_duplicator import EditionDuplicator
from training_tracker.services.task_service import TaskService
from training_tracker.schemas.edition import (
    EditionCreate,
    EditionCreateWithTemplate,
    EditionDuplicate,
    EditionUpdate,
    EditionResponse,
    WeekOverview,
)
from training_tracker.schemas.task import TaskResponse

router = APIRouter(prefix="/api/editions", tags=["editions"])


@router.get("", response_model=List[EditionResponse])
async def list_editions(
    include_archived: bool = Query(default=False),
    db: Session = Depends(get_db)
):
    """List editions; archived ones only when asked for"""
    return EditionService(db).get_all_editions(include_archived=include_archived)


@router.post("", response_model=EditionResponse, status_code=201)
async def create_edition(payload: EditionCreate, db: Session = Depends(get_db)):
    """Create an edition without tasks"""
    return EditionService(db).create_edition(payload)


@router.post("/with-template", response_model=EditionResponse, status_code=201)
async def create_edition_with_template(payload: EditionCreateWithTemplate, db: Session = Depends(get_db)):
    """Create an edition and seed its tasks from a template"""
    return EditionService(db).create_edition_with_template(payload)


@router.get("/{edition_id}", response_model=EditionResponse)
async def get_edition(edition_id: int, db: Session = Depends(get_db)):
    return EditionService(db).require_edition(edition_id)


@router.patch("/{edition_id}", response_model=EditionResponse)
async def update_edition(edition_id: int, payload: EditionUpdate, db: Session = Depends(get_db)):
    return EditionService(db).update_edition(edition_id, payload.model_dump(exclude_unset=True))


@router.delete("/{edition_id}", status_code=204)
async def delete_edition(edition_id: int, db: Session = Depends(get_db)):
    """Delete an edition and all its tasks"""
    if not EditionService(db).delete_edition(edition_id):
        raise NotFoundError(f"Edition {edition_id} not found")
    return Response(status_code=204)


@router.patch("/{edition_id}/archive", response_model=EditionResponse)
async def archive_edition(edition_id: int, db: Session = Depends(get_db)):
    return EditionService(db).archive_edition(edition_id)


@router.patch("/{edition_id}/restore", response_model=EditionResponse)
async def restore_edition(edition_id: int, db: Session = Depends(get_db)):
    return EditionService(db).restore_edition(edition_id)


@router.post("/{edition_id}/refresh-week", response_model=EditionResponse)
async def refresh_current_week(edition_id: int, db: Session = Depends(get_db)):
    """Recompute current_week from today's date"""
    return EditionService(db).refresh_current_week(edition_id)


@router.post("/{edition_id}/duplicate", response_model=EditionResponse, status_code=201)
async def duplicate_edition(edition_id: int, payload: EditionDuplicate, db: Session = Depends(get_db)):
    """Copy an edition and its tasks, shifting task dates to the new start date"""
    return EditionDuplicator(db).duplicate(edition_id, payload)


@router.get("/{edition_id}/tasks", response_model=List[TaskResponse])
async def list_edition_tasks(
    edition_id: int,
    week: Optional[str] = Query(default=None),
    db: Session = Depends(get_db)
):
    """Tasks of an edition, optionally for one week ("5" or "Week 5")"""
    return TaskService(db).get_edition_tasks(edition_id, week=week)


@router.get("/{edition_id}/weeks", response_model=List[WeekOverview])
async def get_week_overview(edition_id: int, db: Session = Depends(get_db)):
    """Per-week timeline summary"""
    return EditionService(db).get_week_overview(edition_id)
