from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session
from typing import List

from training_tracker.database import get_db
from training_tracker.exceptions import NotFoundError
from training_tracker.services.task_service import TaskService
from training_tracker.schemas.task import TaskCreate, TaskUpdate, TaskResponse

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


@router.get("", response_model=List[TaskResponse])
async def list_tasks(db: Session = Depends(get_db)):
    return TaskService(db).get_all_tasks()


@router.post("", response_model=TaskResponse, status_code=201)
async def create_task(payload: TaskCreate, db: Session = Depends(get_db)):
    return TaskService(db).create_task(payload)


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(task_id: int, db: Session = Depends(get_db)):
    return TaskService(db).require_task(task_id)


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(task_id: int, payload: TaskUpdate, db: Session = Depends(get_db)):
    """Partial update; setting status to Done stamps completion_date unless given"""
    return TaskService(db).update_task(task_id, payload.model_dump(exclude_unset=True))


@router.delete("/{task_id}", status_code=204)
async def delete_task(task_id: int, db: Session = Depends(get_db)):
    if not TaskService(db).delete_task(task_id):
        raise NotFoundError(f"Task {task_id} not found")
    return Response(status_code=204)
