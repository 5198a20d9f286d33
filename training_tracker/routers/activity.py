from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from training_tracker.database import get_db
from training_tracker.services.audit_service import AuditService
from training_tracker.services.notification_service import NotificationService
from training_tracker.schemas.audit import AuditLogResponse, NotificationResponse

router = APIRouter(prefix="/api", tags=["activity"])


@router.get("/audit-logs", response_model=List[AuditLogResponse])
async def get_audit_logs(
    entity_type: Optional[str] = Query(default=None),
    entity_id: Optional[int] = Query(default=None),
    limit: int = Query(default=100, le=500),
    db: Session = Depends(get_db)
):
    """Audit trail, newest first"""
    return AuditService(db).get_logs(entity_type=entity_type, entity_id=entity_id, limit=limit)


@router.get("/notifications", response_model=List[NotificationResponse])
async def get_notifications(
    user_id: int,
    include_read: bool = Query(default=False),
    limit: int = Query(default=50, le=200),
    db: Session = Depends(get_db)
):
    return NotificationService(db).get_user_notifications(user_id, include_read=include_read, limit=limit)


@router.get("/notifications/count")
async def get_unread_count(user_id: int, db: Session = Depends(get_db)):
    return {"count": NotificationService(db).get_unread_count(user_id)}


@router.post("/notifications/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(notification_id: int, db: Session = Depends(get_db)):
    return NotificationService(db).mark_as_read(notification_id)
