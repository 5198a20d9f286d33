import logging
from typing import Optional, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from training_tracker.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


class AuditService:
    """Audit trail writer. Writes are fire-and-forget: a failure is logged, never raised."""

    def __init__(self, db: Session):
        self.db = db

    def record(
        self,
        entity_type: str,
        entity_id: int,
        action: str,
        previous_state: dict = None,
        new_state: dict = None,
        notes: str = None,
        user_id: int = None
    ) -> Optional[AuditLog]:
        """Store one audit entry in its own commit"""
        entry = AuditLog(
            user_id=user_id,
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            previous_state=previous_state,
            new_state=new_state,
            notes=notes
        )
        try:
            self.db.add(entry)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.warning(
                "Could not write audit log for %s %s (%s)", entity_type, entity_id, action, exc_info=True
            )
            return None
        return entry

    def get_logs(
        self,
        entity_type: str = None,
        entity_id: int = None,
        limit: int = 100
    ) -> List[AuditLog]:
        """Newest entries first, optionally for one entity"""
        query = self.db.query(AuditLog)
        if entity_type:
            query = query.filter(AuditLog.entity_type == entity_type)
        if entity_id is not None:
            query = query.filter(AuditLog.entity_id == entity_id)
        return query.order_by(AuditLog.id.desc()).limit(limit).all()
