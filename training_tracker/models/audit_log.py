from sqlalchemy import Column, Integer, String, DateTime, Text, JSON, ForeignKey
from sqlalchemy.sql import func
from training_tracker.database import Base


class AuditLog(Base):
    """Before/after record of a change to an edition or task"""
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    entity_type = Column(String(20), nullable=False, index=True)  # edition / task
    entity_id = Column(Integer, nullable=False, index=True)
    action = Column(String(20), nullable=False)  # create / update / delete / duplicate
    previous_state = Column(JSON, nullable=True)
    new_state = Column(JSON, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<AuditLog(entity={self.entity_type}:{self.entity_id}, action={self.action})>"
