from sqlalchemy import Column, Integer, String, Date, DateTime, Boolean
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from datetime import date
from training_tracker.database import Base
from training_tracker.utils.week_calendar import classify_phase, EditionPhase
import enum


class TrainingType(str, enum.Enum):
    """Training route"""
    GLR = "GLR"  # Guided Learning Route, code variant A
    SLR = "SLR"  # Self Learning Route, code variant B
    ALL = "ALL"  # template-only sentinel


class Edition(Base):
    """One run of the training program"""
    __tablename__ = "editions"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(10), unique=True, index=True, nullable=False)  # YYMM-A / YYMM-B
    training_type = Column(String(10), nullable=False)
    start_date = Column(Date, nullable=False)        # first day of Week 1
    tasks_start_date = Column(Date, nullable=False)  # usually 5 weeks before start_date
    status = Column(String(20), default="active")
    current_week = Column(Integer, default=1)        # cached, see EditionService.refresh_current_week
    archived = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    tasks = relationship(
        "Task",
        back_populates="edition",
        cascade="all, delete-orphan",
        order_by="Task.id",
    )

    def __repr__(self):
        return f"<Edition(id={self.id}, code={self.code}, type={self.training_type})>"

    @property
    def phase(self) -> EditionPhase:
        """Upcoming / Active / Finished as of today"""
        return classify_phase(self.start_date, date.today())

    def to_dict(self) -> dict:
        """JSON-safe snapshot used by the audit log"""
        return {
            "id": self.id,
            "code": self.code,
            "training_type": self.training_type,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "tasks_start_date": self.tasks_start_date.isoformat() if self.tasks_start_date else None,
            "status": self.status,
            "current_week": self.current_week,
            "archived": self.archived,
        }
