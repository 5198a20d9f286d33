from sqlalchemy import Column, Integer, String, Date, DateTime, Boolean, Text, ForeignKey
from sqlalchemy.orm import relationship
from training_tracker.database import Base
from training_tracker.utils.week_calendar import week_number
import enum


class TaskStatus(str, enum.Enum):
    """Task status. No transition graph is enforced; only entering DONE has a side effect."""
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    PENDING = "Pending"
    BLOCKED = "Blocked"
    DONE = "Done"


class Task(Base):
    """Checklist item of an edition"""
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    edition_id = Column(
        Integer, ForeignKey("editions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    task_code = Column(String(20), nullable=False)  # W5T01 / WM5T01
    week = Column(String(10), nullable=False)       # normalized "Week N"
    name = Column(Text, nullable=False)
    duration = Column(String(10), nullable=True)    # h:mm:ss
    due_date = Column(Date, nullable=True)
    training_type = Column(String(10), nullable=False)
    links = Column(Text, nullable=True)

    # Responsibility
    owner = Column(String(100), nullable=True)
    assigned_to = Column(String(100), nullable=True)  # role or person name
    assigned_user_id = Column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )

    status = Column(String(20), default=TaskStatus.NOT_STARTED.value, nullable=False)
    inflexible = Column(Boolean, default=False)
    completion_date = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)

    edition = relationship("Edition", back_populates="tasks")
    assigned_user = relationship("User")

    def __repr__(self):
        return f"<Task(id={self.id}, code={self.task_code}, week={self.week}, status={self.status})>"

    @property
    def is_done(self) -> bool:
        return self.status == TaskStatus.DONE.value

    @property
    def week_number(self) -> int:
        return week_number(self.week)

    def to_dict(self) -> dict:
        """JSON-safe snapshot used by the audit log"""
        return {
            "id": self.id,
            "edition_id": self.edition_id,
            "task_code": self.task_code,
            "week": self.week,
            "name": self.name,
            "duration": self.duration,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "training_type": self.training_type,
            "links": self.links,
            "owner": self.owner,
            "assigned_to": self.assigned_to,
            "assigned_user_id": self.assigned_user_id,
            "status": self.status,
            "inflexible": self.inflexible,
            "completion_date": self.completion_date.isoformat() if self.completion_date else None,
            "notes": self.notes,
        }
