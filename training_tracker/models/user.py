from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from training_tracker.database import Base
import enum


class UserRole(str, enum.Enum):
    """User role"""
    ADMIN = "admin"
    EDITOR = "editor"
    VIEWER = "viewer"


class User(Base):
    """Person tasks can be assigned to"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, index=True, nullable=False)
    full_name = Column(String(200), nullable=True)
    email = Column(String(255), nullable=True)
    role = Column(String(20), default=UserRole.VIEWER.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username}, role={self.role})>"
