from sqlalchemy.orm import Session
from sqlalchemy import or_
from typing import Optional

from training_tracker.models.user import User, UserRole
from training_tracker.services.transaction import committing


class UserService:
    """Lookup of the people tasks are assigned to"""

    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def find_by_name(self, name: str) -> Optional[User]:
        """Match a free-text assignee against username or full name"""
        if not name:
            return None
        return self.db.query(User).filter(
            or_(User.username == name, User.full_name == name)
        ).first()

    def create_user(
        self,
        username: str,
        full_name: str = None,
        email: str = None,
        role: UserRole = UserRole.VIEWER
    ) -> User:
        user = User(
            username=username,
            full_name=full_name,
            email=email,
            role=getattr(role, "value", role)
        )
        with committing(self.db, "create user", conflict_message=f"User {username} already exists"):
            self.db.add(user)
        self.db.refresh(user)
        return user
