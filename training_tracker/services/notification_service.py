import logging
from typing import Optional, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from training_tracker.exceptions import NotFoundError
from training_tracker.models.notification import Notification, NotificationType
from training_tracker.models.task import Task
from training_tracker.services.transaction import committing

logger = logging.getLogger(__name__)


class NotificationService:
    """Task notifications. Sending is fire-and-forget like the audit log."""

    def __init__(self, db: Session):
        self.db = db

    # ========== Sending ==========

    def notify(
        self,
        user_id: int,
        type: NotificationType,
        title: str,
        message: str,
        task: Task = None
    ) -> Optional[Notification]:
        """Create a notification; failures are logged and swallowed"""
        notification = Notification(
            user_id=user_id,
            type=type.value,
            title=title,
            message=message,
            entity_type="task" if task is not None else None,
            entity_id=task.id if task is not None else None,
            action_url=f"/tasks/{task.id}" if task is not None else None,
            extra={"taskId": task.id, "editionId": task.edition_id} if task is not None else None,
            is_read=False
        )
        try:
            self.db.add(notification)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.warning("Could not create %s notification for user %s", type.value, user_id, exc_info=True)
            return None
        return notification

    def notify_task_assigned(self, user_id: int, task: Task, edition_code: str) -> Optional[Notification]:
        return self.notify(
            user_id,
            NotificationType.TASK_ASSIGNED,
            "Task Assigned",
            f'You have been assigned to task "{task.name}" ({edition_code})',
            task
        )

    def notify_task_completed(self, user_id: int, task: Task) -> Optional[Notification]:
        return self.notify(
            user_id,
            NotificationType.TASK_COMPLETED,
            "Task Completed",
            f'Task "{task.name}" has been marked as completed',
            task
        )

    def notify_task_updated(self, user_id: int, task: Task) -> Optional[Notification]:
        return self.notify(
            user_id,
            NotificationType.TASK_UPDATED,
            "Task Updated",
            f'Task "{task.name}" has been updated',
            task
        )

    # ========== Reading ==========

    def get_user_notifications(self, user_id: int, include_read: bool = False, limit: int = 50) -> List[Notification]:
        query = self.db.query(Notification).filter(Notification.user_id == user_id)
        if not include_read:
            query = query.filter(Notification.is_read == False)  # noqa: E712
        return query.order_by(Notification.id.desc()).limit(limit).all()

    def get_unread_count(self, user_id: int) -> int:
        return self.db.query(Notification).filter(
            Notification.user_id == user_id,
            Notification.is_read == False  # noqa: E712
        ).count()

    def mark_as_read(self, notification_id: int) -> Notification:
        notification = self.db.query(Notification).filter(Notification.id == notification_id).first()
        if not notification:
            raise NotFoundError(f"Notification {notification_id} not found")

        with committing(self.db, "mark notification as read"):
            notification.is_read = True
        self.db.refresh(notification)
        return notification
