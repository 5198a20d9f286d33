from training_tracker.models.edition import Edition, TrainingType
from training_tracker.models.task import Task, TaskStatus
from training_tracker.models.user import User, UserRole
from training_tracker.models.audit_log import AuditLog
from training_tracker.models.notification import Notification, NotificationType

__all__ = [
    "Edition",
    "TrainingType",
    "Task",
    "TaskStatus",
    "User",
    "UserRole",
    "AuditLog",
    "Notification",
    "NotificationType",
]
