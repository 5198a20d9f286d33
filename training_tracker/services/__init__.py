from training_tracker.services.edition_service import EditionService
from training_tracker.services.edition_duplicator import EditionDuplicator
from training_tracker.services.task_instantiator import TaskInstantiator
from training_tracker.services.task_service import TaskService
from training_tracker.services.audit_service import AuditService
from training_tracker.services.notification_service import NotificationService
from training_tracker.services.user_service import UserService

__all__ = [
    "EditionService",
    "EditionDuplicator",
    "TaskInstantiator",
    "TaskService",
    "AuditService",
    "NotificationService",
    "UserService",
]
