import logging
from sqlalchemy.orm import Session
from datetime import date, datetime
from typing import Callable, Optional, List

from training_tracker.exceptions import NotFoundError, ValidationError
from training_tracker.models.edition import Edition
from training_tracker.models.task import Task
from training_tracker.schemas.task import TaskCreate, TaskUpdate
from training_tracker.services.audit_service import AuditService
from training_tracker.services.notification_service import NotificationService
from training_tracker.services.payloads import validate_payload
from training_tracker.services.task_status import apply_status_transition
from training_tracker.services.transaction import committing
from training_tracker.services.user_service import UserService
from training_tracker.utils.week_calendar import next_task_code, normalize_week_label

logger = logging.getLogger(__name__)

IMMUTABLE_FIELDS = {"id", "edition_id"}
ASSIGNMENT_FIELDS = {"assigned_user_id", "assigned_to"}
REQUIRED_FIELDS = ("task_code", "week", "name", "training_type", "status")


class TaskService:
    """Task CRUD with status side effects, audit entries and notifications"""

    def __init__(
        self,
        db: Session,
        audit: AuditService = None,
        notifications: NotificationService = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.db = db
        self.audit = audit or AuditService(db)
        self.notifications = notifications or NotificationService(db)
        self.users = UserService(db)
        self.clock = clock

    # ========== Queries ==========

    def get_task(self, task_id: int) -> Optional[Task]:
        return self.db.query(Task).filter(Task.id == task_id).first()

    def require_task(self, task_id: int) -> Task:
        task = self.get_task(task_id)
        if not task:
            raise NotFoundError(f"Task {task_id} not found")
        return task

    def get_all_tasks(self) -> List[Task]:
        return self.db.query(Task).order_by(Task.edition_id, Task.due_date, Task.id).all()

    def get_edition_tasks(self, edition_id: int, week: str = None) -> List[Task]:
        """Tasks of an edition; `week` may be "5" or "Week 5" """
        if not self.db.query(Edition).filter(Edition.id == edition_id).first():
            raise NotFoundError(f"Edition {edition_id} not found")

        query = self.db.query(Task).filter(Task.edition_id == edition_id)
        if week:
            query = query.filter(Task.week == normalize_week_label(week))
        tasks = query.order_by(Task.id).all()
        return sorted(tasks, key=lambda t: (t.week_number, t.due_date or date.max, t.id))

    # ========== Create / delete ==========

    def create_task(self, data) -> Task:
        """Create a task in an existing edition"""
        payload = validate_payload(TaskCreate, data)
        edition = self.db.query(Edition).filter(Edition.id == payload.edition_id).first()
        if not edition:
            raise NotFoundError(f"Edition {payload.edition_id} not found")
        self._check_assigned_user(payload.assigned_user_id)

        values = payload.model_dump()
        values["week"] = normalize_week_label(payload.week)
        values["training_type"] = payload.training_type.value
        if not values.get("task_code"):
            values["task_code"] = next_task_code(payload.week, [t.task_code for t in edition.tasks])
        values = apply_status_transition(None, values, self.clock())

        task = Task(**values)
        with committing(self.db, "create task"):
            self.db.add(task)
        self.db.refresh(task)

        self.audit.record("task", task.id, "create", new_state=task.to_dict(),
                          notes=f'New task "{task.name}" created for edition {edition.code}')
        if task.assigned_user_id:
            self.notifications.notify_task_assigned(task.assigned_user_id, task, edition.code)
        return task

    def delete_task(self, task_id: int) -> bool:
        task = self.get_task(task_id)
        if not task:
            return False

        snapshot = task.to_dict()
        with committing(self.db, "delete task"):
            self.db.delete(task)

        self.audit.record("task", task_id, "delete", previous_state=snapshot,
                          notes=f"Task {snapshot['task_code']} deleted")
        return True

    # ========== Update ==========

    def update_task(self, task_id: int, changes: dict) -> Task:
        """Apply a partial update; entering Done stamps the completion date"""
        task = self.require_task(task_id)

        blocked = IMMUTABLE_FIELDS & set(changes)
        if blocked:
            raise ValidationError(f"Cannot change {', '.join(sorted(blocked))} of a task")
        patch = validate_payload(TaskUpdate, changes).model_dump(exclude_unset=True)
        empty = [key for key in REQUIRED_FIELDS if key in patch and patch[key] is None]
        if empty:
            raise ValidationError(f"{', '.join(empty)} cannot be empty")

        if "assigned_user_id" in patch:
            self._check_assigned_user(patch["assigned_user_id"])
        if "week" in patch:
            patch["week"] = normalize_week_label(patch["week"])
        if patch.get("training_type") is not None:
            patch["training_type"] = patch["training_type"].value
        patch = apply_status_transition(task, patch, self.clock())

        previous = task.to_dict()
        with committing(self.db, f"update task {task_id}"):
            for key, value in patch.items():
                setattr(task, key, value)
        self.db.refresh(task)

        self.audit.record("task", task.id, "update", previous, task.to_dict(),
                          notes=f"Task {task.task_code} ({task.name}) updated")
        self._notify_changes(task, patch, previous)
        return task

    def _check_assigned_user(self, user_id: Optional[int]):
        if user_id is not None and not self.users.get_user(user_id):
            raise ValidationError("Invalid user assignment. User does not exist.")

    def _notify_changes(self, task: Task, patch: dict, previous: dict):
        """Tell the assignee about assignment, completion and other edits"""
        edition_code = task.edition.code if task.edition else "Unknown"
        previous_user_id = previous["assigned_user_id"]
        previous_assigned_to = previous["assigned_to"]
        notified = set()

        if task.assigned_user_id and task.assigned_user_id != previous_user_id:
            self.notifications.notify_task_assigned(task.assigned_user_id, task, edition_code)
            notified.add(task.assigned_user_id)

        if task.assigned_to and task.assigned_to != previous_assigned_to:
            matched = self.users.find_by_name(task.assigned_to)
            if matched and matched.id not in notified:
                self.notifications.notify_task_assigned(matched.id, task, edition_code)
                notified.add(matched.id)

        if task.is_done and previous["status"] != task.status:
            recipient = task.assigned_user_id
            if not recipient and task.assigned_to:
                matched = self.users.find_by_name(task.assigned_to)
                recipient = matched.id if matched else None
            if recipient:
                self.notifications.notify_task_completed(recipient, task)
            return

        if not set(patch) - ASSIGNMENT_FIELDS:
            return
        if task.assigned_user_id and task.assigned_user_id == previous_user_id:
            self.notifications.notify_task_updated(task.assigned_user_id, task)
        elif not task.assigned_user_id and task.assigned_to and task.assigned_to == previous_assigned_to:
            matched = self.users.find_by_name(task.assigned_to)
            if matched:
                self.notifications.notify_task_updated(matched.id, task)
