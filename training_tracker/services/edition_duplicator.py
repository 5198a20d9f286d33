import logging
from datetime import date, timedelta

from sqlalchemy import Date, DateTime
from sqlalchemy.orm import Session

from training_tracker.exceptions import NotFoundError, ConflictError, TransactionFailure
from training_tracker.models.edition import Edition
from training_tracker.models.task import Task, TaskStatus
from training_tracker.schemas.edition import EditionDuplicate
from training_tracker.services.audit_service import AuditService
from training_tracker.services.payloads import validate_payload
from training_tracker.services.transaction import committing
from training_tracker.utils.week_calendar import current_week_from_date, shift_date

logger = logging.getLogger(__name__)

# Task columns never copied from the source task
RESET_COLUMNS = {"id", "edition_id", "status", "completion_date"}


def shiftable_date_columns(model) -> list:
    """Calendar-date columns of a model (DateTime columns are not included)"""
    return [
        column.key for column in model.__table__.columns
        if isinstance(column.type, Date) and not isinstance(column.type, DateTime)
    ]


class EditionDuplicator:
    """
    Copies an edition and all its tasks under a new code and start date.

    Task dates move by the difference between the two start dates, so the
    spacing between tasks is kept exactly; they are not recomputed from the
    week labels. Statuses go back to Not Started and completion dates are
    cleared. The new edition and its tasks are committed together or not at all.
    """

    def __init__(self, db: Session, audit: AuditService = None):
        self.db = db
        self.audit = audit or AuditService(db)

    def clone_task(self, task: Task, edition_id: int, shift: timedelta) -> Task:
        date_columns = set(shiftable_date_columns(Task))
        values = {}
        for column in Task.__table__.columns:
            key = column.key
            if key in RESET_COLUMNS:
                continue
            value = getattr(task, key)
            values[key] = shift_date(value, shift) if key in date_columns else value

        return Task(
            **values,
            edition_id=edition_id,
            status=TaskStatus.NOT_STARTED.value,
            completion_date=None
        )

    def duplicate(self, source_edition_id: int, new_edition_fields, today: date = None) -> Edition:
        """Return the new edition; its tasks are created as a side effect"""
        payload = validate_payload(EditionDuplicate, new_edition_fields)

        source = self.db.query(Edition).filter(Edition.id == source_edition_id).first()
        if not source:
            raise NotFoundError(f"Source edition {source_edition_id} not found")
        if self.db.query(Edition).filter(Edition.code == payload.code).first():
            raise ConflictError(f"An edition with code {payload.code} already exists")

        shift = payload.start_date - source.start_date
        source_tasks = list(source.tasks)

        new_edition = Edition(
            code=payload.code,
            training_type=payload.training_type.value,
            start_date=payload.start_date,
            tasks_start_date=payload.tasks_start_date,
            status="active",
            current_week=current_week_from_date(today or date.today(), payload.start_date),
            archived=False
        )
        with committing(self.db, f"duplicate edition {source.code}",
                        conflict_message=f"An edition with code {payload.code} already exists",
                        failure=TransactionFailure):
            self.db.add(new_edition)
            self.db.flush()
            for task in source_tasks:
                self.db.add(self.clone_task(task, new_edition.id, shift))
        self.db.refresh(new_edition)

        logger.info(
            "Duplicated edition %s into %s with %d tasks (shifted %d days)",
            source.code, new_edition.code, len(source_tasks), shift.days
        )
        self.audit.record(
            "edition", new_edition.id, "duplicate",
            previous_state=source.to_dict(),
            new_state=new_edition.to_dict(),
            notes=f"Edition {new_edition.code} duplicated from {source.code} ({len(source_tasks)} tasks)"
        )
        return new_edition
