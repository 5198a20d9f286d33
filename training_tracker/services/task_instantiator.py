import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from training_tracker.data.task_templates import TaskTemplate, TaskTemplateCatalog, DEFAULT_CATALOG
from training_tracker.exceptions import TrackerError, NotFoundError, ValidationError, TransactionFailure
from training_tracker.models.edition import Edition
from training_tracker.models.task import Task, TaskStatus
from training_tracker.utils.week_calendar import due_date_for_week, normalize_week_label

logger = logging.getLogger(__name__)

ATOMIC = "atomic"
BEST_EFFORT = "best_effort"


class TaskInstantiator:
    """
    Turns template tasks into Task rows for an edition.

    Does not commit. In "atomic" mode the first failing template aborts the
    whole seeding with TransactionFailure so the caller can roll back. In
    "best_effort" mode each task is added inside a savepoint and failures are
    logged and skipped.
    """

    def __init__(self, db: Session, catalog: TaskTemplateCatalog = None, mode: str = ATOMIC):
        if mode not in (ATOMIC, BEST_EFFORT):
            raise ValueError(f"Unknown seeding mode: {mode}")
        self.db = db
        self.catalog = catalog or DEFAULT_CATALOG
        self.mode = mode

    def build_task(self, edition: Edition, template: TaskTemplate) -> Task:
        """Task for one template; due date comes from the week label"""
        if not template.name:
            raise ValidationError(f"Template task {template.task_code} has no name")
        if not template.task_code:
            raise ValidationError(f"Template task in {template.week} has no code")

        return Task(
            edition_id=edition.id,
            task_code=template.task_code,
            week=normalize_week_label(template.week),
            name=template.name,
            duration=template.duration,
            due_date=due_date_for_week(template.week, edition.start_date),
            training_type=template.training_type,
            owner=template.owner,
            assigned_to=template.assigned_to,
            status=TaskStatus.NOT_STARTED.value,
            inflexible=template.inflexible,
            completion_date=None,
            notes=template.notes or None
        )

    def instantiate(self, edition: Edition, template_kind: str = "default") -> List[Task]:
        """Add one task per template task, in week order"""
        if edition is None or edition.id is None:
            raise NotFoundError("Edition not found; template tasks were not created")
        if template_kind not in self.catalog.kinds:
            raise ValidationError(f"Unknown template kind '{template_kind}'")

        templates = self.catalog.get_template(template_kind)
        created = []
        for template in templates:
            if self.mode == BEST_EFFORT:
                task = self._add_best_effort(edition, template)
                if task is not None:
                    created.append(task)
                continue

            try:
                task = self.build_task(edition, template)
            except TrackerError as exc:
                raise TransactionFailure(
                    f"Template task {template.task_code or template.week} could not be created: {exc.message}"
                ) from exc
            self.db.add(task)
            created.append(task)

        if self.mode == ATOMIC:
            self.db.flush()

        logger.info(
            "Seeded %d/%d %s template tasks for edition %s",
            len(created), len(templates), template_kind, edition.code
        )
        return created

    def _add_best_effort(self, edition: Edition, template: TaskTemplate):
        try:
            task = self.build_task(edition, template)
            with self.db.begin_nested():
                self.db.add(task)
        except (TrackerError, SQLAlchemyError):
            logger.warning(
                "Skipping template task %s for edition %s", template.task_code, edition.code, exc_info=True
            )
            return None
        return task
