import logging
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional, List

from training_tracker.config import Settings, get_settings
from training_tracker.data.task_templates import TaskTemplateCatalog, DEFAULT_CATALOG, template_kind_for_training_type
from training_tracker.exceptions import NotFoundError, ConflictError, ValidationError, TransactionFailure
from training_tracker.models.edition import Edition
from training_tracker.models.task import TaskStatus
from training_tracker.schemas.edition import EditionCreate, EditionCreateWithTemplate, EditionUpdate, check_edition_code
from training_tracker.services.audit_service import AuditService
from training_tracker.services.payloads import validate_payload
from training_tracker.services.task_instantiator import TaskInstantiator
from training_tracker.services.transaction import committing
from training_tracker.utils.week_calendar import (
    EditionPhase,
    all_weeks,
    classify_phase,
    current_week_from_date,
    normalize_week_label,
    week_completion_status,
    week_status,
)

logger = logging.getLogger(__name__)

# Fields that may never be patched
IMMUTABLE_FIELDS = {"id", "start_date"}


class EditionService:
    """Edition lifecycle: create, seed, update, archive, delete"""

    def __init__(
        self,
        db: Session,
        audit: AuditService = None,
        catalog: TaskTemplateCatalog = None,
        settings: Settings = None
    ):
        self.db = db
        self.audit = audit or AuditService(db)
        self.catalog = catalog or DEFAULT_CATALOG
        self.settings = settings or get_settings()

    # ========== Queries ==========

    def get_edition(self, edition_id: int) -> Optional[Edition]:
        return self.db.query(Edition).filter(Edition.id == edition_id).first()

    def get_edition_by_code(self, code: str) -> Optional[Edition]:
        return self.db.query(Edition).filter(Edition.code == code).first()

    def require_edition(self, edition_id: int) -> Edition:
        edition = self.get_edition(edition_id)
        if not edition:
            raise NotFoundError(f"Edition {edition_id} not found")
        return edition

    def get_all_editions(self, include_archived: bool = False) -> List[Edition]:
        """Editions by start date; archived ones only on request"""
        query = self.db.query(Edition)
        if not include_archived:
            query = query.filter(Edition.archived == False)  # noqa: E712
        return query.order_by(Edition.start_date, Edition.id).all()

    def ensure_code_available(self, code: str, exclude_id: int = None):
        existing = self.get_edition_by_code(code)
        if existing and existing.id != exclude_id:
            raise ConflictError(f"An edition with code {code} already exists")

    # ========== Creation ==========

    def build_edition(self, payload) -> Edition:
        """Unsaved Edition with the initial lifecycle defaults"""
        return Edition(
            code=payload.code,
            training_type=payload.training_type.value,
            start_date=payload.start_date,
            tasks_start_date=payload.tasks_start_date,
            status="active",
            current_week=1,
            archived=False
        )

    def create_edition(self, data) -> Edition:
        """Create an edition without tasks"""
        payload = validate_payload(EditionCreate, data)
        self.ensure_code_available(payload.code)

        edition = self.build_edition(payload)
        with committing(self.db, "create edition",
                        conflict_message=f"An edition with code {payload.code} already exists"):
            self.db.add(edition)
        self.db.refresh(edition)

        logger.info("Created edition %s (%s)", edition.code, edition.training_type)
        self.audit.record("edition", edition.id, "create", new_state=edition.to_dict(),
                          notes=f"Edition {edition.code} created")
        return edition

    def create_edition_with_template(self, data, template_kind: str = None, today: date = None) -> Edition:
        """
        Create an edition, seed its tasks from a template and set current_week.

        The kind defaults to the edition's route (glr / slr). With the default
        "atomic" seeding mode nothing is saved if any template task fails.
        """
        payload = validate_payload(EditionCreateWithTemplate, data)
        kind = template_kind or payload.template_kind or template_kind_for_training_type(payload.training_type)
        if kind not in self.catalog.kinds:
            raise ValidationError(f"Unknown template kind '{kind}'")
        self.ensure_code_available(payload.code)

        edition = self.build_edition(payload)
        instantiator = TaskInstantiator(self.db, self.catalog, mode=self.settings.template_seeding_mode)
        with committing(self.db, "create edition with template",
                        conflict_message=f"An edition with code {payload.code} already exists",
                        failure=TransactionFailure):
            self.db.add(edition)
            self.db.flush()
            tasks = instantiator.instantiate(edition, kind)
            edition.current_week = current_week_from_date(today or date.today(), edition.start_date)
        self.db.refresh(edition)

        logger.info("Created edition %s from %s template with %d tasks", edition.code, kind, len(tasks))
        self.audit.record("edition", edition.id, "create", new_state=edition.to_dict(),
                          notes=f"Edition {edition.code} created from {kind} template ({len(tasks)} tasks)")
        return edition

    # ========== Updates ==========

    def update_edition(self, edition_id: int, changes: dict) -> Edition:
        """Merge the given fields. current_week is only changed when it is in the patch."""
        edition = self.require_edition(edition_id)

        blocked = IMMUTABLE_FIELDS & set(changes)
        if blocked:
            raise ValidationError(f"Cannot change {', '.join(sorted(blocked))} of an edition")
        patch = validate_payload(EditionUpdate, changes).model_dump(exclude_unset=True)
        empty = [key for key in ("code", "training_type", "tasks_start_date", "archived")
                 if key in patch and patch[key] is None]
        if empty:
            raise ValidationError(f"{', '.join(empty)} cannot be empty")
        if patch.get("code"):
            self.ensure_code_available(patch["code"], exclude_id=edition.id)
        if patch.get("training_type") is not None:
            patch["training_type"] = patch["training_type"].value
        if "code" in patch or "training_type" in patch:
            try:
                check_edition_code(patch.get("code", edition.code), patch.get("training_type", edition.training_type))
            except ValueError as exc:
                raise ValidationError(str(exc)) from exc

        previous = edition.to_dict()
        with committing(self.db, "update edition",
                        conflict_message=f"An edition with code {patch.get('code')} already exists"):
            for key, value in patch.items():
                setattr(edition, key, value)
        self.db.refresh(edition)

        self.audit.record("edition", edition.id, "update", previous, edition.to_dict(),
                          notes=f"Edition {edition.code} updated")
        return edition

    def archive_edition(self, edition_id: int) -> Edition:
        """Hide from default listings; tasks are untouched"""
        return self._set_archived(edition_id, True)

    def restore_edition(self, edition_id: int) -> Edition:
        return self._set_archived(edition_id, False)

    def _set_archived(self, edition_id: int, archived: bool) -> Edition:
        edition = self.require_edition(edition_id)
        previous = edition.to_dict()

        with committing(self.db, "archive edition" if archived else "restore edition"):
            edition.archived = archived
        self.db.refresh(edition)

        verb = "archived" if archived else "restored from archive"
        self.audit.record("edition", edition.id, "update", previous, edition.to_dict(),
                          notes=f"Edition {edition.code} {verb}")
        return edition

    def refresh_current_week(self, edition_id: int, today: date = None) -> Edition:
        """Recompute the cached current_week from the start date"""
        edition = self.require_edition(edition_id)
        with committing(self.db, "refresh current week"):
            edition.current_week = current_week_from_date(today or date.today(), edition.start_date)
        self.db.refresh(edition)
        return edition

    def delete_edition(self, edition_id: int) -> bool:
        """Delete an edition and all its tasks. False if it did not exist."""
        edition = self.get_edition(edition_id)
        if not edition:
            return False

        snapshot = edition.to_dict()
        task_count = len(edition.tasks)
        with committing(self.db, "delete edition"):
            self.db.delete(edition)

        logger.info("Deleted edition %s and its %d tasks", snapshot["code"], task_count)
        self.audit.record("edition", edition_id, "delete", previous_state=snapshot,
                          notes=f"Edition {snapshot['code']} deleted")
        return True

    # ========== Derived state ==========

    def classify(self, edition: Edition, now: date = None) -> Optional[EditionPhase]:
        """Upcoming / Active / Finished"""
        return classify_phase(edition.start_date, now or date.today())

    def get_week_overview(self, edition_id: int, today: date = None) -> List[dict]:
        """Per-week task counts and status for the edition timeline"""
        edition = self.require_edition(edition_id)
        current = current_week_from_date(today or date.today(), edition.start_date)

        by_week = {}
        for task in edition.tasks:
            by_week.setdefault(task.week_number, []).append(task.status)

        weeks = sorted(set(all_weeks()) | set(by_week))
        overview = []
        for number in weeks:
            statuses = by_week.get(number, [])
            overview.append({
                "week": normalize_week_label(number),
                "week_number": number,
                "week_status": week_status(number, current),
                "completion": week_completion_status(statuses),
                "task_count": len(statuses),
                "done_count": len([s for s in statuses if s == TaskStatus.DONE.value]),
            })
        return overview
