"""Tests for duplicating an edition with shifted task dates."""

from datetime import date, datetime, timedelta

import pytest
from sqlalchemy.exc import SQLAlchemyError

from training_tracker.exceptions import ConflictError, NotFoundError, TransactionFailure, ValidationError
from training_tracker.models import AuditLog, Edition, Task
from training_tracker.services.edition_duplicator import EditionDuplicator, shiftable_date_columns

from conftest import START

NEW_START = date(2024, 9, 16)


@pytest.fixture
def duplicator(db):
    return EditionDuplicator(db)


@pytest.fixture
def new_fields():
    return {
        "code": "2409-A",
        "training_type": "GLR",
        "start_date": NEW_START,
        "tasks_start_date": date(2024, 8, 12),
    }


def test_only_calendar_dates_shift():
    assert shiftable_date_columns(Task) == ["due_date"]
    assert set(shiftable_date_columns(Edition)) == {"start_date", "tasks_start_date"}


class TestDuplicate:
    def test_copies_every_task(self, duplicator, seeded_edition, new_fields):
        copy = duplicator.duplicate(seeded_edition.id, new_fields, today=START)
        assert copy.id != seeded_edition.id
        assert copy.code == "2409-A"
        assert len(copy.tasks) == len(seeded_edition.tasks) == 26
        assert [t.task_code for t in copy.tasks] == [t.task_code for t in seeded_edition.tasks]

    def test_due_dates_shift_by_start_difference(self, duplicator, seeded_edition, new_fields):
        copy = duplicator.duplicate(seeded_edition.id, new_fields, today=START)
        shift = NEW_START - START
        for original, cloned in zip(seeded_edition.tasks, copy.tasks):
            assert cloned.due_date == original.due_date + shift

        due = {t.task_code: t.due_date for t in copy.tasks}
        assert due["W02T01"] == date(2024, 9, 16)

    def test_custom_due_date_keeps_offset(self, db, duplicator, seeded_edition, new_fields):
        task = [t for t in seeded_edition.tasks if t.task_code == "W02T02"][0]
        task.due_date = date(2024, 5, 27)
        db.commit()

        copy = duplicator.duplicate(seeded_edition.id, new_fields, today=START)
        cloned = [t for t in copy.tasks if t.task_code == "W02T02"][0]
        assert cloned.due_date == date(2024, 9, 23)

    def test_missing_due_date_stays_missing(self, db, duplicator, seeded_edition, new_fields):
        seeded_edition.tasks[0].due_date = None
        db.commit()

        copy = duplicator.duplicate(seeded_edition.id, new_fields, today=START)
        assert copy.tasks[0].due_date is None

    def test_backwards_shift(self, duplicator, seeded_edition, new_fields):
        new_fields["start_date"] = date(2024, 1, 8)
        copy = duplicator.duplicate(seeded_edition.id, new_fields, today=START)
        due = {t.task_code: t.due_date for t in copy.tasks}
        assert due["W01T01"] == date(2024, 1, 1)

    def test_progress_is_reset(self, db, duplicator, seeded_edition, new_fields):
        for task in seeded_edition.tasks[:3]:
            task.status = "Done"
            task.completion_date = datetime(2024, 5, 1, 12, 0)
        seeded_edition.tasks[3].status = "Blocked"
        db.commit()

        copy = duplicator.duplicate(seeded_edition.id, new_fields, today=START)
        assert {t.status for t in copy.tasks} == {"Not Started"}
        assert all(t.completion_date is None for t in copy.tasks)

    def test_other_fields_copied(self, db, duplicator, seeded_edition, new_fields):
        task = seeded_edition.tasks[0]
        task.links = "https://example.org/folder"
        task.notes = "bring coffee"
        db.commit()

        cloned = duplicator.duplicate(seeded_edition.id, new_fields, today=START).tasks[0]
        assert cloned.links == "https://example.org/folder"
        assert cloned.notes == "bring coffee"
        assert cloned.name == task.name
        assert cloned.owner == task.owner
        assert cloned.inflexible == task.inflexible

    def test_source_untouched(self, db, duplicator, seeded_edition, new_fields):
        before = [t.to_dict() for t in seeded_edition.tasks]
        duplicator.duplicate(seeded_edition.id, new_fields, today=START)
        db.expire_all()
        assert [t.to_dict() for t in seeded_edition.tasks] == before

    def test_new_edition_state(self, duplicator, seeded_edition, new_fields):
        copy = duplicator.duplicate(seeded_edition.id, new_fields, today=date(2024, 9, 23))
        assert copy.status == "active"
        assert copy.archived is False
        assert copy.current_week == 2
        assert copy.tasks_start_date == date(2024, 8, 12)

    def test_edition_without_tasks(self, duplicator, editions, edition_data, new_fields):
        source = editions.create_edition(edition_data)
        copy = duplicator.duplicate(source.id, new_fields, today=START)
        assert copy.tasks == []

    def test_audit_entry(self, db, duplicator, seeded_edition, new_fields):
        copy = duplicator.duplicate(seeded_edition.id, new_fields, today=START)
        entry = db.query(AuditLog).filter(AuditLog.action == "duplicate").one()
        assert entry.entity_id == copy.id
        assert entry.previous_state["code"] == "2405-A"


class TestDuplicateFailures:
    def test_missing_source(self, duplicator, new_fields):
        with pytest.raises(NotFoundError):
            duplicator.duplicate(999, new_fields)

    def test_code_taken(self, db, duplicator, seeded_edition, new_fields):
        new_fields["code"] = "2405-A"
        with pytest.raises(ConflictError):
            duplicator.duplicate(seeded_edition.id, new_fields)
        assert db.query(Edition).count() == 1
        assert db.query(Task).count() == 26

    def test_code_must_match_route(self, db, duplicator, seeded_edition, new_fields):
        new_fields["code"] = "2409-B"
        with pytest.raises(ValidationError):
            duplicator.duplicate(seeded_edition.id, new_fields)
        assert db.query(Edition).count() == 1

    def test_invalid_fields(self, duplicator, seeded_edition, new_fields):
        new_fields["code"] = "september"
        with pytest.raises(ValidationError):
            duplicator.duplicate(seeded_edition.id, new_fields)

    def test_failure_rolls_back_everything(self, db, duplicator, seeded_edition, new_fields, monkeypatch):
        calls = []

        def failing_clone(task, edition_id, shift):
            calls.append(task.id)
            if len(calls) == 10:
                raise SQLAlchemyError("connection lost")
            return original_clone(task, edition_id, shift)

        original_clone = duplicator.clone_task
        monkeypatch.setattr(duplicator, "clone_task", failing_clone)

        with pytest.raises(TransactionFailure):
            duplicator.duplicate(seeded_edition.id, new_fields, today=START)
        assert db.query(Edition).filter(Edition.code == "2409-A").count() == 0
        assert db.query(Task).count() == 26

    def test_unexpected_error_leaves_session_clean(self, db, duplicator, editions, seeded_edition,
                                                   new_fields, monkeypatch):
        def broken_clone(task, edition_id, shift):
            raise KeyError("due_date")

        monkeypatch.setattr(duplicator, "clone_task", broken_clone)
        with pytest.raises(TransactionFailure):
            duplicator.duplicate(seeded_edition.id, new_fields, today=START)

        editions.create_edition({**new_fields, "code": "2410-A"})
        assert sorted(e.code for e in db.query(Edition).all()) == ["2405-A", "2410-A"]
        assert db.query(Task).count() == 26
