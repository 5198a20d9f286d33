"""
Task status rules.

Any status may move to any other; the only side effect is stamping the
completion date when a task enters Done. Leaving Done keeps the stored
completion date unless the caller clears it.
"""

from datetime import datetime
from typing import Optional

from training_tracker.exceptions import ValidationError
from training_tracker.models.task import Task, TaskStatus


def parse_status(value) -> TaskStatus:
    try:
        return TaskStatus(getattr(value, "value", value))
    except ValueError:
        allowed = ", ".join(s.value for s in TaskStatus)
        raise ValidationError(f"Invalid status '{value}'. Allowed: {allowed}")


def apply_status_transition(task: Optional[Task], changes: dict, now: datetime) -> dict:
    """
    Return `changes` with status side effects applied.

    `task` is the stored task (None on create). A completion date the caller
    supplies is always kept; otherwise entering Done stamps `now`. A task
    that is already Done with a completion date keeps it.
    """
    if changes.get("status") is None:
        return changes

    status = parse_status(changes["status"])
    changes = {**changes, "status": status.value}

    if status != TaskStatus.DONE or changes.get("completion_date") is not None:
        return changes

    already_completed = task is not None and task.is_done and task.completion_date is not None
    if not already_completed:
        changes["completion_date"] = now
    return changes
