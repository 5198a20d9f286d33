"""
Template tasks used to seed a new edition, Week -5 through Week 8.

BASE_WEEK_TASKS is the default ("ALL") checklist. The GLR and SLR templates
are the same list with a few route-specific overrides applied on top.
"""

from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Mapping, Optional

from training_tracker.utils.week_calendar import week_number


@dataclass(frozen=True)
class TaskTemplate:
    """Prototype of a task; due date, status and completion date are set on instantiation"""
    task_code: str
    week: str
    name: str
    duration: Optional[str] = None
    training_type: str = "ALL"
    assigned_to: Optional[str] = None
    owner: Optional[str] = None
    inflexible: bool = False
    notes: Optional[str] = None

    @property
    def week_number(self) -> int:
        return week_number(self.week)


def _organizer(code, week, name, duration, inflexible=False, notes=""):
    return TaskTemplate(code, week, name, duration, "ALL", "Organizer", "Training Manager", inflexible, notes)


def _trainer(code, week, name, duration, inflexible=False, notes=""):
    return TaskTemplate(code, week, name, duration, "ALL", "Trainer", "Lead Trainer", inflexible, notes)


BASE_WEEK_TASKS: Dict[str, List[TaskTemplate]] = {
    "Week -5": [
        _organizer("WM5T01", "Week -5", "Check if the cohort for the edition exists and if not create it",
                   "0:10:00", notes="This is a required preparation task"),
        _organizer("WM5T02", "Week -5", "Create participant list (names; groups information; schedule; edition)",
                   "0:30:00"),
        _trainer("WM5T03", "Week -5", "Copy course's path and update exam and assignments dates and configure cohorts",
                 "1:00:00", inflexible=True, notes="Must be completed before participant onboarding"),
    ],
    "Week -4": [
        _trainer("WM4T01", "Week -4", "Trainers should send changes in the self-learning assignment to Training Team",
                 "0:30:00"),
    ],
    "Week -3": [
        _organizer("WM3T01", "Week -3", "Prepare welcome resources for participants", "0:15:00"),
    ],
    "Week -2": [
        _organizer("WM2T01", "Week -2", "Share training resources with participants", "0:15:00"),
    ],
    "Week -1": [
        _organizer("WM1T01", "Week -1", "Request Marketing team to remove schedule from CM site", "0:15:00"),
    ],
    "Week 0": [
        _organizer("W00T01", "Week 0", "Include links of the exam, participant resources and edition folder to trainers",
                   "0:30:00"),
        _organizer("W00T02", "Week 0", "Announce start of the self-learning stage with Q&A sessions", "0:15:00"),
    ],
    "Week 1": [
        _trainer("W01T01", "Week 1", "First week of training - Welcome session", "1:00:00",
                 inflexible=True, notes="Must include introduction to course materials"),
        _trainer("W01T02", "Week 1", "Set up training environment for participants", "2:00:00", inflexible=True),
    ],
    "Week 2": [
        _trainer("W02T01", "Week 2", "Weekly progress review meeting", "1:00:00"),
        _organizer("W02T02", "Week 2", "Post reminder about assignments due", "0:15:00"),
    ],
    "Week 3": [
        _organizer("W03T01", "Week 3", "Mid-training survey distribution", "0:30:00"),
        _trainer("W03T02", "Week 3", "Weekly progress review meeting", "1:00:00"),
    ],
    "Week 4": [
        _trainer("W04T01", "Week 4", "Weekly progress review meeting", "1:00:00"),
        _trainer("W04T02", "Week 4", "Prepare for final project presentations", "1:30:00"),
    ],
    "Week 5": [
        _trainer("W05T01", "Week 5", "Final project presentations", "2:00:00", inflexible=True),
        _organizer("W05T02", "Week 5", "Final assessment distribution", "0:30:00", inflexible=True),
    ],
    "Week 6": [
        _organizer("W06T01", "Week 6", "Collect and analyze final assessment results", "1:00:00"),
        _organizer("W06T02", "Week 6", "Prepare certificates of completion", "0:45:00"),
    ],
    "Week 7": [
        _organizer("W07T01", "Week 7", "Send certificates to participants", "0:30:00"),
        _trainer("W07T02", "Week 7", "Follow-up with participants who didn't complete training", "1:00:00"),
    ],
    "Week 8": [
        _trainer("W08T01", "Week 8", "Training program retrospective meeting", "1:30:00"),
        _organizer("W08T02", "Week 8", "Prepare training report", "2:00:00"),
        _organizer("W08T03", "Week 8", "Archive training materials", "1:00:00"),
    ],
}

# Weeks whose "...T01" task becomes the route's weekly session
ROUTE_SESSION_WEEKS = (2, 3, 4)


def _route_override(training_type: str, welcome_name: str, welcome_notes: str,
                    session_name: str, session_duration: str) -> Callable[[TaskTemplate], TaskTemplate]:
    def override(task: TaskTemplate) -> TaskTemplate:
        if task.week_number == 1 and task.task_code == "W01T01":
            return replace(task, training_type=training_type, name=welcome_name, notes=welcome_notes)
        if task.week_number in ROUTE_SESSION_WEEKS and task.task_code.endswith("T01"):
            return replace(
                task,
                training_type=training_type,
                name=session_name.format(week=task.week),
                duration=session_duration,
            )
        return replace(task, training_type=training_type)
    return override


TEMPLATE_OVERRIDES: Dict[str, Callable[[TaskTemplate], TaskTemplate]] = {
    "default": lambda task: replace(task, training_type="ALL"),
    "glr": _route_override(
        "GLR",
        welcome_name="First week of guided training - Welcome session with instructor",
        welcome_notes="Introduce course structure and live instructor sessions",
        session_name="Guided training session for {week}",
        session_duration="2:00:00",
    ),
    "slr": _route_override(
        "SLR",
        welcome_name="Provide access to self-paced modules",
        welcome_notes="Verify all students have received access credentials",
        session_name="Self-learning progress check for {week}",
        session_duration="0:30:00",
    ),
}


@dataclass(frozen=True)
class TaskTemplateCatalog:
    """Read-only catalog: template kind -> ordered template tasks"""
    weeks: Mapping[str, List[TaskTemplate]] = field(default_factory=lambda: BASE_WEEK_TASKS)
    overrides: Mapping[str, Callable[[TaskTemplate], TaskTemplate]] = field(
        default_factory=lambda: TEMPLATE_OVERRIDES
    )

    @property
    def kinds(self) -> List[str]:
        return list(self.overrides)

    def get_template(self, kind: str = "default") -> List[TaskTemplate]:
        """Template tasks for a kind, weeks in natural order (-5 -> 8). Unknown kinds fall back to default."""
        override = self.overrides.get(kind) or self.overrides["default"]
        ordered_weeks = sorted(self.weeks, key=week_number)
        return [override(task) for week in ordered_weeks for task in self.weeks[week]]

    def get_week(self, kind: str, week) -> List[TaskTemplate]:
        number = week_number(week)
        return [t for t in self.get_template(kind) if t.week_number == number]


DEFAULT_CATALOG = TaskTemplateCatalog()


def template_kind_for_training_type(training_type: str) -> str:
    """glr for GLR editions, slr for SLR editions"""
    value = getattr(training_type, "value", training_type)
    return {"GLR": "glr", "SLR": "slr"}.get(value, "default")
