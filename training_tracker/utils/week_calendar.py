"""
Week/date arithmetic relative to an edition's start date.

The training timeline runs from Week -5 (preparation) to Week 8. Week 1
starts on the edition's start date. Everything here is pure; missing or
unparsable dates give None instead of raising, because the values come
from optional form fields.
"""

import enum
import math
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Union

FIRST_WEEK = -5
LAST_WEEK = 8
EDITION_DURATION_WEEKS = 8

DateLike = Union[date, datetime, str, None]

_WEEK_NUMBER_RE = re.compile(r"-?(\d+)")
_TASK_CODE_RE = re.compile(r"^W(M?)(\d+)T(\d+)$")


class EditionPhase(str, enum.Enum):
    """Where an edition sits relative to today"""
    UPCOMING = "Upcoming"
    ACTIVE = "Active"
    FINISHED = "Finished"


class WeekStatus(str, enum.Enum):
    """Timeline position of a week relative to the current week"""
    PAST = "PAST WEEKS"
    CURRENT = "CURRENT WEEK"
    FUTURE = "FUTURE WEEKS"


class WeekCompletion(str, enum.Enum):
    """Aggregate completion of a week's tasks"""
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    COMPLETE = "Complete"


@dataclass(frozen=True, order=True)
class TrainingWeek:
    """Signed week number with its display label"""
    number: int

    @classmethod
    def from_label(cls, label) -> "TrainingWeek":
        return cls(week_number(label))

    @property
    def label(self) -> str:
        return f"Week {self.number}"

    @property
    def is_preparation(self) -> bool:
        return self.number <= 0

    def __str__(self):
        return self.label


def parse_date(value: DateLike) -> Optional[date]:
    """Coerce a date, datetime or ISO string to a date; None if impossible"""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError:
            return None
    return None


def week_number(week_label) -> int:
    """Signed week number from "-5", "Week -5", "5" or an int; 0 when unparsable"""
    if week_label is None:
        return 0
    if isinstance(week_label, int):
        return week_label
    match = _WEEK_NUMBER_RE.search(str(week_label))
    if not match:
        return 0
    return int(match.group(0))


def normalize_week_label(week_label) -> str:
    """Canonical "Week N" label for any accepted week form"""
    return TrainingWeek.from_label(week_label).label


def all_weeks() -> List[int]:
    """Weeks shown on the timeline: -5..-1 then 1..8"""
    return [n for n in range(FIRST_WEEK, LAST_WEEK + 1) if n != 0]


def current_week_from_date(today: DateLike, start_date: DateLike) -> Optional[int]:
    """
    Current training week for `today`, clamped to [-5, 8].

    Before the start date the count goes down towards -5
    (ceil(elapsed_days / 7)); from the start date on it counts up from 1.
    Returns None if either date is missing.
    """
    today = parse_date(today)
    start_date = parse_date(start_date)
    if today is None or start_date is None:
        return None

    elapsed_days = (today - start_date).days
    if elapsed_days < 0:
        return max(FIRST_WEEK, math.ceil(elapsed_days / 7))

    elapsed_weeks = elapsed_days // 7
    return min(LAST_WEEK, elapsed_weeks + 1)


def week_start_date(week, training_start_date: DateLike) -> Optional[date]:
    """First day of a week; Week 1 starts on the training start date"""
    training_start_date = parse_date(training_start_date)
    if training_start_date is None:
        return None

    number = week_number(week)
    if number <= 0:
        return training_start_date + timedelta(weeks=number)
    return training_start_date + timedelta(weeks=number - 1)


def due_date_for_week(week, training_start_date: DateLike) -> Optional[date]:
    """Tasks are due one week before the week they belong to starts"""
    start = week_start_date(week, training_start_date)
    if start is None:
        return None
    return start - timedelta(weeks=1)


def classify_phase(start_date: DateLike, today: DateLike) -> Optional[EditionPhase]:
    """Upcoming before the start date, Finished after the 8-week run, Active otherwise"""
    start_date = parse_date(start_date)
    today = parse_date(today)
    if start_date is None or today is None:
        return None

    if today < start_date:
        return EditionPhase.UPCOMING
    if today > start_date + timedelta(weeks=EDITION_DURATION_WEEKS):
        return EditionPhase.FINISHED
    return EditionPhase.ACTIVE


def shift_date(value: DateLike, delta: timedelta) -> Optional[date]:
    """Move a date by a (possibly negative) delta"""
    value = parse_date(value)
    if value is None:
        return None
    return value + delta


def week_status(week_label, current_week: int) -> WeekStatus:
    number = week_number(week_label)
    if number < current_week:
        return WeekStatus.PAST
    if number == current_week:
        return WeekStatus.CURRENT
    return WeekStatus.FUTURE


def week_completion_status(statuses: Iterable[str]) -> WeekCompletion:
    """Roll up the statuses of one week's tasks"""
    statuses = list(statuses)
    if not statuses:
        return WeekCompletion.NOT_STARTED

    done = [s for s in statuses if s == "Done"]
    started = [s for s in statuses if s not in ("Done", "Not Started")]
    if len(done) == len(statuses):
        return WeekCompletion.COMPLETE
    if done or started:
        return WeekCompletion.IN_PROGRESS
    return WeekCompletion.NOT_STARTED


# ========== Codes ==========

def edition_code(year: int, month: int, variant: str) -> str:
    """2-digit year + 2-digit month + variant, e.g. 2405-A"""
    if variant not in ("A", "B"):
        raise ValueError(f"Unknown edition variant: {variant}")
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month}")
    return f"{year % 100:02d}{month:02d}-{variant}"


def variant_for_training_type(training_type: str) -> str:
    """GLR editions use variant A, SLR editions variant B"""
    return {"GLR": "A", "SLR": "B"}[getattr(training_type, "value", training_type)]


def task_code_prefix(week) -> str:
    """WM5T for Week -5, W00T for Week 0, W05T for Week 5"""
    number = week_number(week)
    if number < 0:
        return f"WM{abs(number)}T"
    return f"W{number:02d}T"


def next_task_code(week, existing_codes: Iterable[str]) -> str:
    """Next free W{n}T{seq} / WM{n}T{seq} code for a week; zero-padded codes like W01T02 count too"""
    number = week_number(week)
    sequences = []
    for code in existing_codes:
        match = _TASK_CODE_RE.match(code or "")
        if not match:
            continue
        code_week = -int(match.group(2)) if match.group(1) else int(match.group(2))
        if code_week == number:
            sequences.append(int(match.group(3)))
    return f"{task_code_prefix(week)}{max(sequences, default=0) + 1:02d}"
