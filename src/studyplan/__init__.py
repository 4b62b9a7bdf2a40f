"""Monthly study-schedule distribution."""

from studyplan.engine import Draft, generate_draft, plan_capacity, regenerate_draft, toggle_draft_cell
from studyplan.errors import (
    InvalidDateError,
    InvalidMonthKeyError,
    ScheduleError,
    ScheduleValueError,
    UnknownSubjectError,
)
from studyplan.reporting.summary import day_agenda, summarize
from studyplan.repository import ScheduleRepository, Subject, SubjectSchedule, commit_draft, duplicate_month, toggle_day

__all__ = [
    "Draft",
    "InvalidDateError",
    "InvalidMonthKeyError",
    "ScheduleError",
    "ScheduleRepository",
    "ScheduleValueError",
    "Subject",
    "SubjectSchedule",
    "UnknownSubjectError",
    "commit_draft",
    "day_agenda",
    "duplicate_month",
    "generate_draft",
    "plan_capacity",
    "regenerate_draft",
    "summarize",
    "toggle_day",
    "toggle_draft_cell",
]
