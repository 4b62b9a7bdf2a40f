"""Persisted schedule state."""

from .models import Subject, SubjectSchedule
from .schedule_repository import ScheduleRepository, commit_draft, duplicate_month, toggle_day

__all__ = [
    "ScheduleRepository",
    "Subject",
    "SubjectSchedule",
    "commit_draft",
    "duplicate_month",
    "toggle_day",
]
