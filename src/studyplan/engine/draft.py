"""Draft distributions produced by the allocator and edited before commit."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from studyplan.errors import UnknownSubjectError

from .dates import ensure_in_month


@dataclass(slots=True)
class Draft:
    """Uncommitted day -> subjects assignment for one month.

    ``per_day`` lists are kept in ``subject_order`` so that toggling a cell off
    and on again restores the same draft.
    """

    month_key: str
    per_day: dict[str, list[str]]
    goal_hours: dict[str, int]
    planned_days: dict[str, list[str]]
    subject_order: list[str] = field(default_factory=list)
    available_days: list[str] = field(default_factory=list)
    daily_hours_budget: int = 1
    forced_overflow: bool = False
    overflow_subjects: list[str] = field(default_factory=list)

    def day_load(self, day: str) -> int:
        return len(self.per_day.get(day, []))

    def as_dict(self) -> dict[str, Any]:
        return {
            "month_key": self.month_key,
            "per_day": {day: list(subjects) for day, subjects in sorted(self.per_day.items())},
            "goal_hours": dict(self.goal_hours),
            "planned_days": {sid: list(days) for sid, days in self.planned_days.items()},
            "subject_order": list(self.subject_order),
            "available_days": list(self.available_days),
            "daily_hours_budget": self.daily_hours_budget,
            "forced_overflow": self.forced_overflow,
            "overflow_subjects": list(self.overflow_subjects),
        }


def invert_assignment(per_day: dict[str, list[str]], subject_order: list[str]) -> dict[str, list[str]]:
    """Turn a day-keyed assignment into sorted, de-duplicated planned days per subject."""
    planned: dict[str, set[str]] = {sid: set() for sid in subject_order}
    for day, subjects in per_day.items():
        for sid in subjects:
            planned.setdefault(sid, set()).add(day)
    return {sid: sorted(days) for sid, days in planned.items()}


def order_day(subjects: list[str], subject_order: list[str]) -> list[str]:
    rank = {sid: idx for idx, sid in enumerate(subject_order)}
    return sorted(subjects, key=lambda sid: rank.get(sid, len(rank)))


def toggle_draft_cell(draft: Draft, day: str, subject_id: str) -> Draft:
    """Flip a (date, subject) cell and return a new draft.

    Removing drops every occurrence of the subject on that day (forced
    duplicates included). Goal hours are never recomputed from manual edits.
    """
    day_iso = ensure_in_month(day, draft.month_key)
    if subject_id not in draft.subject_order:
        raise UnknownSubjectError(f"Subject {subject_id!r} is not part of this draft")

    per_day = {key: list(subjects) for key, subjects in draft.per_day.items()}
    current = per_day.get(day_iso, [])
    if subject_id in current:
        per_day[day_iso] = [sid for sid in current if sid != subject_id]
    else:
        per_day[day_iso] = order_day([*current, subject_id], draft.subject_order)

    planned_days = {sid: list(days) for sid, days in draft.planned_days.items()}
    planned_days[subject_id] = sorted(key for key, subjects in per_day.items() if subject_id in subjects)

    if not per_day[day_iso] and day_iso not in draft.available_days:
        del per_day[day_iso]

    return replace(draft, per_day=per_day, planned_days=planned_days)
