"""In-process schedule snapshot and its mutations.

Every mutation validates its inputs before writing, so a rejected call leaves
the snapshot untouched. Listeners are notified after each successful change.
"""

from __future__ import annotations

from copy import deepcopy
from datetime import datetime, timezone
from typing import Any, Callable

from loguru import logger

from studyplan.engine.dates import ensure_in_month, parse_month_key, remap_to_month
from studyplan.engine.draft import Draft
from studyplan.engine.importance import normalize_importance
from studyplan.errors import InvalidDateError, InvalidMonthKeyError, ScheduleValueError

from .models import Subject, SubjectSchedule

ChangeListener = Callable[[str], None]


class ScheduleRepository:
    """Subjects with their per-month schedules, plus the active-months list."""

    def __init__(
        self,
        subjects: list[Subject] | None = None,
        active_months: list[str] | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self._subjects: dict[str, Subject] = {}
        for subject in subjects or []:
            self._subjects[subject.id] = subject
        self._active_months: list[str] = sorted(set(active_months or []))
        self._listeners: list[ChangeListener] = []
        self.extra: dict[str, Any] = dict(extra or {})

    # Reads

    @property
    def subjects(self) -> list[Subject]:
        return list(self._subjects.values())

    @property
    def active_months(self) -> list[str]:
        return list(self._active_months)

    def get_subject(self, subject_id: str) -> Subject | None:
        return self._subjects.get(subject_id)

    def has_schedule(self, subject_id: str, month_key: str) -> bool:
        subject = self._subjects.get(subject_id)
        return subject is not None and month_key in subject.schedules

    def schedule_for(self, subject_id: str, month_key: str) -> SubjectSchedule:
        subject = self._subjects.get(subject_id)
        return subject.schedule_for(month_key) if subject is not None else SubjectSchedule()

    def candidate_subjects(self, month_key: str) -> list[dict[str, Any]]:
        """Subjects enrolled in ``month_key``, or every subject when none is enrolled."""
        enrolled = [subject for subject in self._subjects.values() if month_key in subject.schedules]
        return [subject.as_candidate() for subject in (enrolled or self._subjects.values())]

    # Listeners

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self, action: str) -> None:
        for listener in list(self._listeners):
            listener(action)

    # Subject lifecycle (thin, owned by the CRUD layer elsewhere)

    def add_subject(self, subject_id: str, title: str = "", importance: str | None = None) -> Subject:
        if not subject_id:
            raise ScheduleValueError("Subject id must be a non-empty string")
        if subject_id in self._subjects:
            raise ScheduleValueError(f"Subject {subject_id!r} already exists")
        subject = Subject(id=subject_id, title=title, importance=normalize_importance(importance))
        self._subjects[subject_id] = subject
        logger.debug(f"Added subject {subject_id}")
        self._notify("add_subject")
        return subject

    def delete_subject(self, subject_id: str) -> bool:
        """Remove a subject and, with it, all of its schedules."""
        if self._subjects.pop(subject_id, None) is None:
            return False
        logger.debug(f"Deleted subject {subject_id} with its schedules")
        self._notify("delete_subject")
        return True

    # Month enrolment

    def enroll_subject(self, subject_id: str, month_key: str) -> bool:
        parse_month_key(month_key)
        subject = self._subjects.get(subject_id)
        if subject is None or month_key in subject.schedules:
            return False
        subject.schedules[month_key] = SubjectSchedule()
        self._notify("enroll_subject")
        return True

    def clear_schedule(self, subject_id: str, month_key: str) -> bool:
        subject = self._subjects.get(subject_id)
        if subject is None or subject.schedules.pop(month_key, None) is None:
            return False
        logger.debug(f"Cleared schedule {subject_id}@{month_key}")
        self._notify("clear_schedule")
        return True

    def toggle_subject_in_month(self, subject_id: str, month_key: str) -> bool:
        """Enrol the subject when absent, clear its schedule when present.

        Returns True when the subject is enrolled after the call.
        """
        if self.has_schedule(subject_id, month_key):
            self.clear_schedule(subject_id, month_key)
            return False
        return self.enroll_subject(subject_id, month_key)

    def add_active_month(self, month_key: str) -> bool:
        parse_month_key(month_key)
        if month_key in self._active_months:
            return False
        self._active_months = sorted([*self._active_months, month_key])
        self._notify("add_active_month")
        return True

    def remove_active_month(self, month_key: str) -> bool:
        """Hide a month from the active list; its schedule data is kept."""
        if month_key not in self._active_months:
            return False
        self._active_months = [key for key in self._active_months if key != month_key]
        self._notify("remove_active_month")
        return True

    # Schedule mutations

    def commit(self, month_key: str, draft: Draft) -> list[str]:
        """Write a draft's goal hours and planned days for every known draft subject.

        ``is_completed`` and ``notes`` of existing schedules are preserved.
        Returns the committed subject ids.
        """
        parse_month_key(month_key)
        if draft.month_key != month_key:
            raise InvalidDateError(f"Draft for {draft.month_key} cannot be committed under {month_key}")

        staged: dict[str, SubjectSchedule] = {}
        for sid in draft.subject_order:
            subject = self._subjects.get(sid)
            if subject is None:
                logger.warning(f"Skipping commit for unknown subject {sid} in {month_key}")
                continue
            planned = sorted({ensure_in_month(day, month_key) for day in draft.planned_days.get(sid, [])})
            previous = subject.schedules.get(month_key)
            staged[sid] = SubjectSchedule(
                monthly_goal_hours=max(0, int(draft.goal_hours.get(sid, 0))),
                planned_days=planned,
                is_completed=previous.is_completed if previous is not None else False,
                notes=previous.notes if previous is not None else "",
            )

        for sid, schedule in staged.items():
            self._subjects[sid].schedules[month_key] = schedule

        logger.debug(f"Committed draft for {month_key}: {len(staged)} subject(s)")
        self._notify("commit")
        return list(staged)

    def toggle_day(self, subject_id: str, month_key: str, day: str) -> bool:
        """Flip ``day`` in an existing schedule; no-op when there is none.

        Returns True when the snapshot changed.
        """
        parse_month_key(month_key)
        day_iso = ensure_in_month(day, month_key)

        subject = self._subjects.get(subject_id)
        schedule = subject.schedules.get(month_key) if subject is not None else None
        if schedule is None:
            logger.debug(f"Ignoring toggle for {subject_id}@{month_key}: no schedule")
            return False

        days = set(schedule.planned_days)
        days.symmetric_difference_update({day_iso})
        schedule.planned_days = sorted(days)
        self._notify("toggle_day")
        return True

    def update_schedule(
        self,
        subject_id: str,
        month_key: str,
        *,
        monthly_goal_hours: int | None = None,
        notes: str | None = None,
        is_completed: bool | None = None,
    ) -> bool:
        """Edit goal hours, notes or completion of an existing schedule."""
        parse_month_key(month_key)
        if monthly_goal_hours is not None:
            if isinstance(monthly_goal_hours, bool) or not isinstance(monthly_goal_hours, int):
                raise ScheduleValueError(f"monthly_goal_hours must be an integer: {monthly_goal_hours!r}")
            if monthly_goal_hours < 0:
                raise ScheduleValueError(f"monthly_goal_hours must be >= 0: {monthly_goal_hours}")

        subject = self._subjects.get(subject_id)
        schedule = subject.schedules.get(month_key) if subject is not None else None
        if schedule is None:
            return False

        if monthly_goal_hours is not None:
            schedule.monthly_goal_hours = monthly_goal_hours
        if notes is not None:
            schedule.notes = str(notes)
        if is_completed is not None:
            schedule.is_completed = bool(is_completed)
        self._notify("update_schedule")
        return True

    def duplicate_month(self, source_month_key: str, target_month_key: str) -> list[str]:
        """Copy every schedule under ``source_month_key`` onto ``target_month_key``.

        Dates keep their day-of-month, clamped to the target month's last day;
        completion is reset. Returns the subject ids that were copied.
        """
        parse_month_key(source_month_key)
        parse_month_key(target_month_key)
        if source_month_key == target_month_key:
            raise InvalidMonthKeyError(f"Source and target month are the same: {source_month_key}")

        staged: dict[str, SubjectSchedule] = {}
        for subject in self._subjects.values():
            source = subject.schedules.get(source_month_key)
            if source is None:
                continue
            staged[subject.id] = SubjectSchedule(
                monthly_goal_hours=source.monthly_goal_hours,
                planned_days=sorted({remap_to_month(day, target_month_key) for day in source.planned_days}),
                is_completed=False,
                notes=source.notes,
            )

        for sid, schedule in staged.items():
            self._subjects[sid].schedules[target_month_key] = schedule

        logger.debug(f"Duplicated {len(staged)} schedule(s) from {source_month_key} to {target_month_key}")
        self._notify("duplicate_month")
        return list(staged)

    # Snapshot document

    def to_document(self) -> dict[str, Any]:
        return {
            **deepcopy(self.extra),
            "subjects": [subject.as_document() for subject in self._subjects.values()],
            "activeScheduleMonths": list(self._active_months),
            "lastUpdated": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        }

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> ScheduleRepository:
        subjects = [
            Subject.from_document(item)
            for item in document.get("subjects") or []
            if isinstance(item, dict) and item.get("id")
        ]
        extra = {
            key: deepcopy(value)
            for key, value in document.items()
            if key not in {"subjects", "activeScheduleMonths", "lastUpdated"}
        }
        return cls(subjects=subjects, active_months=list(document.get("activeScheduleMonths") or []), extra=extra)

    def replace_from_document(self, document: dict[str, Any]) -> None:
        """Swap in a loaded document while keeping the registered listeners."""
        loaded = ScheduleRepository.from_document(document)
        self._subjects = loaded._subjects
        self._active_months = loaded._active_months
        self.extra = loaded.extra


def commit_draft(repository: ScheduleRepository, month_key: str, draft: Draft) -> ScheduleRepository:
    repository.commit(month_key, draft)
    return repository


def toggle_day(repository: ScheduleRepository, subject_id: str, month_key: str, day: str) -> ScheduleRepository:
    repository.toggle_day(subject_id, month_key, day)
    return repository


def duplicate_month(
    repository: ScheduleRepository,
    source_month_key: str,
    target_month_key: str,
) -> ScheduleRepository:
    repository.duplicate_month(source_month_key, target_month_key)
    return repository
