"""Subject and per-month schedule records as stored in the snapshot document."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from studyplan.engine.importance import DEFAULT_IMPORTANCE, normalize_importance

_SUBJECT_KEYS = {"id", "title", "importance", "schedules"}


@dataclass(slots=True)
class SubjectSchedule:
    """Plan for one subject in one month; the zero value stands for "no entry"."""

    monthly_goal_hours: int = 0
    planned_days: list[str] = field(default_factory=list)
    is_completed: bool = False
    notes: str = ""

    def as_document(self) -> dict[str, Any]:
        return {
            "monthlyGoalHours": self.monthly_goal_hours,
            "plannedDays": list(self.planned_days),
            "isCompleted": self.is_completed,
            "notes": self.notes,
        }

    @classmethod
    def from_document(cls, payload: dict[str, Any]) -> SubjectSchedule:
        # Older documents use "monthlyGoal".
        goal = payload.get("monthlyGoalHours", payload.get("monthlyGoal", 0))
        planned = payload.get("plannedDays") or []
        return cls(
            monthly_goal_hours=max(0, int(goal or 0)),
            planned_days=sorted({str(day) for day in planned}),
            is_completed=bool(payload.get("isCompleted", False)),
            notes=str(payload.get("notes") or ""),
        )


@dataclass(slots=True)
class Subject:
    id: str
    title: str = ""
    importance: str = DEFAULT_IMPORTANCE
    schedules: dict[str, SubjectSchedule] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    def schedule_for(self, month_key: str) -> SubjectSchedule:
        """Stored schedule, or a detached zero value when the month has none."""
        schedule = self.schedules.get(month_key)
        return schedule if schedule is not None else SubjectSchedule()

    def as_candidate(self) -> dict[str, Any]:
        return {"id": self.id, "title": self.title, "importance": self.importance}

    def as_document(self) -> dict[str, Any]:
        return {
            **self.extra,
            "id": self.id,
            "title": self.title,
            "importance": self.importance,
            "schedules": {
                month_key: schedule.as_document()
                for month_key, schedule in sorted(self.schedules.items())
            },
        }

    @classmethod
    def from_document(cls, payload: dict[str, Any]) -> Subject:
        schedules = payload.get("schedules") or {}
        return cls(
            id=str(payload["id"]),
            title=str(payload.get("title") or ""),
            importance=normalize_importance(payload.get("importance")),
            schedules={
                str(month_key): SubjectSchedule.from_document(schedule)
                for month_key, schedule in schedules.items()
                if isinstance(schedule, dict)
            },
            extra={key: value for key, value in payload.items() if key not in _SUBJECT_KEYS},
        )
