"""Read-only month views over a schedule repository."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from studyplan.engine.dates import enumerate_days, format_date, month_key_of, parse_date, weekday_of

if TYPE_CHECKING:
    from studyplan.repository import ScheduleRepository


def _estimated_hours(monthly_goal_hours: int, planned_days_count: int) -> float:
    if planned_days_count <= 0:
        return 0.0
    return round(monthly_goal_hours / planned_days_count, 2)


def _day_row(repository: ScheduleRepository, day_iso: str, month_key: str) -> dict[str, Any]:
    subjects: list[dict[str, Any]] = []
    for subject in repository.subjects:
        schedule = subject.schedules.get(month_key)
        if schedule is None or day_iso not in schedule.planned_days:
            continue
        subjects.append(
            {
                "subject_id": subject.id,
                "title": subject.title,
                "estimated_hours": _estimated_hours(schedule.monthly_goal_hours, len(schedule.planned_days)),
            }
        )
    return {
        "date": day_iso,
        "weekday": weekday_of(day_iso),
        "subjects": subjects,
        "subject_count": len(subjects),
        "total_estimated_hours": round(sum(item["estimated_hours"] for item in subjects), 2),
    }


def summarize(repository: ScheduleRepository, month_key: str) -> dict[str, Any]:
    """Per-day and per-subject view of one month.

    Every calendar day gets a row, studied or not. Subjects without a
    schedule for the month are left out of ``per_subject``.
    """
    per_day = [_day_row(repository, format_date(day), month_key) for day in enumerate_days(month_key)]

    per_subject: list[dict[str, Any]] = []
    for subject in repository.subjects:
        schedule = subject.schedules.get(month_key)
        if schedule is None:
            continue
        count = len(schedule.planned_days)
        per_subject.append(
            {
                "subject_id": subject.id,
                "title": subject.title,
                "planned_days_count": count,
                "estimated_hours_total": round(_estimated_hours(schedule.monthly_goal_hours, count) * count, 2),
                "monthly_goal_hours": schedule.monthly_goal_hours,
                "is_completed": schedule.is_completed,
            }
        )

    return {"month_key": month_key, "per_day": per_day, "per_subject": per_subject}


def day_agenda(repository: ScheduleRepository, day: str) -> dict[str, Any]:
    """Subjects planned on a single date, with their estimated hours."""
    day_iso = parse_date(day).isoformat()
    return _day_row(repository, day_iso, month_key_of(day_iso))
