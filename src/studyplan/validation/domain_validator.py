"""Domain-level rules for distribution requests and schedule snapshots."""

from __future__ import annotations

from datetime import date
from typing import Any

from studyplan.engine.dates import is_month_key, month_key_of, parse_date
from studyplan.errors import InvalidDateError

from .errors import ValidationReport

_IMPORTANCE_TIERS = {"low", "medium", "high"}


def validate_domain_inputs(loaded_payload: dict[str, Any]) -> ValidationReport:
    """Validate request/snapshot coherence and rules a schema cannot express."""
    report = ValidationReport()

    request = loaded_payload.get("request", {})
    if isinstance(request, dict) and "month_key" in request:
        _validate_month_key(request.get("month_key"), "$.request.month_key", report)

    snapshot = loaded_payload.get("snapshot", {})
    subjects = snapshot.get("subjects", []) if isinstance(snapshot, dict) else []
    if not isinstance(subjects, list):
        return report

    subject_ids: set[str] = set()
    for idx, subject in enumerate(subjects):
        if not isinstance(subject, dict):
            continue
        path = f"$.snapshot.subjects[{idx}]"
        subject_id = subject.get("id")
        if not isinstance(subject_id, str) or not subject_id.strip():
            report.add_error(
                code="MISSING_SUBJECT_ID",
                message="Subject id must be a non-empty string",
                field_path=f"{path}.id",
            )
        elif subject_id in subject_ids:
            report.add_error(
                code="DUPLICATE_SUBJECT_ID",
                message=f"Duplicate subject id: {subject_id}",
                field_path=f"{path}.id",
            )
        else:
            subject_ids.add(subject_id)

        importance = subject.get("importance")
        if importance is not None and importance not in _IMPORTANCE_TIERS:
            report.add_error(
                code="INVALID_IMPORTANCE",
                message=f"Importance {importance!r} must be one of low, medium, high",
                field_path=f"{path}.importance",
                suggested_fix="Remove the field to fall back to medium.",
            )

        schedules = subject.get("schedules", {})
        if isinstance(schedules, dict):
            for month_key, schedule in schedules.items():
                _validate_schedule(month_key, schedule, f"{path}.schedules.{month_key}", report)

    requested_ids = request.get("subject_ids") if isinstance(request, dict) else None
    if isinstance(requested_ids, list) and isinstance(snapshot, dict) and "subjects" in snapshot:
        for idx, subject_id in enumerate(requested_ids):
            if subject_id not in subject_ids:
                report.add_error(
                    code="UNKNOWN_SUBJECT",
                    message=f"Requested subject is not in the snapshot: {subject_id!r}",
                    field_path=f"$.request.subject_ids[{idx}]",
                )

    return report


def _validate_month_key(month_key: Any, path: str, report: ValidationReport) -> bool:
    if is_month_key(month_key):
        return True
    report.add_error(
        code="INVALID_MONTH_KEY",
        message=f"Month key must look like YYYY-MM: {month_key!r}",
        field_path=path,
    )
    return False


def _validate_schedule(month_key: Any, schedule: Any, path: str, report: ValidationReport) -> None:
    valid_month = _validate_month_key(month_key, path, report)
    if not isinstance(schedule, dict):
        return

    goal = schedule.get("monthlyGoalHours", 0)
    if isinstance(goal, (int, float)) and not isinstance(goal, bool) and goal < 0:
        report.add_error(
            code="NEGATIVE_GOAL_HOURS",
            message="monthlyGoalHours must be >= 0",
            field_path=f"{path}.monthlyGoalHours",
        )

    planned_days = schedule.get("plannedDays", [])
    if not isinstance(planned_days, list):
        return
    for idx, raw in enumerate(planned_days):
        parsed = _parse_date(raw)
        if parsed is None:
            report.add_error(
                code="INVALID_DATE_FORMAT",
                message=f"Planned day must look like YYYY-MM-DD: {raw!r}",
                field_path=f"{path}.plannedDays[{idx}]",
            )
        elif valid_month and month_key_of(parsed) != month_key:
            report.add_error(
                code="DATE_OUTSIDE_MONTH",
                message=f"Planned day {raw} is filed under {month_key}",
                field_path=f"{path}.plannedDays[{idx}]",
                suggested_fix="Move the date under its own month or remove it.",
            )


def _parse_date(raw: Any) -> date | None:
    if not isinstance(raw, str):
        return None
    try:
        return parse_date(raw)
    except InvalidDateError:
        return None
