"""Warning and suggestion generation for draft output."""

from __future__ import annotations

from typing import Any

from studyplan.engine.draft import Draft


def build_draft_warnings(
    *,
    draft: Draft,
    capacity: dict[str, Any],
) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    """Informational warnings for a draft and the suggestions that go with them.

    None of these conditions is fatal: the draft is always returned as-is.
    """
    warnings: list[dict[str, Any]] = []
    suggestions: list[dict[str, Any]] = []

    available_days = list(capacity.get("available_days", []))
    total_capacity = int(capacity.get("total_capacity", 0) or 0)
    budget = int(capacity.get("daily_hours_budget", draft.daily_hours_budget) or 1)

    # (1) Nothing to distribute.
    if not available_days or not draft.subject_order or not any(draft.goal_hours.values()):
        warnings.append(
            {
                "code": "INFO_EMPTY_CONFIGURATION",
                "severity": "info",
                "available_days": len(available_days),
                "subjects": len(draft.subject_order),
                "message": "No study days or no weighted subjects: the draft is empty.",
            }
        )
        return warnings, suggestions

    # (2) Slots that only fit by relaxing the budget.
    for sid in draft.overflow_subjects:
        warnings.append(
            {
                "code": "WARN_FORCED_OVERFLOW",
                "severity": "warning",
                "subject_id": sid,
                "message": "Some slots of this subject were placed past the daily budget.",
            }
        )
        suggestions.append(
            {
                "code": "SUGGEST_ADD_STUDY_DAYS",
                "message": "Enable more weekdays so every slot fits within the daily budget.",
            }
        )

    # (3) Days loaded past the budget.
    for day in sorted(draft.per_day):
        load = draft.day_load(day)
        if load > budget:
            warnings.append(
                {
                    "code": "WARN_DAY_OVER_BUDGET",
                    "severity": "warning",
                    "date": day,
                    "load": load,
                    "daily_hours_budget": budget,
                    "message": "Day holds more one-hour slots than the daily budget.",
                }
            )
            suggestions.append(
                {
                    "code": "SUGGEST_INCREASE_DAILY_HOURS",
                    "message": "Raise the daily hours budget or lower some subject importances.",
                }
            )

    # (4) Rounded goals that no longer add up to the capacity.
    goal_total = sum(draft.goal_hours.values())
    if goal_total != total_capacity:
        warnings.append(
            {
                "code": "WARN_GOAL_ROUNDING_DRIFT",
                "severity": "info",
                "goal_total": goal_total,
                "total_capacity": total_capacity,
                "drift": goal_total - total_capacity,
                "message": "Rounded goal hours differ from the month capacity.",
            }
        )

    unique_suggestions: list[dict[str, Any]] = []
    seen: set[tuple[str, str]] = set()
    for item in suggestions:
        key = (str(item.get("code", "")), str(item.get("subject_id", "*")))
        if key in seen:
            continue
        seen.add(key)
        unique_suggestions.append(item)

    return warnings, unique_suggestions
