"""Build the available study days and total capacity of a month.

Capacity is computed from:
- the month's calendar days,
- the active-weekday set (Sunday=0),
- the per-day hour budget (clamped to at least 1).
"""

from __future__ import annotations

from typing import Any, Iterable

from .dates import enumerate_days, format_date, parse_month_key, weekday_of

MIN_DAILY_HOURS_BUDGET = 1


def clamp_daily_hours_budget(value: Any) -> int:
    try:
        budget = int(value)
    except (TypeError, ValueError):
        return MIN_DAILY_HOURS_BUDGET
    return max(MIN_DAILY_HOURS_BUDGET, budget)


def build_month_capacity(
    *,
    month_key: str,
    active_weekdays: Iterable[int],
    daily_hours_budget: Any,
) -> dict[str, Any]:
    """Return available days and total capacity for one month.

    Deterministic behaviour:
    - days are iterated in ascending date order,
    - an empty weekday set yields no days and zero capacity.
    """

    parse_month_key(month_key)
    weekdays = {int(day) for day in active_weekdays}
    budget = clamp_daily_hours_budget(daily_hours_budget)

    available_days = [
        format_date(day)
        for day in enumerate_days(month_key)
        if weekday_of(day) in weekdays
    ]

    return {
        "month_key": month_key,
        "available_days": available_days,
        "daily_hours_budget": budget,
        "total_capacity": len(available_days) * budget,
    }
