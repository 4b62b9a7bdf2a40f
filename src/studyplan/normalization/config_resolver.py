"""Resolve the effective distribution configuration from layered inputs."""

from __future__ import annotations

from typing import Any

from studyplan.engine.slot_builder import MIN_DAILY_HOURS_BUDGET
from studyplan.validation import ValidationReport

DEFAULT_DISTRIBUTION_CONFIG: dict[str, Any] = {
    "daily_hours_budget": 4,
    "active_weekdays": [1, 2, 3, 4, 5],
    "max_placement_passes": 50,
}


def resolve_distribution_config(source: Any, validation_report: ValidationReport) -> dict[str, Any]:
    """Build an engine-ready distribution config.

    Precedence: caller values > DEFAULT_DISTRIBUTION_CONFIG. Out-of-range values
    are clamped (budget) or dropped (weekdays) and reported, never raised.
    """
    config = dict(DEFAULT_DISTRIBUTION_CONFIG)
    if isinstance(source, dict):
        config.update(
            {key: value for key, value in source.items() if key in DEFAULT_DISTRIBUTION_CONFIG and value is not None}
        )

    config["daily_hours_budget"] = _resolve_budget(config.get("daily_hours_budget"), validation_report)
    config["active_weekdays"] = _resolve_weekdays(config.get("active_weekdays"), validation_report)

    passes = config.get("max_placement_passes")
    if not isinstance(passes, int) or isinstance(passes, bool) or passes < 1:
        config["max_placement_passes"] = DEFAULT_DISTRIBUTION_CONFIG["max_placement_passes"]

    return config


def _resolve_budget(raw: Any, validation_report: ValidationReport) -> int:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        validation_report.add_error(
            code="INVALID_TYPE",
            message=f"daily_hours_budget must be a number, got {type(raw).__name__}",
            field_path="$.daily_hours_budget",
        )
        return int(DEFAULT_DISTRIBUTION_CONFIG["daily_hours_budget"])

    budget = int(raw)
    if budget < MIN_DAILY_HOURS_BUDGET:
        validation_report.add_info(
            code="INFO_CLAMP_DAILY_HOURS_APPLIED",
            message=f"daily_hours_budget was clamped to a minimum of {MIN_DAILY_HOURS_BUDGET}",
            field_path="$.daily_hours_budget",
            extra={"applied_value": MIN_DAILY_HOURS_BUDGET},
        )
        return MIN_DAILY_HOURS_BUDGET
    return budget


def _resolve_weekdays(raw: Any, validation_report: ValidationReport) -> list[int]:
    if not isinstance(raw, (list, tuple, set)):
        validation_report.add_error(
            code="INVALID_TYPE",
            message="active_weekdays must be a list of integers 0..6",
            field_path="$.active_weekdays",
        )
        return []

    weekdays: set[int] = set()
    for idx, value in enumerate(raw):
        if isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 6:
            weekdays.add(value)
            continue
        validation_report.add_error(
            code="INVALID_WEEKDAY",
            message=f"Weekday {value!r} is not in 0..6 (Sunday=0)",
            field_path=f"$.active_weekdays[{idx}]",
        )
    return sorted(weekdays)
