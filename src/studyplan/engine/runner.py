"""Distribution engine runner."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable

from loguru import logger

from studyplan.errors import ScheduleValueError
from studyplan.metrics.collector import collect_draft_metrics
from studyplan.normalization import resolve_distribution_config
from studyplan.reporting.decision_trace import DecisionTraceCollector
from studyplan.reporting.warnings import build_draft_warnings
from studyplan.validation import ValidationReport

from .allocator import allocate_draft
from .dates import parse_month_key
from .draft import Draft
from .random_source import RandomSource, SeededRandomSource
from .slot_builder import build_month_capacity


def _candidate(subject: Any) -> dict[str, Any]:
    if hasattr(subject, "as_candidate"):
        return subject.as_candidate()
    return dict(subject)


def _resolve_strict(config: dict[str, Any], validation_report: ValidationReport) -> dict[str, Any]:
    """Resolve ``config``; rejected values raise instead of falling back to defaults."""
    resolved = resolve_distribution_config(config, validation_report)
    if validation_report.has_errors:
        raise ScheduleValueError([issue.message for issue in validation_report.errors])
    return resolved


def _month_key(config: dict[str, Any]) -> str:
    month_key = config.get("month_key")
    parse_month_key(month_key)
    return month_key


def plan_capacity(config: dict[str, Any], validation_report: ValidationReport | None = None) -> dict[str, Any]:
    """Resolve ``config`` and return the month's available days and total capacity.

    Raises ``ScheduleValueError`` when the config carries rejected values.
    """
    resolved = _resolve_strict(config, validation_report if validation_report is not None else ValidationReport())
    return build_month_capacity(
        month_key=_month_key(config),
        active_weekdays=resolved["active_weekdays"],
        daily_hours_budget=resolved["daily_hours_budget"],
    )


def generate_draft(
    config: dict[str, Any],
    subjects: Iterable[Any],
    random_source: RandomSource | None = None,
    *,
    decision_trace: DecisionTraceCollector | None = None,
) -> Draft:
    """Compute a fresh draft for ``config["month_key"]``.

    ``random_source`` drives the shuffle; None uses an unseeded source.
    """
    resolved = _resolve_strict(config, ValidationReport())
    capacity = build_month_capacity(
        month_key=_month_key(config),
        active_weekdays=resolved["active_weekdays"],
        daily_hours_budget=resolved["daily_hours_budget"],
    )
    return allocate_draft(
        month_key=capacity["month_key"],
        available_days=capacity["available_days"],
        total_capacity=capacity["total_capacity"],
        daily_hours_budget=capacity["daily_hours_budget"],
        subjects=[_candidate(subject) for subject in subjects],
        random_source=random_source if random_source is not None else SeededRandomSource(),
        max_placement_passes=int(resolved["max_placement_passes"]),
        decision_trace=decision_trace,
    )


def regenerate_draft(
    config: dict[str, Any],
    subjects: Iterable[Any],
    random_source: RandomSource | None = None,
) -> Draft:
    """Recompute from scratch; an earlier draft is never consulted."""
    return generate_draft(config, subjects, random_source)


def run_distribution(
    request: dict[str, Any],
    subjects: Iterable[Any],
    *,
    random_source: RandomSource | None = None,
    validation_report: ValidationReport | None = None,
) -> dict[str, Any]:
    """Run capacity planning, allocation, warnings and metrics for one request."""
    report = validation_report if validation_report is not None else ValidationReport()
    effective_config = resolve_distribution_config(request, report)
    month_key = _month_key(request)
    candidates = [_candidate(subject) for subject in subjects]

    if random_source is None:
        random_source = SeededRandomSource(request.get("seed"))

    capacity = build_month_capacity(
        month_key=month_key,
        active_weekdays=effective_config["active_weekdays"],
        daily_hours_budget=effective_config["daily_hours_budget"],
    )
    decision_trace = DecisionTraceCollector(start_timestamp=datetime.now(timezone.utc))
    draft = allocate_draft(
        month_key=month_key,
        available_days=capacity["available_days"],
        total_capacity=capacity["total_capacity"],
        daily_hours_budget=capacity["daily_hours_budget"],
        subjects=candidates,
        random_source=random_source,
        max_placement_passes=int(effective_config["max_placement_passes"]),
        decision_trace=decision_trace,
    )

    warnings, suggestions = build_draft_warnings(draft=draft, capacity=capacity)
    metrics = collect_draft_metrics(draft=draft, capacity=capacity)
    logger.info(
        f"Draft for {month_key}: {metrics['placed_slots']} slot(s) over {len(capacity['available_days'])} day(s), "
        f"{len(warnings)} warning(s)"
    )

    return {
        "status": "ok",
        "draft": draft,
        "capacity": capacity,
        "effective_config": {**effective_config, "month_key": month_key},
        "warnings": warnings,
        "suggestions": suggestions,
        "metrics": metrics,
        "decision_trace": decision_trace.as_list(),
        "rule_counts": decision_trace.rule_counts(),
    }
