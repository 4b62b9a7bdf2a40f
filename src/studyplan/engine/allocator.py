"""Weighted slot allocation over the available days of a month.

Phases:
1) goal hours from importance weights (whole hours, round-half-up),
2) shuffled pool of one-hour slot tokens,
3) primary placement under the daily budget with duplicate-avoidance,
4) forced-overflow placement with the budget relaxed by one unit.

Rule preserved: a subject lands twice on the same day only in phase 4, and only
when its goal exceeds the number of available days.
"""

from __future__ import annotations

import math
from collections import Counter
from typing import Any, Callable

from loguru import logger

from studyplan.reporting.decision_trace import DecisionTraceCollector

from .draft import Draft, invert_assignment, order_day
from .importance import weight_of
from .random_source import RandomSource, shuffle_in_place

DEFAULT_MAX_PLACEMENT_PASSES = 50
OVERFLOW_EXTRA_UNITS = 1

RULE_PRIMARY = "RULE_PRIMARY_PLACEMENT"
RULE_OVERFLOW_RELAXED_CAP = "RULE_FORCED_OVERFLOW_RELAXED_CAP"
RULE_OVERFLOW_DUPLICATE = "RULE_FORCED_OVERFLOW_DUPLICATE"
RULE_OVERFLOW_UNBOUNDED = "RULE_FORCED_OVERFLOW_LEAST_LOADED"


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def subject_id_of(subject: dict[str, Any]) -> str:
    return str(subject.get("id", subject.get("subject_id", "")))


def subject_weight(subject: dict[str, Any]) -> int:
    """Weight of a candidate: explicit non-negative ``weight`` or its importance tier."""
    weight = subject.get("weight")
    if isinstance(weight, int) and not isinstance(weight, bool) and weight >= 0:
        return weight
    return weight_of(subject.get("importance"))


def compute_goal_hours(weights: dict[str, int], total_capacity: int) -> dict[str, int]:
    """Split capacity proportionally to weights.

    Formula: goal_hours = round_half_up(total_capacity * weight / total_weight)
    """
    total_weight = sum(weights.values())
    if total_weight <= 0 or total_capacity <= 0:
        return {sid: 0 for sid in weights}
    return {
        sid: max(0, round_half_up(total_capacity * (weight / total_weight)))
        for sid, weight in weights.items()
    }


def build_token_pool(
    goal_hours: dict[str, int],
    subject_order: list[str],
    random_source: RandomSource,
) -> list[str]:
    tokens = [sid for sid in subject_order for _ in range(goal_hours.get(sid, 0))]
    shuffle_in_place(tokens, random_source)
    return tokens


def _find_day(days: list[str], cursor: int, accepts: Callable[[str], bool]) -> int | None:
    """Scan every day once, starting at ``cursor`` and wrapping around."""
    total = len(days)
    for step in range(total):
        idx = (cursor + step) % total
        if accepts(days[idx]):
            return idx
    return None


def _record(
    decision_trace: DecisionTraceCollector | None,
    *,
    day: str,
    subject_id: str,
    rule: str,
    load_after: int,
    blocked: list[str],
    note: str,
) -> None:
    if decision_trace is None:
        return
    decision_trace.record(
        day=day,
        subject_id=subject_id,
        applied_rules=[rule],
        blocked_constraints=blocked,
        tradeoff_note=note,
        load_after=load_after,
    )


def _primary_pass(
    *,
    tokens: list[str],
    days: list[str],
    per_day: dict[str, list[str]],
    budget: int,
    max_passes: int,
    decision_trace: DecisionTraceCollector | None,
) -> list[str]:
    pending = list(tokens)
    cursor = 0

    for _ in range(max(1, max_passes)):
        if not pending:
            break
        remaining: list[str] = []
        placed_any = False
        for sid in pending:
            idx = _find_day(
                days,
                cursor,
                lambda day, sid=sid: len(per_day[day]) < budget and sid not in per_day[day],
            )
            if idx is None:
                remaining.append(sid)
                continue
            day = days[idx]
            per_day[day].append(sid)
            cursor = (idx + 1) % len(days)
            placed_any = True
            _record(
                decision_trace,
                day=day,
                subject_id=sid,
                rule=RULE_PRIMARY,
                load_after=len(per_day[day]),
                blocked=[],
                note="First day from cursor with spare budget and no same-subject slot.",
            )
        pending = remaining
        if not placed_any:
            break

    return pending


def _least_loaded_day(
    days: list[str],
    cursor: int,
    per_day: dict[str, list[str]],
    accepts: Callable[[str], bool],
) -> int | None:
    """Accepted day with the lowest load; ties go to the nearest day from ``cursor``."""
    total = len(days)
    candidates = [idx for idx in range(total) if accepts(days[idx])]
    if not candidates:
        return None
    return min(candidates, key=lambda idx: (len(per_day[days[idx]]), (idx - cursor) % total))


def _forced_overflow_pass(
    *,
    tokens: list[str],
    days: list[str],
    per_day: dict[str, list[str]],
    budget: int,
    goal_hours: dict[str, int],
    subject_order: list[str],
    decision_trace: DecisionTraceCollector | None,
) -> None:
    """Place leftover tokens, most-constrained subject first.

    A subject may repeat on a day only when its goal exceeds the number of
    available days.
    """
    ceiling = budget + OVERFLOW_EXTRA_UNITS
    cursor = 0
    remaining = Counter(tokens)
    rank = {sid: pos for pos, sid in enumerate(subject_order)}
    ordered = sorted(tokens, key=lambda sid: (-remaining[sid], rank.get(sid, len(rank))))

    for sid in ordered:
        may_repeat = goal_hours.get(sid, 0) > len(days)
        rule = RULE_OVERFLOW_RELAXED_CAP
        blocked = ["DAILY_BUDGET"]
        idx = _least_loaded_day(
            days,
            cursor,
            per_day,
            lambda day, sid=sid: len(per_day[day]) < ceiling and sid not in per_day[day],
        )
        if idx is None and may_repeat:
            rule = RULE_OVERFLOW_DUPLICATE
            blocked = ["DAILY_BUDGET", "DUPLICATE_SUBJECT"]
            idx = _least_loaded_day(days, cursor, per_day, lambda day: len(per_day[day]) < ceiling)
        if idx is None:
            rule = RULE_OVERFLOW_UNBOUNDED
            blocked = ["DAILY_BUDGET", "OVERFLOW_CEILING"]
            if may_repeat:
                blocked.insert(1, "DUPLICATE_SUBJECT")
            idx = _least_loaded_day(
                days,
                cursor,
                per_day,
                lambda day, sid=sid: may_repeat or sid not in per_day[day],
            )
        if idx is None:
            raise RuntimeError(f"No day can take a slot for {sid}")

        day = days[idx]
        per_day[day].append(sid)
        cursor = (idx + 1) % len(days)
        _record(
            decision_trace,
            day=day,
            subject_id=sid,
            rule=rule,
            load_after=len(per_day[day]),
            blocked=blocked,
            note="Forced slot: no day left within the daily budget.",
        )


def allocate_draft(
    *,
    month_key: str,
    available_days: list[str],
    total_capacity: int,
    daily_hours_budget: int,
    subjects: list[dict[str, Any]],
    random_source: RandomSource,
    max_placement_passes: int = DEFAULT_MAX_PLACEMENT_PASSES,
    decision_trace: DecisionTraceCollector | None = None,
) -> Draft:
    """Distribute weighted slot tokens over ``available_days``.

    Candidate order is the order of ``subjects``; duplicate ids keep their
    first occurrence.
    """

    subject_order: list[str] = []
    weights: dict[str, int] = {}
    for subject in subjects:
        sid = subject_id_of(subject)
        if not sid or sid in weights:
            continue
        subject_order.append(sid)
        weights[sid] = subject_weight(subject)

    days = list(available_days)
    per_day: dict[str, list[str]] = {day: [] for day in days}
    budget = max(1, int(daily_hours_budget))

    if sum(weights.values()) <= 0 or not days:
        logger.debug(f"Empty distribution for {month_key}: {len(days)} days, {len(subject_order)} subjects")
        return Draft(
            month_key=month_key,
            per_day=per_day,
            goal_hours={sid: 0 for sid in subject_order},
            planned_days={sid: [] for sid in subject_order},
            subject_order=subject_order,
            available_days=days,
            daily_hours_budget=budget,
        )

    goal_hours = compute_goal_hours(weights, total_capacity)
    tokens = build_token_pool(goal_hours, subject_order, random_source)

    pending = _primary_pass(
        tokens=tokens,
        days=days,
        per_day=per_day,
        budget=budget,
        max_passes=max_placement_passes,
        decision_trace=decision_trace,
    )

    pending_ids = set(pending)
    overflow_subjects = [sid for sid in subject_order if sid in pending_ids]
    if pending:
        logger.info(
            f"Forced overflow in {month_key}: {len(pending)} slot(s) for {', '.join(overflow_subjects)}"
        )
        _forced_overflow_pass(
            tokens=pending,
            days=days,
            per_day=per_day,
            budget=budget,
            goal_hours=goal_hours,
            subject_order=subject_order,
            decision_trace=decision_trace,
        )

    per_day = {day: order_day(assigned, subject_order) for day, assigned in per_day.items()}

    return Draft(
        month_key=month_key,
        per_day=per_day,
        goal_hours=goal_hours,
        planned_days=invert_assignment(per_day, subject_order),
        subject_order=subject_order,
        available_days=days,
        daily_hours_budget=budget,
        forced_overflow=bool(pending),
        overflow_subjects=overflow_subjects,
    )
