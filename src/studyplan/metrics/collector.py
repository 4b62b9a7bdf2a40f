"""Draft metrics collector."""

from __future__ import annotations

from collections import Counter
from statistics import mean
from typing import Any

from studyplan.engine.draft import Draft


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def collect_draft_metrics(*, draft: Draft, capacity: dict[str, Any]) -> dict[str, Any]:
    """Compute load and utilisation figures for a draft, ratios clamped in [0,1]."""
    budget = max(1, int(capacity.get("daily_hours_budget", draft.daily_hours_budget) or 1))
    total_capacity = max(0, int(capacity.get("total_capacity", 0) or 0))
    available_days = list(capacity.get("available_days", []))

    loads = {day: draft.day_load(day) for day in draft.per_day}
    placed_slots = sum(loads.values())
    goal_total = sum(draft.goal_hours.values())

    duplicate_cells = 0
    for subjects in draft.per_day.values():
        duplicate_cells += sum(count - 1 for count in Counter(subjects).values() if count > 1)

    busy_loads = [load for load in loads.values() if load > 0]

    return {
        "placed_slots": placed_slots,
        "goal_total": goal_total,
        "total_capacity": total_capacity,
        "available_days": len(available_days),
        "max_day_load": max(loads.values(), default=0),
        "mean_day_load": round(mean(busy_loads), 4) if busy_loads else 0.0,
        "days_over_budget": sum(1 for load in loads.values() if load > budget),
        "duplicate_cells": duplicate_cells,
        "utilisation": _clamp01(placed_slots / total_capacity) if total_capacity else 0.0,
        "forced_overflow": draft.forced_overflow,
    }
