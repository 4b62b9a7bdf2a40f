from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone

import pytest

from studyplan.engine import Draft, generate_draft, regenerate_draft, toggle_draft_cell
from studyplan.engine.allocator import RULE_OVERFLOW_DUPLICATE, RULE_PRIMARY, allocate_draft
from studyplan.engine.random_source import SeededRandomSource
from studyplan.errors import InvalidDateError, UnknownSubjectError
from studyplan.reporting.decision_trace import DecisionTraceCollector

WEEKDAYS = [1, 2, 3, 4, 5]


def _config(**overrides: object) -> dict:
    payload = {"month_key": "2026-09", "daily_hours_budget": 4, "active_weekdays": WEEKDAYS}
    payload.update(overrides)
    return payload


def test_worked_scenario_high_vs_low_fills_every_day() -> None:
    subjects = [{"id": "A", "importance": "high"}, {"id": "B", "importance": "low"}]
    draft = generate_draft(_config(), subjects, SeededRandomSource(1))

    assert draft.goal_hours == {"A": 66, "B": 22}
    assert len(draft.per_day) == 22
    assert all(draft.day_load(day) == 4 for day in draft.per_day)
    assert all(Counter(assigned) == {"A": 3, "B": 1} for assigned in draft.per_day.values())
    assert draft.forced_overflow is True
    assert draft.overflow_subjects == ["A"]
    assert len(draft.planned_days["A"]) == 22
    assert len(draft.planned_days["B"]) == 22


def test_same_seed_gives_same_draft() -> None:
    subjects = [
        {"id": "math", "importance": "high"},
        {"id": "bio", "importance": "medium"},
        {"id": "art", "importance": "low"},
    ]
    first = generate_draft(_config(daily_hours_budget=3), subjects, SeededRandomSource("seed"))
    second = regenerate_draft(_config(daily_hours_budget=3), subjects, SeededRandomSource("seed"))

    assert first == second


def test_four_equal_subjects_never_share_a_day_twice() -> None:
    subjects = [{"id": sid} for sid in ("a", "b", "c", "d")]
    draft = generate_draft(_config(), subjects, SeededRandomSource(3))

    assert draft.forced_overflow is False
    assert draft.goal_hours == {"a": 22, "b": 22, "c": 22, "d": 22}
    for assigned in draft.per_day.values():
        assert len(assigned) == len(set(assigned))


def test_explicit_weight_overrides_importance() -> None:
    subjects = [{"id": "a", "importance": "high", "weight": 1}, {"id": "b", "importance": "low", "weight": 1}]
    draft = generate_draft(_config(), subjects, SeededRandomSource(0))
    assert draft.goal_hours == {"a": 44, "b": 44}


def test_no_subjects_gives_empty_draft() -> None:
    draft = generate_draft(_config(), [], SeededRandomSource(0))

    assert draft.goal_hours == {}
    assert draft.planned_days == {}
    assert all(not assigned for assigned in draft.per_day.values())


def test_no_weekdays_gives_zero_goals() -> None:
    draft = generate_draft(_config(active_weekdays=[]), [{"id": "a"}, {"id": "b"}], SeededRandomSource(0))

    assert draft.per_day == {}
    assert draft.goal_hours == {"a": 0, "b": 0}
    assert draft.planned_days == {"a": [], "b": []}
    assert draft.forced_overflow is False


def test_duplicate_candidate_ids_keep_first_occurrence() -> None:
    subjects = [{"id": "a", "importance": "high"}, {"id": "a", "importance": "low"}, {"id": "b"}]
    draft = generate_draft(_config(), subjects, SeededRandomSource(0))
    assert draft.subject_order == ["a", "b"]
    assert draft.goal_hours == {"a": 53, "b": 35}


def test_decision_trace_records_every_placement() -> None:
    trace = DecisionTraceCollector(start_timestamp=datetime(2026, 9, 1, tzinfo=timezone.utc))
    draft = allocate_draft(
        month_key="2026-09",
        available_days=["2026-09-01", "2026-09-02"],
        total_capacity=4,
        daily_hours_budget=2,
        subjects=[{"id": "A", "importance": "high"}, {"id": "B", "importance": "low"}],
        random_source=SeededRandomSource(5),
        decision_trace=trace,
    )

    items = trace.as_list()
    assert draft.goal_hours == {"A": 3, "B": 1}
    assert len(items) == 4
    assert items[0]["decision_id"] == "d-000001"
    counts = trace.rule_counts()
    assert counts[RULE_PRIMARY] == 3
    assert counts[RULE_OVERFLOW_DUPLICATE] == 1


def test_toggle_draft_cell_twice_restores_the_draft() -> None:
    subjects = [{"id": sid} for sid in ("a", "b", "c", "d")]
    draft = generate_draft(_config(), subjects, SeededRandomSource(9))
    day = "2026-09-01"
    sid = draft.per_day[day][0]

    removed = toggle_draft_cell(draft, day, sid)
    assert sid not in removed.per_day[day]
    assert day not in removed.planned_days[sid]
    assert removed.goal_hours == draft.goal_hours
    assert toggle_draft_cell(removed, day, sid) == draft


def test_toggle_draft_cell_on_weekend_day_round_trips() -> None:
    draft = generate_draft(_config(), [{"id": "a"}], SeededRandomSource(0))
    saturday = "2026-09-05"

    added = toggle_draft_cell(draft, saturday, "a")
    assert added.per_day[saturday] == ["a"]
    assert saturday in added.planned_days["a"]
    assert toggle_draft_cell(added, saturday, "a") == draft


def test_toggle_draft_cell_rejects_bad_input() -> None:
    draft: Draft = generate_draft(_config(), [{"id": "a"}], SeededRandomSource(0))

    with pytest.raises(InvalidDateError):
        toggle_draft_cell(draft, "2026-10-01", "a")
    with pytest.raises(InvalidDateError):
        toggle_draft_cell(draft, "2026-09-31", "a")
    with pytest.raises(UnknownSubjectError):
        toggle_draft_cell(draft, "2026-09-01", "zzz")


def test_forced_overflow_does_not_repeat_a_subject_that_fits_the_month() -> None:
    subjects = [
        {"id": "s0", "importance": "low"},
        {"id": "s1", "importance": "low"},
        {"id": "s2", "importance": "high"},
        {"id": "s3", "importance": "high"},
    ]
    for seed in range(40):
        draft = allocate_draft(
            month_key="2026-09",
            available_days=["2026-09-01", "2026-09-02"],
            total_capacity=4,
            daily_hours_budget=2,
            subjects=subjects,
            random_source=SeededRandomSource(seed),
        )

        assert draft.goal_hours == {"s0": 1, "s1": 1, "s2": 2, "s3": 2}
        assert draft.forced_overflow is True
        placed = Counter(sid for assigned in draft.per_day.values() for sid in assigned)
        assert placed == Counter(draft.goal_hours)
        for assigned in draft.per_day.values():
            assert len(assigned) == len(set(assigned))
