from __future__ import annotations

import pytest

from studyplan import commit_draft, duplicate_month, toggle_day
from studyplan.engine import Draft, generate_draft
from studyplan.engine.random_source import SeededRandomSource
from studyplan.errors import InvalidDateError, InvalidMonthKeyError, ScheduleValueError
from studyplan.repository import ScheduleRepository, Subject, SubjectSchedule


def _repository() -> ScheduleRepository:
    return ScheduleRepository(
        subjects=[
            Subject(id="math", title="Math", importance="high"),
            Subject(id="bio", title="Biology", importance="low"),
        ]
    )


def _draft(month_key: str = "2026-09") -> Draft:
    config = {"month_key": month_key, "daily_hours_budget": 2, "active_weekdays": [1, 3, 5]}
    return generate_draft(config, [{"id": "math", "importance": "high"}, {"id": "bio", "importance": "low"}], SeededRandomSource(2))


def test_commit_writes_goals_and_days_and_keeps_notes() -> None:
    repository = _repository()
    repository.enroll_subject("math", "2026-09")
    repository.update_schedule("math", "2026-09", notes="chapter 4", is_completed=True)
    draft = _draft()

    result = commit_draft(repository, "2026-09", draft)

    assert result is repository
    math = repository.schedule_for("math", "2026-09")
    assert math.monthly_goal_hours == draft.goal_hours["math"]
    assert math.planned_days == draft.planned_days["math"]
    assert math.notes == "chapter 4"
    assert math.is_completed is True
    assert repository.schedule_for("bio", "2026-09").planned_days == draft.planned_days["bio"]


def test_commit_skips_subjects_unknown_to_the_repository() -> None:
    repository = ScheduleRepository(subjects=[Subject(id="math")])
    committed = repository.commit("2026-09", _draft())

    assert committed == ["math"]
    assert repository.get_subject("bio") is None


def test_commit_rejects_draft_of_another_month_without_changes() -> None:
    repository = _repository()
    before = repository.to_document()["subjects"]

    with pytest.raises(InvalidDateError):
        repository.commit("2026-10", _draft("2026-09"))
    assert repository.to_document()["subjects"] == before


def test_toggle_day_flips_one_date() -> None:
    repository = _repository()
    repository.enroll_subject("math", "2026-09")

    toggle_day(repository, "math", "2026-09", "2026-09-10")
    assert repository.schedule_for("math", "2026-09").planned_days == ["2026-09-10"]

    toggle_day(repository, "math", "2026-09", "2026-09-10")
    assert repository.schedule_for("math", "2026-09").planned_days == []


def test_toggle_day_without_schedule_is_a_noop() -> None:
    repository = _repository()

    assert repository.toggle_day("math", "2026-09", "2026-09-10") is False
    assert repository.has_schedule("math", "2026-09") is False


def test_toggle_day_rejects_invalid_dates() -> None:
    repository = _repository()
    repository.enroll_subject("math", "2026-02")

    with pytest.raises(InvalidDateError):
        repository.toggle_day("math", "2026-02", "2026-02-30")
    with pytest.raises(InvalidDateError):
        repository.toggle_day("math", "2026-02", "2026-03-01")
    with pytest.raises(InvalidMonthKeyError):
        repository.toggle_day("math", "2026-2", "2026-02-01")
    assert repository.schedule_for("math", "2026-02").planned_days == []


def test_duplicate_month_remaps_and_clamps_days() -> None:
    repository = _repository()
    repository.enroll_subject("math", "2026-01")
    for day in ("2026-01-05", "2026-01-30", "2026-01-31"):
        repository.toggle_day("math", "2026-01", day)
    repository.update_schedule("math", "2026-01", monthly_goal_hours=12, notes="keep", is_completed=True)

    duplicate_month(repository, "2026-01", "2026-02")

    copied = repository.schedule_for("math", "2026-02")
    assert copied.planned_days == ["2026-02-05", "2026-02-28"]
    assert copied.monthly_goal_hours == 12
    assert copied.notes == "keep"
    assert copied.is_completed is False
    assert repository.schedule_for("math", "2026-01").is_completed is True
    assert repository.has_schedule("bio", "2026-02") is False


def test_duplicate_month_rejects_same_month() -> None:
    with pytest.raises(InvalidMonthKeyError):
        _repository().duplicate_month("2026-01", "2026-01")


def test_update_schedule_rejects_negative_goal() -> None:
    repository = _repository()
    repository.enroll_subject("math", "2026-09")
    with pytest.raises(ScheduleValueError):
        repository.update_schedule("math", "2026-09", monthly_goal_hours=-1)


def test_candidate_subjects_prefers_enrolled_subjects() -> None:
    repository = _repository()
    assert [item["id"] for item in repository.candidate_subjects("2026-09")] == ["math", "bio"]

    assert repository.toggle_subject_in_month("bio", "2026-09") is True
    assert [item["id"] for item in repository.candidate_subjects("2026-09")] == ["bio"]

    assert repository.toggle_subject_in_month("bio", "2026-09") is False
    assert repository.has_schedule("bio", "2026-09") is False


def test_delete_subject_cascades_and_listeners_are_notified() -> None:
    repository = _repository()
    actions: list[str] = []
    unsubscribe = repository.subscribe(actions.append)

    repository.enroll_subject("math", "2026-09")
    repository.delete_subject("math")
    unsubscribe()
    repository.add_subject("chem", "Chemistry")

    assert actions == ["enroll_subject", "delete_subject"]
    assert repository.get_subject("math") is None
    with pytest.raises(ScheduleValueError):
        repository.add_subject("chem")


def test_active_months_stay_sorted_and_keep_data() -> None:
    repository = _repository()
    repository.enroll_subject("math", "2026-03")
    repository.add_active_month("2026-03")
    repository.add_active_month("2026-01")
    assert repository.add_active_month("2026-03") is False
    assert repository.active_months == ["2026-01", "2026-03"]

    repository.remove_active_month("2026-03")
    assert repository.active_months == ["2026-01"]
    assert repository.has_schedule("math", "2026-03") is True


def test_document_round_trip_keeps_unknown_fields() -> None:
    document = {
        "subjects": [
            {
                "id": "math",
                "title": "Math",
                "importance": "high",
                "color": "#ff0000",
                "schedules": {"2026-09": {"monthlyGoal": 10, "plannedDays": ["2026-09-03", "2026-09-01"]}},
            }
        ],
        "activeScheduleMonths": ["2026-09"],
        "settings": {"userName": "Ana"},
    }
    repository = ScheduleRepository.from_document(document)

    assert repository.schedule_for("math", "2026-09") == SubjectSchedule(
        monthly_goal_hours=10, planned_days=["2026-09-01", "2026-09-03"]
    )
    exported = repository.to_document()
    assert exported["settings"] == {"userName": "Ana"}
    assert exported["subjects"][0]["color"] == "#ff0000"
    assert exported["subjects"][0]["schedules"]["2026-09"]["monthlyGoalHours"] == 10
    assert exported["activeScheduleMonths"] == ["2026-09"]
    assert exported["lastUpdated"].endswith("Z")
