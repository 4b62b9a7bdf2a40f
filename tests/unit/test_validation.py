from __future__ import annotations

from studyplan.normalization import normalize_request
from studyplan.validation import validate_domain_inputs, validate_inputs_with_schema, validate_plan_request


def _snapshot() -> dict:
    return {
        "subjects": [
            {
                "id": "math",
                "importance": "urgent",
                "schedules": {
                    "2026-02": {"monthlyGoalHours": -2, "plannedDays": ["2026-02-30", "2026-03-01"]},
                    "2026-13": {},
                },
            },
            {"id": "math"},
            {"title": "no id"},
        ]
    }


def test_domain_validation_reports_every_error() -> None:
    report = validate_domain_inputs(
        {"request": {"month_key": "2026-9", "subject_ids": ["math", "chem"]}, "snapshot": _snapshot()}
    )

    codes = [issue.code for issue in report.errors]
    assert "INVALID_MONTH_KEY" in codes
    assert "INVALID_IMPORTANCE" in codes
    assert "NEGATIVE_GOAL_HOURS" in codes
    assert "INVALID_DATE_FORMAT" in codes
    assert "DATE_OUTSIDE_MONTH" in codes
    assert "DUPLICATE_SUBJECT_ID" in codes
    assert "MISSING_SUBJECT_ID" in codes
    assert "UNKNOWN_SUBJECT" in codes
    assert codes.count("INVALID_MONTH_KEY") == 2


def test_domain_validation_accepts_what_the_engine_parses() -> None:
    snapshot = {
        "subjects": [
            {
                "id": "bio",
                "schedules": {
                    "2028-02": {"plannedDays": ["2028-02-29"]},
                    "0000-01": {},
                    "2026-02": {"plannedDays": ["2026-2-03"]},
                },
            }
        ]
    }
    report = validate_domain_inputs({"request": {"month_key": "2026-12"}, "snapshot": snapshot})

    assert [(issue.code, issue.field_path) for issue in report.errors] == [
        ("INVALID_MONTH_KEY", "$.snapshot.subjects[0].schedules.0000-01"),
        ("INVALID_DATE_FORMAT", "$.snapshot.subjects[0].schedules.2026-02.plannedDays[0]"),
    ]


def test_schema_validation_flags_shape_problems() -> None:
    report = validate_inputs_with_schema(
        {
            "request": {"snapshot_path": "s.json", "month_key": "2026-02", "budget": 3, "active_weekdays": [9]},
            "snapshot": {"subjects": [{"id": "math", "schedules": {"2026-2": {"monthlyGoalHours": "x"}}}]},
        }
    )

    codes = report.error_codes()
    assert "UNKNOWN_FIELD" in codes
    assert "OUT_OF_RANGE" in codes
    assert "INVALID_KEY" in codes
    assert "INVALID_TYPE" in codes


def test_valid_inputs_pass_both_validators() -> None:
    payloads = {
        "request": normalize_request({"snapshot_path": "s.json", "month_key": " 2026-02 ", "seed": 4}),
        "snapshot": {
            "subjects": [
                {
                    "id": "math",
                    "importance": "high",
                    "schedules": {"2026-02": {"monthlyGoalHours": 8, "plannedDays": ["2026-02-02"]}},
                }
            ],
            "lastUpdated": "2026-02-01T10:00:00Z",
        },
    }

    assert payloads["request"]["month_key"] == "2026-02"
    assert not validate_plan_request(payloads["request"])
    assert not validate_domain_inputs(payloads).has_errors
    assert not validate_inputs_with_schema(payloads).has_errors


def test_plan_request_requires_paths_and_month() -> None:
    errors = validate_plan_request({"snapshot_path": "", "seed": 1.5})
    assert [(err.code, err.path) for err in errors] == [
        ("invalid_type", "$.snapshot_path"),
        ("missing_field", "$.month_key"),
        ("invalid_type", "$.seed"),
    ]
