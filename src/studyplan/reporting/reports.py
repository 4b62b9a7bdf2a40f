"""Build CLI reports."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from studyplan.validation import ValidationError, ValidationReport


def build_error_report(errors: list[ValidationError], code: str = "validation_error") -> dict[str, Any]:
    """Return a JSON-serializable error report."""
    return {
        "status": "error",
        "error": {
            "code": code,
            "count": len(errors),
            "details": [
                {"code": err.code, "message": err.message, "path": err.path}
                for err in errors
            ],
        },
    }


def build_error_report_with_validation(
    errors: list[ValidationError],
    validation_report: ValidationReport,
    code: str = "validation_error",
) -> dict[str, Any]:
    payload = build_error_report(errors, code=code)
    payload["validation_report"] = validation_report.as_dict()
    return payload


def build_schedule_error_report(exc: Exception, path: str = "$") -> dict[str, Any]:
    """Wrap a raised ``ScheduleError`` into the error report shape."""
    code = str(getattr(exc, "code", "schedule_error"))
    details = getattr(exc, "details", str(exc))
    messages = details if isinstance(details, list) else [str(details)]
    return build_error_report(
        [ValidationError(code=code, message=str(message), path=path) for message in messages],
        code=code.lower(),
    )


def build_success_report(result: dict[str, Any], validation_report: ValidationReport) -> dict[str, Any]:
    """Return a JSON-serializable success report for a distribution run."""
    generated_at = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    draft = result["draft"]
    draft_id = f"draft-{draft.month_key}-{generated_at.replace(':', '').replace('-', '').replace('T', '-').replace('Z', '')}"
    return {
        "status": "ok",
        "draft_output": {
            "schema_version": "1.0.0",
            "draft_id": draft_id,
            "generated_at": generated_at,
            "draft": draft.as_dict(),
            "capacity": result.get("capacity", {}),
            "metrics": result.get("metrics", {}),
            "warnings": result.get("warnings", []),
            "suggestions": result.get("suggestions", []),
            "decision_trace": result.get("decision_trace", []),
            "rule_counts": result.get("rule_counts", {}),
            "effective_config": result.get("effective_config", {}),
            "validation_report": validation_report.as_dict(),
        },
        "committed": bool(result.get("committed", False)),
    }
