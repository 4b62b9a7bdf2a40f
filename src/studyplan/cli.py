"""CLI entrypoint for studyplan."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any

from loguru import logger

from studyplan.engine import run_distribution
from studyplan.errors import ScheduleError
from studyplan.io import dump_json, read_json, write_json
from studyplan.logger import setup_logger
from studyplan.normalization import normalize_request, resolve_distribution_config
from studyplan.reporting import (
    build_error_report,
    build_error_report_with_validation,
    build_schedule_error_report,
    build_success_report,
)
from studyplan.reporting.summary import summarize
from studyplan.repository import ScheduleRepository
from studyplan.validation import (
    ValidationError,
    ValidationReport,
    validate_domain_inputs,
    validate_inputs_with_schema,
    validate_plan_request,
)


def _resolve_input_path(request_file: Path, value: str) -> Path:
    path = Path(value)
    if path.is_absolute():
        return path
    return (request_file.parent / path).resolve()


def _emit(output_path: str | None, payload: dict[str, Any]) -> None:
    if output_path:
        write_json(output_path, payload)
    else:
        print(dump_json(payload), end="")


def _read_error(exc: Exception, path: str, code: str) -> dict[str, Any]:
    if isinstance(exc, FileNotFoundError):
        error = ValidationError(code="file_not_found", message=f"File not found: {exc.filename}", path=path)
    else:
        error = ValidationError(code="invalid_json", message=str(exc), path=path)
    return build_error_report([error], code=code)


def _validation_failure(output_path: str | None, validation_report: ValidationReport) -> int:
    _emit(
        output_path,
        build_error_report_with_validation(
            validation_report.as_errors(),
            validation_report=validation_report,
            code="validation_error",
        ),
    )
    return 2


def _load_snapshot(snapshot_path: str | Path, output_path: str | None) -> ScheduleRepository | None:
    """Read and validate a snapshot file; on failure the error report is already emitted."""
    try:
        snapshot = read_json(snapshot_path)
    except (OSError, ValueError) as exc:
        _emit(output_path, _read_error(exc, "$.snapshot", "snapshot_read_error"))
        return None

    validation_report = ValidationReport()
    validation_report.extend(validate_domain_inputs({"snapshot": snapshot}))
    validation_report.extend(validate_inputs_with_schema({"snapshot": snapshot}))
    if validation_report.has_errors:
        _validation_failure(output_path, validation_report)
        return None
    return ScheduleRepository.from_document(snapshot)


def _select_candidates(repository: ScheduleRepository, request: dict[str, Any]) -> list[dict[str, Any]]:
    requested = request.get("subject_ids")
    if isinstance(requested, list):
        return [repository.get_subject(sid).as_candidate() for sid in requested]
    return repository.candidate_subjects(request["month_key"])


def run_draft_command(request_path: str, output_path: str) -> int:
    validation_report = ValidationReport()

    try:
        request_payload = read_json(request_path)
    except (OSError, ValueError) as exc:
        write_json(output_path, _read_error(exc, "$.request", "request_read_error"))
        return 2

    request_payload = normalize_request(request_payload)
    errors = validate_plan_request(request_payload)
    if errors:
        write_json(output_path, build_error_report(errors))
        return 2

    snapshot_path = _resolve_input_path(Path(request_path), request_payload["snapshot_path"])
    try:
        snapshot = read_json(snapshot_path)
    except (OSError, ValueError) as exc:
        payload = _read_error(exc, "$.snapshot_path", "input_load_error")
        payload["validation_report"] = validation_report.as_dict()
        write_json(output_path, payload)
        return 2

    effective_config = resolve_distribution_config(request_payload, validation_report)
    loaded = {"request": request_payload, "snapshot": snapshot}
    validation_report.extend(validate_domain_inputs(loaded))
    validation_report.extend(validate_inputs_with_schema(loaded))
    if validation_report.has_errors:
        return _validation_failure(output_path, validation_report)

    repository = ScheduleRepository.from_document(snapshot)
    request = {**request_payload, **effective_config}
    try:
        result = run_distribution(request, _select_candidates(repository, request))
        if request_payload["commit"]:
            repository.commit(request["month_key"], result["draft"])
            target = request_payload.get("output_snapshot_path") or request_payload["snapshot_path"]
            write_json(_resolve_input_path(Path(request_path), target), repository.to_document())
            result["committed"] = True
    except ScheduleError as exc:
        write_json(output_path, build_schedule_error_report(exc, path="$.request"))
        return 2

    write_json(output_path, build_success_report(result, validation_report))
    return 0


def run_summary_command(snapshot_path: str, month_key: str, output_path: str) -> int:
    repository = _load_snapshot(snapshot_path, output_path)
    if repository is None:
        return 2
    try:
        summary = summarize(repository, month_key)
    except ScheduleError as exc:
        write_json(output_path, build_schedule_error_report(exc, path="$.month"))
        return 2
    write_json(output_path, {"status": "ok", "summary": summary})
    return 0


def run_duplicate_command(snapshot_path: str, source: str, target: str, output_path: str | None = None) -> int:
    repository = _load_snapshot(snapshot_path, output_path)
    if repository is None:
        return 2
    try:
        copied = repository.duplicate_month(source, target)
    except ScheduleError as exc:
        _emit(output_path, build_schedule_error_report(exc, path="$.target"))
        return 2
    repository.add_active_month(target)
    write_json(snapshot_path, repository.to_document())
    logger.info(f"Duplicated {len(copied)} schedule(s) from {source} to {target}")
    _emit(output_path, {"status": "ok", "copied_subject_ids": copied, "target_month_key": target})
    return 0


def run_toggle_command(
    snapshot_path: str,
    subject_id: str,
    month_key: str,
    day: str,
    output_path: str | None = None,
) -> int:
    repository = _load_snapshot(snapshot_path, output_path)
    if repository is None:
        return 2
    try:
        changed = repository.toggle_day(subject_id, month_key, day)
    except ScheduleError as exc:
        _emit(output_path, build_schedule_error_report(exc, path="$.date"))
        return 2
    if changed:
        write_json(snapshot_path, repository.to_document())
    schedule = repository.schedule_for(subject_id, month_key)
    _emit(
        output_path,
        {
            "status": "ok",
            "changed": changed,
            "subject_id": subject_id,
            "month_key": month_key,
            "planned_days": schedule.planned_days,
        },
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="studyplan", description="Monthly study schedule CLI")
    parser.add_argument("--log-level", default="WARNING", help="Log level for stderr output")
    parser.add_argument("--log-file", default=None, help="Optional rotating log file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    draft_parser = subparsers.add_parser("draft", help="Generate a month draft from a request JSON")
    draft_parser.add_argument("--request", required=True, help="Path to distribution_request.json")
    draft_parser.add_argument("--output", required=True, help="Path to draft_output.json")

    summary_parser = subparsers.add_parser("summary", help="Summarize one month of a snapshot")
    summary_parser.add_argument("--snapshot", required=True, help="Path to snapshot.json")
    summary_parser.add_argument("--month", required=True, help="Month key (YYYY-MM)")
    summary_parser.add_argument("--output", required=True, help="Path to summary.json")

    duplicate_parser = subparsers.add_parser("duplicate", help="Copy every schedule of a month onto another")
    duplicate_parser.add_argument("--snapshot", required=True, help="Path to snapshot.json (updated in place)")
    duplicate_parser.add_argument("--source", required=True, help="Source month key")
    duplicate_parser.add_argument("--target", required=True, help="Target month key")
    duplicate_parser.add_argument("--output", default=None, help="Report path (stdout when omitted)")

    toggle_parser = subparsers.add_parser("toggle", help="Flip one planned day of a committed schedule")
    toggle_parser.add_argument("--snapshot", required=True, help="Path to snapshot.json (updated in place)")
    toggle_parser.add_argument("--subject", required=True, help="Subject id")
    toggle_parser.add_argument("--month", required=True, help="Month key (YYYY-MM)")
    toggle_parser.add_argument("--date", required=True, help="Date (YYYY-MM-DD)")
    toggle_parser.add_argument("--output", default=None, help="Report path (stdout when omitted)")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logger(level=args.log_level.upper(), log_file=args.log_file)

    if args.command == "draft":
        return run_draft_command(args.request, args.output)
    if args.command == "summary":
        return run_summary_command(args.snapshot, args.month, args.output)
    if args.command == "duplicate":
        return run_duplicate_command(args.snapshot, args.source, args.target, args.output)
    if args.command == "toggle":
        return run_toggle_command(args.snapshot, args.subject, args.month, args.date, args.output)

    parser.error("Unknown command")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
