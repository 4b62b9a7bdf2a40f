"""JSON schema validation for distribution requests and snapshots.

Supports the subset of JSON Schema the bundled schemas use: type, enum,
required, properties, additionalProperties (false or a schema), propertyNames
(enum or pattern), items, minItems, minLength, pattern, format (date,
date-time), minimum, maximum.
"""

from __future__ import annotations

import json
import re
from datetime import date, datetime
from functools import lru_cache
from pathlib import Path
from typing import Any

from .errors import ValidationReport

SCHEMA_DIR = Path(__file__).resolve().parents[1] / "schema"

_SCHEMA_BY_PAYLOAD = {
    "request": "studyplan_distribution_request.schema.json",
    "snapshot": "studyplan_snapshot.schema.json",
}


@lru_cache(maxsize=None)
def load_schema(schema_file: str) -> dict[str, Any]:
    return json.loads((SCHEMA_DIR / schema_file).read_text(encoding="utf-8"))


def validate_inputs_with_schema(payloads: dict[str, Any]) -> ValidationReport:
    report = ValidationReport()

    for payload_name, schema_file in _SCHEMA_BY_PAYLOAD.items():
        if payload_name not in payloads:
            continue
        _validate_node(
            value=payloads[payload_name],
            schema=load_schema(schema_file),
            path=f"$.{payload_name}",
            report=report,
        )

    return report


def _validate_node(*, value: Any, schema: dict[str, Any], path: str, report: ValidationReport) -> None:
    expected_type = schema.get("type")
    if expected_type and not _matches_type(value, expected_type):
        report.add_error(
            code="INVALID_TYPE",
            message=f"Expected type {expected_type}, got {type(value).__name__}",
            field_path=path,
        )
        return

    if "enum" in schema and value not in schema["enum"]:
        report.add_error(
            code="INVALID_ENUM_VALUE",
            message=f"Value {value!r} not in enum",
            field_path=path,
        )

    if isinstance(value, dict):
        _validate_object(value=value, schema=schema, path=path, report=report)

    elif isinstance(value, list):
        min_items = schema.get("minItems")
        if min_items is not None and len(value) < min_items:
            report.add_error(
                code="EMPTY_ARRAY_NOT_ALLOWED",
                message=f"Array must have at least {min_items} items",
                field_path=path,
            )
        items_schema = schema.get("items")
        if isinstance(items_schema, dict):
            for idx, item in enumerate(value):
                _validate_node(value=item, schema=items_schema, path=f"{path}[{idx}]", report=report)

    elif isinstance(value, str):
        min_len = schema.get("minLength")
        if min_len is not None and len(value) < min_len:
            report.add_error(
                code="MISSING_REQUIRED_FIELD",
                message="String cannot be empty",
                field_path=path,
            )
        pattern = schema.get("pattern")
        if pattern and not re.search(pattern, value):
            report.add_error(
                code="INVALID_FORMAT",
                message=f"Value {value!r} does not match {pattern}",
                field_path=path,
            )
        data_format = schema.get("format")
        if data_format == "date" and not _is_date(value):
            report.add_error(code="INVALID_DATE_FORMAT", message="Invalid date format", field_path=path)
        if data_format == "date-time" and not _is_datetime(value):
            report.add_error(code="INVALID_DATE_FORMAT", message="Invalid datetime format", field_path=path)

    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        minimum = schema.get("minimum")
        if minimum is not None and value < minimum:
            report.add_error(code="OUT_OF_RANGE", message=f"Value must be >= {minimum}", field_path=path)
        maximum = schema.get("maximum")
        if maximum is not None and value > maximum:
            report.add_error(code="OUT_OF_RANGE", message=f"Value must be <= {maximum}", field_path=path)


def _validate_object(*, value: dict[str, Any], schema: dict[str, Any], path: str, report: ValidationReport) -> None:
    for key in schema.get("required", []):
        if key not in value:
            report.add_error(
                code="MISSING_REQUIRED_FIELD",
                message=f"Missing required field: {key}",
                field_path=f"{path}.{key}",
            )

    properties = schema.get("properties", {})
    additional = schema.get("additionalProperties")
    for key, item in value.items():
        if key in properties:
            _validate_node(value=item, schema=properties[key], path=f"{path}.{key}", report=report)
        elif additional is False:
            report.add_error(
                code="UNKNOWN_FIELD",
                message=f"Unknown field: {key}",
                field_path=f"{path}.{key}",
                suggested_fix="Remove unsupported key or use one of schema-defined fields.",
            )
        elif isinstance(additional, dict):
            _validate_node(value=item, schema=additional, path=f"{path}.{key}", report=report)

    property_names = schema.get("propertyNames")
    if isinstance(property_names, dict):
        allowed_names = set(property_names.get("enum", []))
        name_pattern = property_names.get("pattern")
        for key in value:
            if allowed_names and key not in allowed_names:
                report.add_error(
                    code="INVALID_KEY",
                    message=f"Key {key!r} is not allowed",
                    field_path=f"{path}.{key}",
                    suggested_fix=f"Use one of: {', '.join(sorted(allowed_names))}",
                )
            if name_pattern and not re.search(name_pattern, key):
                report.add_error(
                    code="INVALID_KEY",
                    message=f"Key {key!r} does not match {name_pattern}",
                    field_path=f"{path}.{key}",
                )


def _matches_type(value: Any, expected_type: str) -> bool:
    return {
        "object": isinstance(value, dict),
        "array": isinstance(value, list),
        "string": isinstance(value, str),
        "integer": isinstance(value, int) and not isinstance(value, bool),
        "number": isinstance(value, (int, float)) and not isinstance(value, bool),
        "boolean": isinstance(value, bool),
    }.get(expected_type, True)


def _is_date(value: str) -> bool:
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def _is_datetime(value: str) -> bool:
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return False
    return True
