"""Validation for distribution request payload."""

from __future__ import annotations

from typing import Any

from .errors import ValidationError

_REQUIRED_STRING_FIELDS = (
    "snapshot_path",
    "month_key",
)


def validate_plan_request(payload: dict[str, Any]) -> list[ValidationError]:
    """Validate the CLI request with basic shape checks."""
    errors: list[ValidationError] = []

    for field in _REQUIRED_STRING_FIELDS:
        value = payload.get(field)
        if value is None:
            errors.append(
                ValidationError(
                    code="missing_field",
                    message=f"Missing required field: {field}",
                    path=f"$.{field}",
                )
            )
        elif not isinstance(value, str) or not value.strip():
            errors.append(
                ValidationError(
                    code="invalid_type",
                    message=f"Field must be a non-empty string: {field}",
                    path=f"$.{field}",
                )
            )

    seed = payload.get("seed")
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, (int, str))):
        errors.append(
            ValidationError(
                code="invalid_type",
                message="Field must be an integer or string seed: seed",
                path="$.seed",
            )
        )

    return errors
