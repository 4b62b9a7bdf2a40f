"""Validation helpers."""

from .errors import ValidationError, ValidationIssue, ValidationReport
from .domain_validator import validate_domain_inputs
from .request import validate_plan_request
from .schema_validator import validate_inputs_with_schema

__all__ = [
    "ValidationError",
    "ValidationIssue",
    "ValidationReport",
    "validate_plan_request",
    "validate_inputs_with_schema",
    "validate_domain_inputs",
]
