"""Normalization for incoming request payloads."""

from __future__ import annotations

from typing import Any


def normalize_request(payload: dict[str, Any]) -> dict[str, Any]:
    """Return a normalized copy of input request."""
    normalized = dict(payload)
    normalized.setdefault("schema_version", "1.0")
    if isinstance(normalized.get("month_key"), str):
        normalized["month_key"] = normalized["month_key"].strip()
    normalized["commit"] = bool(normalized.get("commit", False))
    return normalized
