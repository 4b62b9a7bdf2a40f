"""JSON helpers for snapshot files and CLI reports."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def read_json(path: str | Path) -> dict[str, Any]:
    """Read a JSON file and return a dictionary payload."""
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"JSON root must be an object: {path}")
    return payload


def dump_json(payload: dict[str, Any]) -> str:
    """Serialize a payload with stable formatting."""
    return json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n"


def write_json(path: str | Path, payload: dict[str, Any]) -> None:
    """Write a JSON payload, creating parent directories when missing."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(dump_json(payload), encoding="utf-8")
