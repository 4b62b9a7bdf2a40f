"""Decision trace utilities for slot placement events."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any


@dataclass(slots=True)
class DecisionTraceCollector:
    """Collect placement decisions while the allocator passes run."""

    start_timestamp: datetime
    _sequence: int = 0
    _items: list[dict[str, Any]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.start_timestamp.tzinfo is None:
            self.start_timestamp = self.start_timestamp.replace(tzinfo=timezone.utc)

    def record(
        self,
        *,
        day: str,
        subject_id: str,
        applied_rules: list[str],
        blocked_constraints: list[str],
        tradeoff_note: str,
        load_after: int,
    ) -> None:
        self._sequence += 1
        timestamp = self.start_timestamp + timedelta(microseconds=self._sequence)
        self._items.append(
            {
                "decision_id": f"d-{self._sequence:06d}",
                "timestamp": timestamp.isoformat().replace("+00:00", "Z"),
                "date": day,
                "subject_id": subject_id,
                "applied_rules": list(applied_rules),
                "blocked_constraints": list(blocked_constraints),
                "tradeoff_note": tradeoff_note,
                "load_after": int(load_after),
            }
        )

    def rule_counts(self) -> dict[str, int]:
        counts: Counter[str] = Counter()
        for item in self._items:
            counts.update(item["applied_rules"])
        return dict(sorted(counts.items()))

    def as_list(self) -> list[dict[str, Any]]:
        """Return trace in placement order."""
        return sorted(self._items, key=lambda item: str(item["decision_id"]))
