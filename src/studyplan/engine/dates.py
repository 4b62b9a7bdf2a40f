"""Calendar primitives over month-keys ("YYYY-MM") and ISO dates ("YYYY-MM-DD").

Weekdays follow the Sunday=0 convention used by the rest of the system.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, timedelta

from studyplan.errors import InvalidDateError, InvalidMonthKeyError

_MONTH_KEY_RE = re.compile(r"^(\d{4})-(\d{2})$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_month_key(month_key: str) -> tuple[int, int]:
    match = _MONTH_KEY_RE.match(month_key) if isinstance(month_key, str) else None
    if match is None:
        raise InvalidMonthKeyError(f"Month key must look like YYYY-MM: {month_key!r}")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12 or year < 1:
        raise InvalidMonthKeyError(f"Month key out of range: {month_key!r}")
    return year, month


def is_month_key(value: object) -> bool:
    try:
        parse_month_key(value)  # type: ignore[arg-type]
    except InvalidMonthKeyError:
        return False
    return True


def parse_date(raw: str | date) -> date:
    """Parse a zero-padded ISO date, raising ``InvalidDateError`` otherwise."""
    if isinstance(raw, date):
        return raw
    if not isinstance(raw, str) or not _DATE_RE.match(raw):
        raise InvalidDateError(f"Date must look like YYYY-MM-DD: {raw!r}")
    try:
        return date.fromisoformat(raw)
    except ValueError as exc:
        raise InvalidDateError(f"Invalid calendar date: {raw!r}") from exc


def month_key_of(day: str | date) -> str:
    parsed = parse_date(day)
    return f"{parsed.year:04d}-{parsed.month:02d}"


def days_in_month(month_key: str) -> int:
    year, month = parse_month_key(month_key)
    return calendar.monthrange(year, month)[1]


def enumerate_days(month_key: str) -> list[date]:
    """Return every calendar day of the month in ascending order."""
    year, month = parse_month_key(month_key)
    first = date(year, month, 1)
    return [first + timedelta(days=offset) for offset in range(days_in_month(month_key))]


def weekday_of(day: str | date) -> int:
    return (parse_date(day).weekday() + 1) % 7


def format_date(day: date) -> str:
    return day.isoformat()


def ensure_in_month(raw: str | date, month_key: str) -> str:
    """Validate that ``raw`` is a date inside ``month_key`` and return its ISO string."""
    parsed = parse_date(raw)
    if month_key_of(parsed) != month_key:
        raise InvalidDateError(f"Date {parsed.isoformat()} is outside month {month_key}")
    return parsed.isoformat()


def remap_to_month(raw: str | date, target_month_key: str) -> str:
    """Move a date onto the same day-of-month in another month.

    Days that do not exist in the target month are clamped to its last day.
    """
    parsed = parse_date(raw)
    year, month = parse_month_key(target_month_key)
    day = min(parsed.day, days_in_month(target_month_key))
    return date(year, month, day).isoformat()
