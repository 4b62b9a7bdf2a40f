"""Exception types for rejected schedule operations.

Only rejected operations raise. Empty configurations and forced overflow are
valid outcomes and are reported through warnings instead.

Error codes:
- INVALID_DATE: malformed date string or date outside the target month
- INVALID_MONTH_KEY: malformed month-key or an unusable month pair
- INVALID_SCHEDULE_VALUE: value rejected by a direct schedule edit
- UNKNOWN_SUBJECT: subject id not known to a draft
"""


class ScheduleError(RuntimeError):
    """Base error for rejected operations.

    Attributes:
        code: Stable error code (e.g. "INVALID_DATE")
        details: Human-readable detail strings
    """

    code = "SCHEDULE_ERROR"

    def __init__(self, details: list[str] | str, code: str | None = None):
        if code is not None:
            self.code = code
        self.details = [details] if isinstance(details, str) else list(details)
        super().__init__(f"{self.code}: {self.details}")


class InvalidDateError(ScheduleError):
    code = "INVALID_DATE"


class InvalidMonthKeyError(ScheduleError):
    code = "INVALID_MONTH_KEY"


class ScheduleValueError(ScheduleError):
    code = "INVALID_SCHEDULE_VALUE"


class UnknownSubjectError(ScheduleError):
    code = "UNKNOWN_SUBJECT"
