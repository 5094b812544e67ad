# slotkeeper/services/time_window.py
"""
Time window normalization and validation.

Every create, update and availability check goes through
``validate_time_window`` before touching storage. Windows are half-open:
``[start, end)``, so back-to-back bookings do not overlap.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Any, Optional

from ..core.exceptions import InvalidTimeWindowException
from ..models.types import ensure_utc

INVALID_DATES_MESSAGE = "start_time and end_time must be valid dates"
INVERTED_WINDOW_MESSAGE = "end_time must be after start_time"


@dataclass(frozen=True)
class TimeWindow:
    """A validated ``[start, end)`` window in UTC."""

    start: datetime
    end: datetime

    def overlaps(self, other: "TimeWindow") -> bool:
        return self.start < other.end and self.end > other.start

    def to_dict(self) -> dict:
        return {"start_time": self.start.isoformat(), "end_time": self.end.isoformat()}


def to_utc_datetime(value: Any) -> Optional[datetime]:
    """
    Coerce a date-like value to an aware UTC datetime.

    Accepts ``datetime`` (naive is taken as UTC), ``date`` (midnight UTC) and
    ISO-8601 strings in extended or basic format (``Z`` offsets included). Returns None when the
    value cannot be interpreted.
    """
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, str):
        candidate = value.strip()
        if not candidate:
            return None
        if candidate.endswith("z"):
            candidate = candidate[:-1] + "Z"
        try:
            return ensure_utc(datetime.fromisoformat(candidate))
        except ValueError:
            return None
    return None


def validate_time_window(start: Any, end: Any) -> TimeWindow:
    """
    Normalize and sanity-check a proposed window.

    Raises:
        InvalidTimeWindowException: a bound is not a valid instant, or
            ``end <= start``
    """
    start_dt = to_utc_datetime(start)
    end_dt = to_utc_datetime(end)

    if start_dt is None or end_dt is None:
        invalid_fields = [
            field for field, parsed in (("start_time", start_dt), ("end_time", end_dt)) if parsed is None
        ]
        raise InvalidTimeWindowException(
            INVALID_DATES_MESSAGE, details={"invalid_fields": invalid_fields}
        )

    if end_dt <= start_dt:
        raise InvalidTimeWindowException(
            INVERTED_WINDOW_MESSAGE,
            details={"start_time": start_dt.isoformat(), "end_time": end_dt.isoformat()},
        )

    return TimeWindow(start=start_dt, end=end_dt)
