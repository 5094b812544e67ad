"""Time helpers shared by the test suite."""

from datetime import datetime, timedelta, timezone

# Far enough ahead that "upcoming" queries always include it
BASE_DAY = datetime(2030, 1, 15, tzinfo=timezone.utc)


def at(hour: int, minute: int = 0, day_offset: int = 0) -> datetime:
    """Aware UTC datetime on BASE_DAY (shifted by ``day_offset`` days)."""
    return BASE_DAY + timedelta(days=day_offset, hours=hour, minutes=minute)


def iso(hour: int, minute: int = 0, day_offset: int = 0) -> str:
    return at(hour, minute, day_offset).isoformat().replace("+00:00", "Z")
