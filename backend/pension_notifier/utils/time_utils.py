"""Date and time helpers shared by the scheduler and the API."""
import calendar
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo


def to_utc_naive(value: datetime) -> datetime:
    """Normalize a datetime to naive UTC, the format stored in the database.

    Naive values are assumed to already be UTC.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def local_today(tz_name: str) -> date:
    """Current calendar date in the given IANA zone."""
    return datetime.now(ZoneInfo(tz_name)).date()


def parse_hhmm(value: str) -> int:
    """Convert an "HH:MM" string to minutes since midnight.

    Raises:
        ValueError: If the value is not a valid time of day
    """
    hours, minutes = value.strip().split(":")
    hour, minute = int(hours), int(minutes)
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"Time of day out of range: {value!r}")
    return hour * 60 + minute


def add_months(value: date, months: int) -> date:
    """Add calendar months, clamping the day to the target month's length."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)
