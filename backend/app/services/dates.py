"""Calendar helpers for the daily sweep.

Stored instants are UTC (naive values from the driver are read as UTC) and
are compared on the server's local calendar day.
"""

from datetime import date, datetime, time, timezone
from typing import Optional, Union

DateLike = Union[date, datetime, str]


def local_date(value: datetime) -> date:
    """Calendar day of a stored instant in the server's local time zone."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone().date()


def as_date(value: Optional[DateLike]) -> Optional[date]:
    """Coerce a stored date/datetime/ISO string to a local calendar date.

    Returns None for empty or unparseable values.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return local_date(value)
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            if len(text) == 10:
                return date.fromisoformat(text)
            return local_date(datetime.fromisoformat(text))
        except ValueError:
            return None
    return None


def local_midnight_utc(day: date) -> datetime:
    """Start of `day` in local time, expressed as an aware UTC datetime."""
    return datetime.combine(day, time.min).astimezone(timezone.utc)


def same_month_day(value: date, today: date) -> bool:
    return value.month == today.month and value.day == today.day


def years_elapsed(start: date, today: date) -> int:
    """Whole years between two dates, calendar-aware and never negative."""
    years = today.year - start.year
    if (today.month, today.day) < (start.month, start.day):
        years -= 1
    return max(0, years)


def calculate_age(date_of_birth: date, today: date) -> int:
    return years_elapsed(date_of_birth, today)
