"""
UTC calendar-day helpers.

Every date in the system is a UTC calendar day. Time-of-day never enters
aggregation: datetimes are converted to UTC and truncated before use.
"""

import re
from collections.abc import Iterator
from datetime import UTC, date, datetime, timedelta

from dateutil.relativedelta import relativedelta

from loadcal.errors import ValidationError

DATE_FORMAT = "%Y-%m-%d"
_DATE_SHAPE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")

# Heatmap window: months back / forward from today
WINDOW_MONTHS_BACK = 1
WINDOW_MONTHS_AHEAD = 6


def today_utc() -> date:
    """Current calendar date in UTC."""
    return datetime.now(UTC).date()


def parse_date(value: str) -> date:
    """Parse a strict, zero-padded YYYY-MM-DD string. Surrounding whitespace is rejected."""
    if not isinstance(value, str):
        raise ValidationError(f"invalid date: {value!r}")
    if not _DATE_SHAPE.fullmatch(value):
        raise ValidationError(f"invalid date format (expected YYYY-MM-DD): {value!r}")
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError:
        raise ValidationError(f"invalid date format (expected YYYY-MM-DD): {value!r}") from None


def to_utc_date(value: date | datetime | str) -> date:
    """Normalise a date, datetime, or ISO string to a UTC calendar day."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        # SQLite hands dates back as text; tolerate a trailing time part
        return parse_date(value[:10])
    raise ValidationError(f"invalid date: {value!r}")


def format_date(day: date) -> str:
    return day.strftime(DATE_FORMAT)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day in [start, end], inclusive."""
    day = start
    step = timedelta(days=1)
    while day <= end:
        yield day
        day += step


def day_count(start: date, end: date) -> int:
    """Number of days in the inclusive range (0 when end < start)."""
    return max(0, (end - start).days + 1)


def add_months(day: date, months: int) -> date:
    """Calendar-month arithmetic, clamped to the end of short months."""
    return day + relativedelta(months=months)


def heatmap_window(today: date | None = None) -> tuple[date, date]:
    """
    The fixed heatmap window around today.

    Returns:
        (today - 1 month, today + 6 months), both inclusive.
    """
    today = today or today_utc()
    return add_months(today, -WINDOW_MONTHS_BACK), add_months(today, WINDOW_MONTHS_AHEAD)
