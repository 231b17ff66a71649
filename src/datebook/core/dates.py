"""Date and tick helpers - pure, no I/O."""

import re
from datetime import date, datetime, time, timedelta

from dateutil.relativedelta import relativedelta

# 100-nanosecond ticks are counted from 0001-01-01 00:00:00
TICKS_EPOCH = datetime(1, 1, 1)
TICKS_PER_MICROSECOND = 10

DATE_FORMAT = "dd.MM.yyyy"
DATETIME_FORMAT = "dd.MM.yyyy HH:mm"

_DATE_PATTERN = re.compile(r"^(\d{2})\.(\d{2})\.(\d{4})$")
_DATETIME_PATTERN = re.compile(r"^(\d{2})\.(\d{2})\.(\d{4}) (\d{2}):(\d{2})$")


def to_ticks(dt: datetime) -> int:
    """Convert a naive datetime to 100ns ticks."""
    return (dt - TICKS_EPOCH) // timedelta(microseconds=1) * TICKS_PER_MICROSECOND


def from_ticks(ticks: int) -> datetime:
    """
    Convert 100ns ticks back to a naive datetime.

    Sub-microsecond remainders are truncated. Raises OverflowError for
    ticks outside the datetime range.
    """
    if ticks < 0:
        raise OverflowError(f"Negative tick count: {ticks}")
    return TICKS_EPOCH + timedelta(microseconds=ticks // TICKS_PER_MICROSECOND)


def start_of_day(d: date) -> datetime:
    """Local midnight of a date."""
    return datetime.combine(d, time(0, 0))


def end_of_day(d: date) -> datetime:
    """Last millisecond of a date, used as the end of all-day appointments."""
    return datetime.combine(d, time(23, 59, 59, 999000))


def add_years(dt: datetime, years: int) -> datetime:
    """Add calendar years; Feb 29 lands on Feb 28 in non-leap years."""
    return dt + relativedelta(years=years)


def parse_date(text: str, with_time: bool = False) -> datetime | None:
    """
    Parse user input in the shell's date formats.

    Accepts exactly "dd.MM.yyyy", or "dd.MM.yyyy HH:mm" when with_time is set.
    Returns None for anything else, including dates that don't exist.
    """
    pattern = _DATETIME_PATTERN if with_time else _DATE_PATTERN
    match = pattern.match(text.strip())
    if not match:
        return None

    day, month, year, *clock = (int(part) for part in match.groups())
    hour, minute = clock if clock else (0, 0)
    try:
        return datetime(year, month, day, hour, minute)
    except ValueError:
        return None


def format_datetime(dt: datetime) -> str:
    """Format a datetime the way the shell displays it."""
    return dt.strftime("%d.%m.%Y %H:%M:%S")
