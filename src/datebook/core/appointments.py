"""Pure appointment domain logic - no I/O dependencies."""

import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum

from .dates import add_years, format_datetime, to_ticks


class RecurrenceKind(Enum):
    """How a recurring series advances between occurrences."""

    WEEKLY = "weekly"
    YEARLY = "yearly"


@dataclass
class Appointment:
    """
    A calendar appointment.

    The id is shared by every occurrence of a recurring series and cannot be
    rebound once set. Title and times stay editable.
    """

    id: str
    title: str
    start: datetime
    end: datetime

    def __setattr__(self, name, value):
        if name == "id" and "id" in self.__dict__:
            raise AttributeError("Appointment id is read-only")
        super().__setattr__(name, value)

    def format_line(self, number: int) -> str:
        """Format the appointment as a numbered listing line."""
        return (
            f"Nr. {number} - Title: {self.title}, "
            f"Start: {format_datetime(self.start)}, End: {format_datetime(self.end)}"
        )


def new_series_id(now: datetime | None = None) -> str:
    """Generate an id for one appointment or one recurring series.

    Ticks of the current time plus a random UUID, so two calls in the same
    instant still differ.
    """
    now = now or datetime.now()
    return f"{to_ticks(now)}-{uuid.uuid4()}"


def shift(dt: datetime, kind: RecurrenceKind, n: int) -> datetime:
    """Move a datetime forward by n recurrence periods."""
    if kind is RecurrenceKind.WEEKLY:
        return dt + timedelta(days=7 * n)
    if kind is RecurrenceKind.YEARLY:
        return add_years(dt, n)
    raise ValueError(f"Unknown recurrence kind: {kind!r}")


def expand_series(
    series_id: str,
    title: str,
    start: datetime,
    end: datetime,
    kind: RecurrenceKind,
    count: int,
) -> list[Appointment]:
    """
    Build every occurrence of a recurring series, in ascending time order.

    Each occurrence is one period after the previous one, so a Feb 29
    series moves to Feb 28 and stays there.
    """
    if not isinstance(kind, RecurrenceKind):
        raise ValueError(f"Unknown recurrence kind: {kind!r}")
    if count < 1:
        raise ValueError(f"Recurrence count must be at least 1, got {count}")

    series = []
    for _ in range(count):
        series.append(Appointment(id=series_id, title=title, start=start, end=end))
        start = shift(start, kind, 1)
        end = shift(end, kind, 1)
    return series


def is_same_or_later_in_series(candidate: Appointment, anchor: Appointment) -> bool:
    """True if candidate belongs to anchor's series and does not start earlier."""
    return candidate.id == anchor.id and candidate.start >= anchor.start


def overlaps_window(appointment: Appointment, window_start: datetime, window_end: datetime) -> bool:
    """
    Check whether an appointment falls into a [window_start, window_end) window.

    An appointment ending exactly at window_end is excluded unless it started
    inside the window or spans past both ends.
    """
    s, e = appointment.start, appointment.end
    ws, we = window_start, window_end
    return (
        (s >= ws and e < we)
        or (s >= ws and s < we)
        or (e >= ws and e < we)
        or (s <= ws and e > we)
    )


def starts_on(appointment: Appointment, day: date) -> bool:
    """True if the appointment starts on the given calendar day."""
    if isinstance(day, datetime):
        day = day.date()
    return appointment.start.date() == day
