"""Functional core - pure business logic with no I/O."""

from .appointments import (
    Appointment,
    RecurrenceKind,
    expand_series,
    new_series_id,
    overlaps_window,
    starts_on,
)
from .dates import from_ticks, parse_date, to_ticks

__all__ = [
    # Appointments
    "Appointment",
    "RecurrenceKind",
    "expand_series",
    "new_series_id",
    "overlaps_window",
    "starts_on",
    # Dates
    "from_ticks",
    "parse_date",
    "to_ticks",
]
