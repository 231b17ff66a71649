"""Appointment management layer between the shell and storage.

The manager owns the in-memory collection. Every change stays in memory
until save() is called.
"""

import logging
from datetime import date, datetime, timedelta
from pathlib import Path

from .adapters.xml_store import XmlAppointmentStore
from .config import Config
from .core.appointments import (
    Appointment,
    RecurrenceKind,
    expand_series,
    is_same_or_later_in_series,
    new_series_id,
    overlaps_window,
    starts_on,
)
from .core.dates import start_of_day
from .ports.appointment_store import AppointmentStore

logger = logging.getLogger(__name__)


class InvalidPositionError(IndexError):
    """A position does not refer to an existing appointment."""

    def __init__(self, index: int, size: int):
        self.index = index
        self.size = size
        super().__init__(f"No appointment at position {index} (have {size})")


class AppointmentManager:
    """
    Owns the appointment collection and enforces its rules.

    The collection is filled from the store on construction and written back
    only on save().
    """

    def __init__(self, store: AppointmentStore):
        self.store = store
        self._appointments: list[Appointment] = []
        self.load()

    def __len__(self) -> int:
        return len(self._appointments)

    @property
    def appointments(self) -> list[Appointment]:
        """A copy of the collection, in insertion order."""
        return list(self._appointments)

    def get(self, index: int) -> Appointment:
        """Appointment at a position. Raises InvalidPositionError."""
        if not 0 <= index < len(self._appointments):
            raise InvalidPositionError(index, len(self._appointments))
        return self._appointments[index]

    # ============== Creation ==============

    def create_single(self, title: str, start: datetime, end: datetime) -> Appointment:
        """Create one appointment with a fresh id."""
        appointment = Appointment(id=new_series_id(), title=title, start=start, end=end)
        self._appointments.append(appointment)
        logger.debug(f"Created appointment {appointment.id}: {title}")
        return appointment

    def create_recurring(
        self,
        title: str,
        start: datetime,
        end: datetime,
        kind: RecurrenceKind,
        count: int,
    ) -> list[Appointment]:
        """
        Create count occurrences sharing one id.

        Raises ValueError for an unknown kind or a count below 1, in which
        case nothing is added.
        """
        series = expand_series(new_series_id(), title, start, end, kind, count)
        self._appointments.extend(series)
        logger.debug(f"Created {kind.value} series {series[0].id} with {count} occurrences: {title}")
        return list(series)

    # ============== Queries ==============

    def occurrences_of_series(self, index: int) -> list[Appointment]:
        """The appointment at index plus every later occurrence of its series."""
        anchor = self.get(index)
        return [a for a in self._appointments if is_same_or_later_in_series(a, anchor)]

    def ongoing(self, range_in_days: int, now: datetime | None = None) -> list[Appointment]:
        """Appointments in the window from today's midnight to range_in_days later."""
        now = now or datetime.now()
        window_start = start_of_day(now.date())
        window_end = window_start + timedelta(days=range_in_days)
        return [a for a in self._appointments if overlaps_window(a, window_start, window_end)]

    def has_appointments_on(self, day: date) -> bool:
        """Check if any appointment starts on a calendar day."""
        return any(starts_on(a, day) for a in self._appointments)

    # ============== Deletion ==============

    def delete_at(self, index: int) -> Appointment:
        """Remove the appointment at a position."""
        appointment = self.get(index)
        del self._appointments[index]
        logger.debug(f"Deleted appointment {appointment.id} at position {index}")
        return appointment

    def delete_series_from(self, index: int) -> int:
        """Remove the appointment at index and every later occurrence of its series."""
        anchor = self.get(index)
        return self._remove_where(lambda a: is_same_or_later_in_series(a, anchor))

    def delete_on_date(self, day: date) -> int:
        """Remove every appointment starting on a calendar day."""
        return self._remove_where(lambda a: starts_on(a, day))

    def delete_all(self) -> None:
        """Remove every appointment."""
        removed = len(self._appointments)
        self._appointments.clear()
        logger.debug(f"Deleted all {removed} appointments")

    def _remove_where(self, predicate) -> int:
        kept = [a for a in self._appointments if not predicate(a)]
        removed = len(self._appointments) - len(kept)
        self._appointments[:] = kept
        logger.debug(f"Deleted {removed} appointments")
        return removed

    # ============== Persistence ==============

    def save(self) -> bool:
        """Persist the whole collection. Never raises."""
        try:
            return self.store.save(list(self._appointments))
        except Exception as e:
            logger.error(f"Appointment store failed during save: {e}")
            return False

    def load(self) -> None:
        """Replace the collection with whatever the store holds."""
        try:
            self._appointments = list(self.store.load())
        except Exception as e:
            logger.error(f"Appointment store failed during load: {e}")
            self._appointments = []


def get_store(config: Config) -> XmlAppointmentStore:
    """Resolve the appointment file from config."""
    return XmlAppointmentStore(Path(config.data_file).expanduser())


def get_manager(config: Config) -> AppointmentManager:
    """Build a manager loaded from the configured store."""
    return AppointmentManager(get_store(config))
