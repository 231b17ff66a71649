"""Appointment storage interface."""

from typing import Protocol

from datebook.core.appointments import Appointment


class AppointmentStore(Protocol):
    """Interface for persisting the full appointment collection."""

    def save(self, appointments: list[Appointment]) -> bool:
        """Replace stored data with the given appointments. Returns False on failure."""
        ...

    def load(self) -> list[Appointment]:
        """Load all stored appointments. Returns an empty list if none or unreadable."""
        ...
