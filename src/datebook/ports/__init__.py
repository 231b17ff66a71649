"""Ports - interfaces/protocols for external dependencies."""

from .appointment_store import AppointmentStore

__all__ = [
    "AppointmentStore",
]
