"""Adapters - I/O implementations of ports."""

from .xml_store import XmlAppointmentStore

__all__ = [
    "XmlAppointmentStore",
]
