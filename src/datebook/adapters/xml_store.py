"""XML file storage adapter."""

import logging
import os
import re
import tempfile
import xml.etree.ElementTree as ET
from pathlib import Path

from datebook.core.appointments import Appointment
from datebook.core.dates import from_ticks, to_ticks

logger = logging.getLogger(__name__)

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'

# Anything outside the XML 1.0 Char production.
NON_XML_CHARS = re.compile("[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")


class XmlAppointmentStore:
    """
    XML file storage.

    Implements AppointmentStore protocol. The whole collection lives in one
    file; every save replaces it.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def save(self, appointments: list[Appointment]) -> bool:
        """Write all appointments, replacing the file. Returns False on failure."""
        try:
            document = self._serialize(appointments)
            self._replace_file(document)
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"Failed to save appointments to {self.path}: {e}")
            return False

        logger.info(f"Saved {len(appointments)} appointments to {self.path}")
        return True

    def load(self) -> list[Appointment]:
        """Load all appointments. Returns [] if the file is missing or unreadable."""
        if not self.path.exists():
            logger.info(f"No appointment file at {self.path}, starting empty")
            return []

        try:
            root = ET.parse(self.path).getroot()
            appointments = [self._parse_record(node) for node in root]
        except (ET.ParseError, OSError, ValueError, TypeError, OverflowError) as e:
            logger.warning(f"Discarding unreadable appointment file {self.path}: {e}")
            return []

        logger.info(f"Loaded {len(appointments)} appointments from {self.path}")
        return appointments

    def _serialize(self, appointments: list[Appointment]) -> str:
        """
        Build the XML document. Raises ValueError for text XML cannot hold.

        Parsers normalize a literal carriage return to a newline, so every
        \\r is written as a character reference instead.
        """
        root = ET.Element("appointments")
        for appointment in appointments:
            if NON_XML_CHARS.search(appointment.id) or NON_XML_CHARS.search(appointment.title):
                raise ValueError(f"Appointment {appointment.id!r} contains characters XML cannot store")
            node = ET.SubElement(root, "appointment", id=appointment.id)
            ET.SubElement(node, "title").text = appointment.title
            ET.SubElement(node, "dateStart").text = str(to_ticks(appointment.start))
            ET.SubElement(node, "dateEnd").text = str(to_ticks(appointment.end))

        ET.indent(root, space="  ")
        body = ET.tostring(root, encoding="unicode").replace("\r", "&#13;")
        return XML_DECLARATION + body + "\n"

    def _replace_file(self, document: str) -> None:
        folder = self.path.parent
        folder.mkdir(parents=True, exist_ok=True)

        tf = tempfile.NamedTemporaryFile(
            "w", delete=False, encoding="utf-8", newline="", dir=folder, suffix=".tmp"
        )
        try:
            with tf:
                tf.write(document)
            os.replace(tf.name, self.path)
        except Exception:
            os.unlink(tf.name)
            raise

    @staticmethod
    def _parse_record(node: ET.Element) -> Appointment:
        """Parse one <appointment> element. Raises ValueError if a field is missing."""
        appointment_id = node.get("id")
        if appointment_id is None:
            raise ValueError(f"<{node.tag}> without id attribute")

        fields = {}
        for name in ("title", "dateStart", "dateEnd"):
            child = node.find(name)
            if child is None:
                raise ValueError(f"Appointment {appointment_id} has no <{name}>")
            fields[name] = child.text or ""

        return Appointment(
            id=appointment_id,
            title=fields["title"],
            start=from_ticks(int(fields["dateStart"])),
            end=from_ticks(int(fields["dateEnd"])),
        )
