"""Tests for the XML appointment store."""

from datetime import datetime
from unittest.mock import patch

import pytest

from datebook.adapters.xml_store import XmlAppointmentStore
from datebook.core.appointments import Appointment


@pytest.fixture
def store(tmp_path):
    return XmlAppointmentStore(tmp_path / "appointments.xml")


@pytest.fixture
def appointments():
    return [
        Appointment("1-a", "Standup", datetime(2024, 1, 2, 9), datetime(2024, 1, 2, 9, 30)),
        Appointment("2-b", "Gym", datetime(2024, 1, 1, 18), datetime(2024, 1, 1, 19)),
        Appointment("2-b", "Gym", datetime(2024, 1, 8, 18), datetime(2024, 1, 8, 19)),
        Appointment("3-c", "Holiday", datetime(2024, 1, 5), datetime(2024, 1, 5, 23, 59, 59, 999000)),
    ]


def _write(store, content: str) -> None:
    store.path.write_text(content, encoding="utf-8")


class TestSave:
    def test_roundtrip(self, store, appointments):
        assert store.save(appointments) is True
        assert store.load() == appointments

    def test_roundtrip_preserves_special_characters(self, store):
        tricky = [Appointment("x", 'Café <&> "quoted"', datetime(2024, 1, 2), datetime(2024, 1, 2, 1))]
        assert store.save(tricky) is True
        assert store.load() == tricky

    def test_roundtrip_empty_title(self, store):
        empty = [Appointment("x", "", datetime(2024, 1, 2), datetime(2024, 1, 2, 1))]
        assert store.save(empty) is True
        assert store.load() == empty

    def test_file_layout(self, store):
        store.save([Appointment("1-a", "Standup", datetime(2024, 1, 1), datetime(2024, 1, 1, 0, 30))])

        content = store.path.read_text(encoding="utf-8")
        assert content.startswith('<?xml version="1.0" encoding="UTF-8"?>\n<appointments>')
        assert '<appointment id="1-a">' in content
        assert "<title>Standup</title>" in content
        assert "<dateStart>638396640000000000</dateStart>" in content
        assert "<dateEnd>638396658000000000</dateEnd>" in content

    def test_overwrites_previous_content(self, store, appointments):
        store.save(appointments)
        store.save(appointments[:1])
        assert store.load() == appointments[:1]

    def test_save_empty(self, store, appointments):
        store.save(appointments)
        assert store.save([]) is True
        assert store.load() == []

    def test_creates_parent_directory(self, tmp_path, appointments):
        store = XmlAppointmentStore(tmp_path / "nested" / "dir" / "appointments.xml")
        assert store.save(appointments) is True
        assert store.path.exists()

    def test_failure_returns_false(self, tmp_path, appointments):
        target = tmp_path / "appointments.xml"
        target.mkdir()
        store = XmlAppointmentStore(target)
        assert store.save(appointments) is False

    def test_failure_leaves_no_temp_files(self, tmp_path, appointments):
        target = tmp_path / "appointments.xml"
        target.mkdir()
        XmlAppointmentStore(target).save(appointments)
        assert list(tmp_path.glob("*.tmp")) == []

    def test_write_error_leaves_no_temp_files(self, store, appointments):
        store.save(appointments)
        # A lone surrogate cannot be encoded as UTF-8, so the write itself fails.
        with patch.object(XmlAppointmentStore, "_serialize", return_value="\ud800"):
            assert store.save(appointments[:1]) is False

        assert list(store.path.parent.glob("*.tmp")) == []
        assert store.load() == appointments

    def test_roundtrip_carriage_return(self, store):
        notes = [Appointment("x", "line one\r\nline two\rend", datetime(2024, 1, 2), datetime(2024, 1, 2, 1))]
        assert store.save(notes) is True
        assert store.load() == notes

    @pytest.mark.parametrize("title", ["\x1b[A", "null\x00byte", "bell\x07", "\ufffe"])
    def test_title_xml_cannot_store_is_rejected(self, store, appointments, title):
        store.save(appointments)
        bad = Appointment("x", title, datetime(2024, 1, 2), datetime(2024, 1, 2, 1))

        assert store.save([*appointments, bad]) is False
        assert store.load() == appointments

    def test_id_xml_cannot_store_is_rejected(self, store):
        bad = Appointment("x\x00y", "Title", datetime(2024, 1, 2), datetime(2024, 1, 2, 1))
        assert store.save([bad]) is False
        assert not store.path.exists()


class TestLoad:
    def test_missing_file(self, store):
        assert store.load() == []

    def test_original_program_file(self, store):
        _write(
            store,
            '<?xml version="1.0" encoding="utf-8"?>\r\n'
            "<appointments>\r\n"
            '  <appointment id="638396640000000000-0f8fad5b-d9cb-469f-a165-70867728950e">\r\n'
            "    <title>Zahnarzt</title>\r\n"
            "    <dateStart>638397828000000000</dateStart>\r\n"
            "    <dateEnd>638397846000000000</dateEnd>\r\n"
            "  </appointment>\r\n"
            "</appointments>",
        )

        loaded = store.load()

        assert len(loaded) == 1
        assert loaded[0].id == "638396640000000000-0f8fad5b-d9cb-469f-a165-70867728950e"
        assert loaded[0].title == "Zahnarzt"
        assert loaded[0].start == datetime(2024, 1, 2, 9)
        assert loaded[0].end == datetime(2024, 1, 2, 9, 30)

    def test_empty_root(self, store):
        _write(store, '<?xml version="1.0" encoding="UTF-8"?>\n<appointments />')
        assert store.load() == []

    def test_malformed_xml(self, store):
        _write(store, "<appointments><appointment id=")
        assert store.load() == []

    def test_empty_file(self, store):
        _write(store, "")
        assert store.load() == []

    @pytest.mark.parametrize(
        "bad_record",
        [
            "<appointment><title>B</title><dateStart>1</dateStart><dateEnd>2</dateEnd></appointment>",
            '<appointment id="b"><dateStart>1</dateStart><dateEnd>2</dateEnd></appointment>',
            '<appointment id="b"><title>B</title><dateEnd>2</dateEnd></appointment>',
            '<appointment id="b"><title>B</title><dateStart>1</dateStart></appointment>',
            '<appointment id="b"><title>B</title><dateStart>soon</dateStart><dateEnd>2</dateEnd></appointment>',
            '<appointment id="b"><title>B</title><dateStart>-5</dateStart><dateEnd>2</dateEnd></appointment>',
            '<appointment id="b"><title>B</title><dateStart></dateStart><dateEnd>2</dateEnd></appointment>',
        ],
    )
    def test_one_bad_record_discards_everything(self, store, bad_record):
        good = (
            '<appointment id="a"><title>A</title>'
            "<dateStart>638396640000000000</dateStart>"
            "<dateEnd>638396658000000000</dateEnd></appointment>"
        )
        _write(store, f"<appointments>{good}{bad_record}</appointments>")
        assert store.load() == []
