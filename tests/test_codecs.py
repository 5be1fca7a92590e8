"""Tests for notestoself.codecs: JSON object form and wire form."""

import json

import pytest

from notestoself.codecs import (
    decode_records,
    encode_records,
    record_from_dict,
    record_from_wire,
    record_to_dict,
    record_to_wire,
)
from notestoself.protocols import RecordDecodeError
from notestoself.types import CBTEntry, Note, Reminder, TodoItem, format_datetime

DISTORTION = "00000000-0000-0000-0000-000000000002"


@pytest.fixture
def cbt_entry(t0):
    return CBTEntry(
        date=t0,
        situation="Text left on read",
        distortion_ids=[DISTORTION],
        challenge="They may be busy",
        alternative="I can check in later",
        notes="",
    )


class TestJsonObjectForm:
    """record_to_dict / record_from_dict."""

    def test_camel_case_keys(self, t0):
        data = record_to_dict(TodoItem(text="t", date=t0, is_completed=True))
        assert set(data) == {"id", "date", "lastModified", "text", "isCompleted"}
        assert data["isCompleted"] is True
        assert data["date"] == format_datetime(t0)

    def test_cbt_fields_preserved(self, cbt_entry):
        decoded = record_from_dict(CBTEntry, record_to_dict(cbt_entry))
        assert decoded == cbt_entry

    def test_missing_last_modified_defaults_to_date(self, t0):
        """Data written before lastModified existed still decodes."""
        data = {"id": "3F2504E0-4F89-11D3-9A0C-0305E82C3301", "text": "old", "date": "2024-01-01T00:00:00Z"}
        note = record_from_dict(Note, data)
        assert note.last_modified == note.date
        assert note.id == "3f2504e0-4f89-11d3-9a0c-0305e82c3301"

    def test_missing_is_completed_defaults_false(self):
        data = {"id": "3f2504e0-4f89-11d3-9a0c-0305e82c3301", "text": "t", "date": "2024-01-01T00:00:00Z"}
        assert record_from_dict(TodoItem, data).is_completed is False

    def test_missing_distortion_ids_defaults_empty(self):
        data = {"id": "3f2504e0-4f89-11d3-9a0c-0305e82c3301", "date": "2024-01-01T00:00:00Z"}
        entry = record_from_dict(CBTEntry, data)
        assert entry.distortion_ids == []
        assert entry.situation == ""

    def test_missing_id_raises(self):
        with pytest.raises(RecordDecodeError):
            record_from_dict(Note, {"text": "x", "date": "2024-01-01T00:00:00Z"})

    def test_missing_date_raises(self):
        with pytest.raises(RecordDecodeError):
            record_from_dict(Note, {"id": "3f2504e0-4f89-11d3-9a0c-0305e82c3301", "text": "x"})

    def test_wrong_type_raises(self):
        data = {"id": "3f2504e0-4f89-11d3-9a0c-0305e82c3301", "text": 5, "date": "2024-01-01T00:00:00Z"}
        with pytest.raises(RecordDecodeError):
            record_from_dict(Note, data)

    def test_bad_date_raises(self):
        data = {"id": "3f2504e0-4f89-11d3-9a0c-0305e82c3301", "text": "x", "date": "someday"}
        with pytest.raises(RecordDecodeError):
            record_from_dict(Note, data)

    def test_non_object_raises(self):
        with pytest.raises(RecordDecodeError):
            record_from_dict(Note, ["not", "an", "object"])


class TestCollections:
    """encode_records / decode_records."""

    def test_collection_is_json_array(self, t0):
        blob = encode_records([Note(text="a", date=t0), Note(text="b", date=t0)])
        payload = json.loads(blob)
        assert [n["text"] for n in payload] == ["a", "b"]

    def test_decode_preserves_order_and_fields(self, t0):
        notes = [Note(text=str(i), date=t0) for i in range(5)]
        assert decode_records(Note, encode_records(notes)) == notes

    def test_decode_garbage_raises(self):
        with pytest.raises(RecordDecodeError):
            decode_records(Note, b"{not json")

    def test_decode_object_raises(self):
        with pytest.raises(RecordDecodeError):
            decode_records(Note, b'{"notes": []}')


class TestWireForm:
    """record_to_wire / record_from_wire."""

    def test_wire_shape(self, t0):
        reminder = Reminder(text="call mum", date=t0)
        wire = record_to_wire(reminder)
        assert wire["recordType"] == "ReminderEntry"
        assert wire["recordName"] == reminder.id
        assert wire["fields"]["text"] == "call mum"

    def test_todo_completion_travels_as_int(self, t0):
        wire = record_to_wire(TodoItem(text="t", date=t0, is_completed=True))
        assert wire["fields"]["isCompleted"] == 1
        assert record_from_wire(wire).is_completed is True

    def test_cbt_round_trip(self, cbt_entry):
        assert record_from_wire(record_to_wire(cbt_entry)) == cbt_entry

    def test_unparseable_distortion_ids_dropped(self, cbt_entry):
        wire = record_to_wire(cbt_entry)
        wire["fields"]["distortionIds"].append("not-a-uuid")
        assert record_from_wire(wire).distortion_ids == [DISTORTION]

    def test_todo_without_last_modified(self, t0):
        """Todo records may predate lastModified on the remote."""
        wire = record_to_wire(TodoItem(text="t", date=t0))
        del wire["fields"]["lastModified"]
        todo = record_from_wire(wire)
        assert todo.last_modified == t0

    def test_note_missing_field_is_skipped(self, t0):
        wire = record_to_wire(Note(text="x", date=t0))
        del wire["fields"]["text"]
        assert record_from_wire(wire) is None

    def test_unknown_record_type_is_skipped(self, t0):
        wire = record_to_wire(Note(text="x", date=t0))
        wire["recordType"] = "Mystery"
        assert record_from_wire(wire) is None

    def test_non_dict_is_skipped(self):
        assert record_from_wire("garbage") is None
