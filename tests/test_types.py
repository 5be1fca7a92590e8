"""Tests for notestoself.types and notestoself.distortions."""

from datetime import datetime, timedelta, timezone

import pytest

from notestoself.distortions import ALL_DISTORTIONS, distortions_for, get_distortion
from notestoself.types import (
    RECORD_TYPES,
    CBTEntry,
    Note,
    Person,
    Reminder,
    TodoItem,
    format_datetime,
    new_id,
    normalize_id,
    parse_datetime,
)


class TestIds:
    """Record identity helpers."""

    def test_new_ids_are_unique(self):
        """Generated ids never repeat."""
        ids = {new_id() for _ in range(200)}
        assert len(ids) == 200

    def test_normalize_lowercases(self):
        """Ids are compared in canonical lowercase form."""
        raw = "ABCDEF00-1111-2222-3333-444455556666"
        assert normalize_id(raw) == raw.lower()

    def test_normalize_rejects_garbage(self):
        with pytest.raises(ValueError):
            normalize_id("not-a-uuid")

    def test_normalize_rejects_non_string(self):
        with pytest.raises(ValueError):
            normalize_id(42)

    def test_default_record_id_is_uuid(self):
        note = Note(text="hello")
        assert normalize_id(note.id) == note.id


class TestDatetimes:
    """ISO-8601 parsing and formatting."""

    def test_format_uses_z_suffix(self):
        dt = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        assert format_datetime(dt) == "2025-01-02T03:04:05Z"

    def test_format_keeps_microseconds(self):
        dt = datetime(2025, 1, 2, 3, 4, 5, 123456, tzinfo=timezone.utc)
        assert format_datetime(dt) == "2025-01-02T03:04:05.123456Z"

    def test_parse_z_suffix(self):
        assert parse_datetime("2025-01-02T03:04:05Z") == datetime(
            2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc
        )

    def test_parse_offset_converts_to_utc(self):
        parsed = parse_datetime("2025-01-02T05:04:05+02:00")
        assert parsed == datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        assert parsed.tzinfo == timezone.utc

    def test_parse_naive_assumed_utc(self):
        assert parse_datetime("2025-01-02T03:04:05").tzinfo == timezone.utc

    def test_parse_empty_is_none(self):
        assert parse_datetime("") is None
        assert parse_datetime(None) is None

    def test_parse_invalid_raises(self):
        with pytest.raises(ValueError):
            parse_datetime("yesterday")

    def test_format_parse_agree(self):
        dt = datetime(2024, 6, 30, 23, 59, 59, 999, tzinfo=timezone.utc)
        assert parse_datetime(format_datetime(dt)) == dt


class TestRecords:
    """Record dataclasses."""

    def test_last_modified_defaults_to_date(self, t0):
        note = Note(text="x", date=t0)
        assert note.last_modified == t0

    def test_naive_datetimes_taken_as_utc(self):
        note = Note(text="x", date=datetime(2025, 11, 1, 9, 0))
        assert note.date == datetime(2025, 11, 1, 9, 0, tzinfo=timezone.utc)
        assert note.date.tzinfo is timezone.utc
        assert note.last_modified == note.date

    def test_aware_datetimes_converted_to_utc(self, t0):
        plus_two = timezone(timedelta(hours=2))
        note = Note(
            text="x",
            date=datetime(2025, 11, 1, 11, 0, tzinfo=plus_two),
            last_modified=datetime(2025, 11, 1, 12, 0, tzinfo=plus_two),
        )
        assert note.date == t0
        assert note.date.tzinfo is timezone.utc
        assert note.last_modified == t0 + timedelta(hours=1)
        assert note.last_modified.tzinfo is timezone.utc

    def test_touch_returns_refreshed_copy(self, t0):
        note = Note(text="x", date=t0)
        later = t0 + timedelta(hours=1)
        touched = note.touch(later)
        assert touched.last_modified == later
        assert touched.id == note.id
        assert touched.date == t0
        assert note.last_modified == t0

    def test_record_type_names(self):
        """Remote record type names match the remote schema."""
        assert set(RECORD_TYPES) == {"Note", "ReminderEntry", "PersonEntry", "CBTEntry", "TodoItem"}
        assert RECORD_TYPES["ReminderEntry"] is Reminder
        assert RECORD_TYPES["PersonEntry"] is Person

    def test_long_text_summary_truncated(self):
        note = Note(text="a" * 80)
        assert note.summary == "a" * 50 + "..."

    def test_todo_defaults_open(self):
        todo = TodoItem(text="ship it")
        assert todo.is_completed is False
        assert todo.summary.startswith("○")


class TestDistortions:
    """Built-in cognitive distortion catalogue."""

    def test_ten_categories_with_unique_ids(self):
        assert len(ALL_DISTORTIONS) == 10
        assert len({d.id for d in ALL_DISTORTIONS}) == 10

    def test_ids_are_fixed(self):
        assert ALL_DISTORTIONS[0].id == "00000000-0000-0000-0000-000000000001"

    def test_lookup_is_case_insensitive(self):
        d = ALL_DISTORTIONS[3]
        assert get_distortion(d.id.upper()) is d

    def test_unknown_id_is_none(self):
        assert get_distortion("11111111-1111-1111-1111-111111111111") is None
        assert get_distortion("garbage") is None

    def test_distortions_for_skips_unknown(self):
        """Entries referencing unknown ids resolve only the known ones."""
        known = ALL_DISTORTIONS[1]
        entry = CBTEntry(
            situation="s",
            distortion_ids=[known.id, "11111111-1111-1111-1111-111111111111"],
        )
        assert distortions_for(entry) == [known]
