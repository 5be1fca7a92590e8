"""Tests for the widget companion reading the shared store."""

import pytest

from notestoself.core import NotesToSelf
from notestoself.storage.local import SharedDefaults
from notestoself.storage.remote import InMemoryRemoteStore
from notestoself.types import Note, Person
from notestoself.widget import PLACEHOLDER_TEXT, WidgetReader


@pytest.fixture
def reader(kv):
    return WidgetReader(kv)


class TestCurrentNote:
    def test_placeholder_when_empty(self, reader):
        entry = reader.current_note()
        assert entry.text == PLACEHOLDER_TEXT == "No notes"
        assert entry.is_placeholder
        assert entry.position == "0/0"

    def test_shows_note_at_cursor(self, app, reader, t0):
        app.notes.add(Note(text="first", date=t0))
        app.notes.add(Note(text="second", date=t0))
        app.notes.set_current_index(1)
        entry = reader.current_note()
        assert entry.text == "first"
        assert entry.position == "2/2"
        assert not entry.is_placeholder

    def test_out_of_range_cursor_shows_placeholder(self, kv, reader, app, t0):
        app.notes.add(Note(text="only", date=t0))
        kv.write_int("currentIndex", 5)
        assert reader.current_note().is_placeholder

    def test_reads_across_processes(self, t0, tmp_path):
        """A separate SharedDefaults on the same file sees app writes."""
        shared = SharedDefaults("test.widget", base_dir=tmp_path / "shared")
        other = SharedDefaults("test.widget", base_dir=tmp_path / "shared")
        writer = NotesToSelf(kv=shared, remote=InMemoryRemoteStore(available=False), app_version="x")
        writer.notes.add(Note(text="from app", date=t0))
        assert WidgetReader(other).current_note().text == "from app"


class TestAdvance:
    def test_wraps_around(self, app, reader, t0):
        for text in ("a", "b", "c"):
            app.notes.add(Note(text=text, date=t0))
        seen = [reader.advance().text for _ in range(3)]
        assert seen == ["b", "a", "c"]
        assert app.notes.current_index == 0

    def test_noop_when_empty(self, kv, reader):
        generation = kv.reload_generation()
        entry = reader.advance()
        assert entry.is_placeholder
        assert kv.read_int("currentIndex") == 0
        assert kv.reload_generation() == generation


class TestReload:
    def test_needs_reload_after_app_write(self, app, reader, t0):
        reader.current_note()
        assert not reader.needs_reload()
        app.notes.add(Note(text="new", date=t0))
        assert reader.needs_reload()
        reader.current_note()
        assert not reader.needs_reload()

    def test_people_writes_do_not_signal(self, app, reader, t0):
        reader.current_note()
        app.people.add(Person(text="Sam", date=t0))
        assert not reader.needs_reload()
