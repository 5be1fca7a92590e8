"""Concrete per-entity stores."""

from dataclasses import replace
from datetime import date as date_type
from datetime import timezone, tzinfo
from typing import List, Optional

from notestoself.distortions import CognitiveDistortion, distortions_for
from notestoself.storage.data_store import DataStore
from notestoself.types import CBTEntry, Note, Person, Reminder, TodoItem


class NotesStore(DataStore[Note]):
    record_cls = Note
    key = "notes"
    index_key = "currentIndex"
    widget_visible = True


class RemindersStore(DataStore[Reminder]):
    record_cls = Reminder
    key = "reminders"
    index_key = "currentReminderIndex"
    widget_visible = True


class PeopleStore(DataStore[Person]):
    record_cls = Person
    key = "people"


class CBTStore(DataStore[CBTEntry]):
    record_cls = CBTEntry
    key = "cbtEntries"

    def distortions_for(self, entry: CBTEntry) -> List[CognitiveDistortion]:
        return distortions_for(entry)

    def entries_for_day(self, day: date_type, tz: Optional[tzinfo] = None) -> List[CBTEntry]:
        """Entries created on ``day`` in ``tz`` (UTC by default)."""
        tz = tz or timezone.utc
        return [e for e in self.records if e.date.astimezone(tz).date() == day]

    def search(self, query: str) -> List[CBTEntry]:
        needle = query.casefold()
        if not needle:
            return []
        return [
            e
            for e in self.records
            if any(needle in s.casefold() for s in (e.situation, e.challenge, e.alternative, e.notes))
        ]


class TodoStore(DataStore[TodoItem]):
    record_cls = TodoItem
    key = "developerTodos"

    def toggle_completion(self, todo: TodoItem) -> Optional[TodoItem]:
        """Flip ``is_completed`` on the stored copy of ``todo``."""
        current = self.get(todo.id)
        if current is None:
            return None
        return self.update(replace(current, is_completed=not current.is_completed))

    @property
    def open_items(self) -> List[TodoItem]:
        return [t for t in self.records if not t.is_completed]

    @property
    def completed_items(self) -> List[TodoItem]:
        return [t for t in self.records if t.is_completed]

