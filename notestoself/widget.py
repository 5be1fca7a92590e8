"""Widget companion.

A read-only consumer of the shared local store, run in a separate process
from the app. It reads the notes collection and the cursor directly from
the local store and never touches the remote store or writes a collection.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from notestoself.protocols import KeyValueStore
from notestoself.storage.local import load_collection
from notestoself.storage.stores import NotesStore
from notestoself.types import Note

logger = logging.getLogger(__name__)

PLACEHOLDER_TEXT = "No notes"


@dataclass
class WidgetEntry:
    """What the widget shows."""

    text: str
    index: int
    count: int
    note: Optional[Note] = None

    @property
    def is_placeholder(self) -> bool:
        return self.note is None

    @property
    def position(self) -> str:
        return f"{self.index + 1}/{self.count}" if self.count else "0/0"


class WidgetReader:
    """Reads the current note for the widget from the shared store."""

    def __init__(self, kv: KeyValueStore):
        self.kv = kv
        self._seen_generation = kv.reload_generation()

    def _notes(self) -> List[Note]:
        return load_collection(self.kv, NotesStore.key, Note)

    def current_note(self) -> WidgetEntry:
        """The note at the stored cursor, or the placeholder."""
        notes = self._notes()
        idx = self.kv.read_int(NotesStore.index_key)
        self._seen_generation = self.kv.reload_generation()
        if notes and 0 <= idx < len(notes):
            note = notes[idx]
            return WidgetEntry(text=note.text, index=idx, count=len(notes), note=note)
        return WidgetEntry(text=PLACEHOLDER_TEXT, index=0, count=len(notes))

    def advance(self) -> WidgetEntry:
        """Move the cursor to the next note, wrapping around.

        With no notes this does nothing.
        """
        notes = self._notes()
        if not notes:
            return self.current_note()
        idx = (self.kv.read_int(NotesStore.index_key) + 1) % len(notes)
        self.kv.write_int(NotesStore.index_key, idx)
        self.kv.notify_reload()
        logger.debug(f"Widget cursor advanced to {idx}")
        return self.current_note()

    def needs_reload(self) -> bool:
        """True if the store signalled a reload since the last read."""
        return self.kv.reload_generation() != self._seen_generation
