"""JSON snapshot importer.

Reads the snapshot format written by ``notestoself export``:

{
    "exportDate": "...",
    "appVersion": "...",
    "notes": [...],
    "reminders": [...],
    "people": [...],
    "cbtEntries": [...],
    "todos": [...]
}

Two shapes are accepted:

- a complete envelope (any collection other than ``notes`` present), which
  must carry ``exportDate``
- a notes-only envelope: ``{"notes": [...]}`` or a bare JSON array of notes

Parsing is all-or-nothing. Any malformed record raises
``ImportValidationError`` and nothing is returned for partial use.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Type

from notestoself.codecs import record_from_dict
from notestoself.protocols import ImportValidationError, RecordDecodeError
from notestoself.types import CBTEntry, Note, Person, Record, Reminder, TodoItem, parse_datetime

logger = logging.getLogger(__name__)

# Envelope key -> record class, in display order
SNAPSHOT_COLLECTIONS: Dict[str, Type[Record]] = {
    "notes": Note,
    "reminders": Reminder,
    "people": Person,
    "cbtEntries": CBTEntry,
    "todos": TodoItem,
}

_LABELS = {
    "notes": "notes",
    "reminders": "reminders",
    "people": "people",
    "cbtEntries": "CBT entries",
    "todos": "todos",
}


@dataclass
class Snapshot:
    """A decoded snapshot, validated in full."""

    collections: Dict[str, List[Record]] = field(default_factory=dict)
    export_date: Optional[datetime] = None
    app_version: Optional[str] = None
    complete: bool = False

    def get(self, key: str) -> List[Record]:
        return self.collections.get(key, [])

    @property
    def total(self) -> int:
        return sum(len(v) for v in self.collections.values())

    def summary(self) -> str:
        """Confirmation text: what will be imported, and when it was exported."""
        lines = ["This will merge the following into your existing data:", ""]
        for key in SNAPSHOT_COLLECTIONS:
            if key in self.collections:
                lines.append(f"{len(self.collections[key])} {_LABELS[key]}")
        if self.export_date is not None:
            lines.append("")
            lines.append(f"Exported on: {self.export_date.strftime('%Y-%m-%d %H:%M UTC')}")
        return "\n".join(lines)


def _decode_collection(key: str, items: Any) -> List[Record]:
    cls = SNAPSHOT_COLLECTIONS[key]
    if not isinstance(items, list):
        raise ImportValidationError(f"'{key}' must be a list")
    records = []
    for i, item in enumerate(items):
        try:
            records.append(record_from_dict(cls, item))
        except RecordDecodeError as e:
            raise ImportValidationError(f"Invalid entry {i + 1} in '{key}': {e}") from e
    return records


def parse_snapshot(text: str, *, notes_only: bool = False) -> Snapshot:
    """Decode and validate a snapshot.

    Args:
        text: JSON text (pasted or read from a file).
        notes_only: Require a notes-only envelope.

    Raises:
        ImportValidationError: With a user-facing message on any failure.
    """
    text = (text or "").strip()
    if not text:
        raise ImportValidationError("Nothing to import: the input is empty")

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ImportValidationError(f"Invalid JSON: {e.msg} (line {e.lineno}, column {e.colno})") from e

    if isinstance(data, list):
        return Snapshot(collections={"notes": _decode_collection("notes", data)})

    if not isinstance(data, dict):
        raise ImportValidationError("Snapshot must be a JSON object or a list of notes")

    present = [k for k in SNAPSHOT_COLLECTIONS if k in data]
    if not present:
        raise ImportValidationError("Snapshot contains no known collections")

    complete = any(k != "notes" for k in present)
    if notes_only and complete:
        raise ImportValidationError("Expected a notes-only snapshot, got a complete export")

    export_date = None
    if "exportDate" in data:
        try:
            export_date = parse_datetime(data["exportDate"])
        except ValueError as e:
            raise ImportValidationError(f"Invalid exportDate: {e}") from e
    if complete and export_date is None:
        raise ImportValidationError("Complete snapshot is missing 'exportDate'")

    app_version = data.get("appVersion")
    if app_version is not None and not isinstance(app_version, str):
        app_version = str(app_version)

    collections = {key: _decode_collection(key, data[key]) for key in present}
    snapshot = Snapshot(
        collections=collections,
        export_date=export_date,
        app_version=app_version,
        complete=complete,
    )
    logger.debug(f"Parsed snapshot with {snapshot.total} records ({', '.join(present)})")
    return snapshot


def read_snapshot_file(path: str, *, notes_only: bool = False) -> Snapshot:
    """Read and parse a snapshot file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ImportValidationError: If the content is not a valid snapshot.
    """
    file_path = Path(path).expanduser()
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")
    return parse_snapshot(file_path.read_text(encoding="utf-8"), notes_only=notes_only)
