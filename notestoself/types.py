"""
Shared record types for notestoself.

All user-content dataclasses live here. They are the shared vocabulary
between the stores, the local fallback cache, the remote adapter and the
import/export layer.

Every record carries the same three identity/time fields:
- ``id``: opaque UUID string, the only identity key anywhere
- ``date``: creation time, never changes
- ``last_modified``: refreshed on every content edit; the sole
  tie-breaker when two copies of a record disagree
"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import ClassVar, Dict, List, Optional, Type

# === Shared Utility Functions ===


def utc_now() -> datetime:
    """Get the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Generate a fresh record id."""
    return str(uuid.uuid4())


def normalize_id(value: str) -> str:
    """Return the canonical lowercase form of a UUID string.

    Raises:
        ValueError: If ``value`` is not a UUID.
    """
    if isinstance(value, uuid.UUID):
        return str(value)
    if not isinstance(value, str):
        raise ValueError(f"id must be a string, got {type(value).__name__}")
    return str(uuid.UUID(value.strip()))


def parse_datetime(s: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 string into an aware UTC datetime.

    Naive values are assumed to be UTC. Returns None for empty input.

    Raises:
        ValueError: If the string is not ISO-8601.
    """
    if not s:
        return None
    if not isinstance(s, str):
        raise ValueError(f"Expected ISO-8601 string, got {type(s).__name__}")
    return as_utc(datetime.fromisoformat(s.strip().replace("Z", "+00:00")))


def as_utc(dt: datetime) -> datetime:
    """Return ``dt`` as an aware UTC datetime. Naive values are taken as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_datetime(dt: datetime) -> str:
    """Format a datetime as ISO-8601 UTC with a ``Z`` suffix."""
    return as_utc(dt).isoformat().replace("+00:00", "Z")


# === Records ===


@dataclass
class Record:
    """Base shape shared by every user-content record."""

    RECORD_TYPE: ClassVar[str] = "Record"

    id: str = field(default_factory=new_id)
    date: datetime = field(default_factory=utc_now)
    last_modified: Optional[datetime] = None

    def __post_init__(self):
        self.date = as_utc(self.date)
        # Older data has no lastModified; a record is never modified before it exists
        self.last_modified = as_utc(self.last_modified) if self.last_modified else self.date

    def touch(self, now: Optional[datetime] = None):
        """Return a copy with ``last_modified`` refreshed."""
        return replace(self, last_modified=now or utc_now())

    @property
    def summary(self) -> str:
        """Short human-readable label for logs and CLI listings."""
        return self.id[:8]


@dataclass
class Note(Record):
    """A note to self, shown in the widget."""

    RECORD_TYPE: ClassVar[str] = "Note"

    text: str = ""

    @property
    def summary(self) -> str:
        return self.text[:50] + "..." if len(self.text) > 50 else self.text


@dataclass
class Reminder(Record):
    """A reminder entry, also widget-visible."""

    RECORD_TYPE: ClassVar[str] = "ReminderEntry"

    text: str = ""

    @property
    def summary(self) -> str:
        return self.text[:50] + "..." if len(self.text) > 50 else self.text


@dataclass
class Person(Record):
    """A free-form note about a person."""

    RECORD_TYPE: ClassVar[str] = "PersonEntry"

    text: str = ""

    @property
    def summary(self) -> str:
        return self.text[:50] + "..." if len(self.text) > 50 else self.text


@dataclass
class CBTEntry(Record):
    """A CBT thought record."""

    RECORD_TYPE: ClassVar[str] = "CBTEntry"

    situation: str = ""
    distortion_ids: List[str] = field(default_factory=list)  # CognitiveDistortion ids
    challenge: str = ""
    alternative: str = ""
    notes: str = ""

    @property
    def summary(self) -> str:
        s = self.situation
        return s[:50] + "..." if len(s) > 50 else s


@dataclass
class TodoItem(Record):
    """A developer to-do item."""

    RECORD_TYPE: ClassVar[str] = "TodoItem"

    text: str = ""
    is_completed: bool = False

    @property
    def summary(self) -> str:
        mark = "✓" if self.is_completed else "○"
        return f"{mark} {self.text[:48]}"


# Remote record type name -> record class
RECORD_TYPES: Dict[str, Type[Record]] = {
    cls.RECORD_TYPE: cls for cls in (Note, Reminder, Person, CBTEntry, TodoItem)
}
