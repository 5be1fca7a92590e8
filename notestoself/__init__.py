"""
notestoself - Local-first notes, reminders, people, CBT entries and todos.

Each collection lives in a shared on-device store readable by the widget
and syncs to a per-user remote database when one is reachable.
"""

from .core import NotesToSelf
from .types import CBTEntry, Note, Person, Reminder, TodoItem

try:
    from importlib.metadata import version

    __version__ = version("notestoself")
except Exception:
    __version__ = "0.0.0"

__all__ = ["NotesToSelf", "Note", "Reminder", "Person", "CBTEntry", "TodoItem"]
