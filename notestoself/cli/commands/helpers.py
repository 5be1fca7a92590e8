"""Shared helper functions for CLI commands."""

import json
import re
from typing import Any, Optional

from notestoself.storage.data_store import DataStore

# CLI kind name -> NotesToSelf store attribute
KINDS = {
    "note": "notes",
    "reminder": "reminders",
    "person": "people",
    "cbt": "cbt",
    "todo": "todos",
}


def validate_input(value: str, field_name: str, max_length: int = 10000) -> str:
    """Validate and sanitize CLI inputs."""
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string")

    if len(value) > max_length:
        raise ValueError(f"{field_name} too long (max {max_length} characters)")

    # Remove null bytes and control characters except newlines and tabs
    sanitized = re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]", "", value)

    return sanitized


def print_json(data: Any) -> None:
    """Print data as formatted JSON."""
    print(json.dumps(data, indent=2, default=str, ensure_ascii=False))


def store_for(app, kind: str) -> DataStore:
    if kind not in KINDS:
        raise ValueError(f"Unknown kind '{kind}' (expected one of: {', '.join(KINDS)})")
    return getattr(app, KINDS[kind])


def resolve_record(store: DataStore, record_id: str):
    """Find a record by id or unique id prefix, or raise ValueError."""
    record: Optional[Any] = store.find(validate_input(record_id, "id", 64).strip())
    if record is None:
        raise ValueError(f"No unique {store.key} record matching '{record_id}'")
    return record


def confirm_prompt(message: str) -> bool:
    """Ask for a yes/no answer on stdin. EOF counts as no."""
    print(message)
    try:
        answer = input("Proceed? [y/N]: ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")
