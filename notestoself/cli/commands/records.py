"""Record commands: add, list, edit, delete, todo toggle, search."""

from dataclasses import replace
from typing import TYPE_CHECKING

from notestoself.cli.commands.helpers import (
    print_json,
    resolve_record,
    store_for,
    validate_input,
)
from notestoself.codecs import record_to_dict
from notestoself.distortions import get_distortion
from notestoself.types import CBTEntry, normalize_id

if TYPE_CHECKING:
    import argparse

    from notestoself import NotesToSelf


def _distortion_ids(values):
    ids = []
    for value in values or []:
        try:
            distortion_id = normalize_id(value)
        except ValueError:
            raise ValueError(f"Invalid distortion id: {value}") from None
        if get_distortion(distortion_id) is None:
            raise ValueError(f"Unknown distortion id: {value}")
        ids.append(distortion_id)
    return ids


def cmd_add(args: "argparse.Namespace", app: "NotesToSelf"):
    """Add a record to the front of its collection."""
    store = store_for(app, args.kind)
    text = validate_input(args.text, "text")

    if args.kind == "cbt":
        record = CBTEntry(
            situation=text,
            distortion_ids=_distortion_ids(args.distortion),
            challenge=validate_input(args.challenge or "", "challenge"),
            alternative=validate_input(args.alternative or "", "alternative"),
            notes=validate_input(args.notes or "", "notes"),
        )
    else:
        record = store.record_cls(text=text)

    store.add(record)
    print(f"✓ Added {args.kind} {record.id[:8]}: {record.summary}")


def cmd_list(args: "argparse.Namespace", app: "NotesToSelf"):
    """List a collection, newest first."""
    store = store_for(app, args.kind)

    if args.json:
        print_json([record_to_dict(r) for r in store.records])
        return

    if not store.records:
        print(f"No {store.key} yet.")
        return

    current = store.current_index if store.index_key else None
    for i, r in enumerate(store.records):
        marker = "▶" if i == current else " "
        print(f"{marker} {r.id[:8]}  {r.date.strftime('%Y-%m-%d')}  {r.summary}")
        if isinstance(r, CBTEntry):
            for d in app.cbt.distortions_for(r):
                print(f"      {d.emoji} {d.title}")


def cmd_edit(args: "argparse.Namespace", app: "NotesToSelf"):
    """Replace the main text of a record."""
    store = store_for(app, args.kind)
    record = resolve_record(store, args.id)
    text = validate_input(args.text, "text")

    if isinstance(record, CBTEntry):
        updated = store.update(replace(record, situation=text))
    else:
        updated = store.update(replace(record, text=text))
    print(f"✓ Updated {args.kind} {updated.id[:8]}: {updated.summary}")


def cmd_delete(args: "argparse.Namespace", app: "NotesToSelf"):
    """Delete one record by id."""
    store = store_for(app, args.kind)
    record = resolve_record(store, args.id)
    store.delete(record)
    print(f"✓ Deleted {args.kind} {record.id[:8]}")


def cmd_todo(args: "argparse.Namespace", app: "NotesToSelf"):
    """Handle todo subcommands."""
    if args.todo_action == "toggle":
        todo = resolve_record(app.todos, args.id)
        updated = app.todos.toggle_completion(todo)
        state = "done" if updated.is_completed else "open"
        print(f"✓ Todo {updated.id[:8]} marked {state}")


def cmd_search(args: "argparse.Namespace", app: "NotesToSelf"):
    """Search notes and people."""
    query = validate_input(args.query, "query", 500)
    results = app.search(query)
    if not results:
        print(f"No entries or people match '{args.query}'")
        return

    print(f"Found {len(results)} result(s) for '{args.query}':\n")
    for i, r in enumerate(results, 1):
        label = "person" if r.RECORD_TYPE == "PersonEntry" else "note"
        print(f"{i}. [{label}] {r.summary}")
        print(f"     {r.date.strftime('%Y-%m-%d')}  {r.id[:8]}")
