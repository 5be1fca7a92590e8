"""Export, import and delete-all commands."""

import sys
from pathlib import Path
from typing import TYPE_CHECKING

from notestoself.cli.commands.helpers import confirm_prompt

if TYPE_CHECKING:
    import argparse

    from notestoself import NotesToSelf


def cmd_export(args: "argparse.Namespace", app: "NotesToSelf"):
    """Export every collection as a snapshot."""
    if args.output:
        app.write_export(args.output)
        print(f"✓ Exported {app.stats()['total']} items to {args.output}", file=sys.stderr)
    else:
        print(app.export_json())


def cmd_import(args: "argparse.Namespace", app: "NotesToSelf"):
    """Import a snapshot file, merging by id and last modification."""
    path = Path(args.file).expanduser()
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    text = path.read_text(encoding="utf-8")

    if args.notes_only:
        result = app.import_notes(text)
        print(
            f"✓ Imported notes: {result.added} added, {result.updated} updated, "
            f"{result.unchanged} unchanged"
        )
        return

    confirm = (lambda summary: True) if args.yes else confirm_prompt
    report = app.import_all(text, confirm=confirm)
    print(report.message())


def cmd_delete_all(args: "argparse.Namespace", app: "NotesToSelf"):
    """Delete every record locally and remotely."""
    stats = app.stats()
    if not args.yes:
        message = (
            f"This will permanently delete {stats['total']} items "
            f"({', '.join(f'{v} {k}' for k, v in stats['counts'].items())}) "
            "from this device and the remote store."
        )
        if not confirm_prompt(message):
            print("Cancelled. Nothing was deleted.")
            return
    counts = app.delete_all_data()
    print(f"✓ Deleted {sum(counts.values())} items")
