"""
notestoself CLI - Local-first notes, reminders, people, CBT entries and todos.

Usage:
    notestoself add KIND TEXT
    notestoself list KIND [--json]
    notestoself edit KIND ID TEXT
    notestoself delete KIND ID
    notestoself todo toggle ID
    notestoself search QUERY
    notestoself export [--output FILE]
    notestoself import FILE [--notes-only] [--yes]
    notestoself delete-all [--yes]
    notestoself status [--json]
    notestoself widget show|next
"""

import argparse
import asyncio
import inspect
import logging
import sys

from notestoself.cli.commands import (
    cmd_add,
    cmd_delete,
    cmd_delete_all,
    cmd_edit,
    cmd_export,
    cmd_import,
    cmd_list,
    cmd_search,
    cmd_status,
    cmd_todo,
    cmd_widget,
)
from notestoself.cli.commands.helpers import KINDS
from notestoself.config import build_remote_store
from notestoself.core import NotesToSelf
from notestoself.logging_config import setup_notestoself_logging
from notestoself.protocols import ImportValidationError, NotesToSelfError
from notestoself.utils import resolve_namespace

# Set up logging
logging.basicConfig(level=logging.WARNING)
logger = logging.getLogger(__name__)

COMMANDS = {
    "add": cmd_add,
    "list": cmd_list,
    "edit": cmd_edit,
    "delete": cmd_delete,
    "todo": cmd_todo,
    "search": cmd_search,
    "export": cmd_export,
    "import": cmd_import,
    "delete-all": cmd_delete_all,
    "status": cmd_status,
    "widget": cmd_widget,
}

# Commands that only touch the shared local store
LOCAL_ONLY_COMMANDS = {"widget"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="notestoself",
        description="Local-first notes to self, synced when a backend is reachable",
    )
    parser.add_argument("--namespace", "-n", help="Shared storage namespace", default=None)
    parser.add_argument("--offline", action="store_true", help="Never contact the remote store")
    parser.add_argument("--log-level", default="WARNING", help="Log level (default: WARNING)")

    subparsers = parser.add_subparsers(dest="command", required=True)
    kinds = sorted(KINDS)

    # add
    p_add = subparsers.add_parser("add", help="Add a record")
    p_add.add_argument("kind", choices=kinds)
    p_add.add_argument("text", help="Text (the situation, for cbt)")
    p_add.add_argument("--distortion", "-d", action="append", help="Distortion id (cbt, repeatable)")
    p_add.add_argument("--challenge", help="Challenge (cbt)")
    p_add.add_argument("--alternative", help="Alternative thought (cbt)")
    p_add.add_argument("--notes", help="Notes (cbt)")

    # list
    p_list = subparsers.add_parser("list", help="List records")
    p_list.add_argument("kind", choices=kinds)
    p_list.add_argument("--json", "-j", action="store_true")

    # edit
    p_edit = subparsers.add_parser("edit", help="Edit a record's text")
    p_edit.add_argument("kind", choices=kinds)
    p_edit.add_argument("id", help="Record id or unique prefix")
    p_edit.add_argument("text", help="New text")

    # delete
    p_delete = subparsers.add_parser("delete", help="Delete a record")
    p_delete.add_argument("kind", choices=kinds)
    p_delete.add_argument("id", help="Record id or unique prefix")

    # todo
    p_todo = subparsers.add_parser("todo", help="Todo operations")
    todo_sub = p_todo.add_subparsers(dest="todo_action", required=True)
    todo_toggle = todo_sub.add_parser("toggle", help="Toggle completion")
    todo_toggle.add_argument("id", help="Todo id or unique prefix")

    # search
    p_search = subparsers.add_parser("search", help="Search notes and people")
    p_search.add_argument("query", help="Search text")

    # export
    p_export = subparsers.add_parser("export", help="Export all data as JSON")
    p_export.add_argument("--output", "-o", help="Write to file instead of stdout")

    # import
    p_import = subparsers.add_parser("import", help="Import a snapshot")
    p_import.add_argument("file", help="Snapshot file")
    p_import.add_argument("--notes-only", action="store_true", help="Import a notes-only snapshot")
    p_import.add_argument("--yes", "-y", action="store_true", help="Skip confirmation")

    # delete-all
    p_delete_all = subparsers.add_parser("delete-all", help="Delete all data")
    p_delete_all.add_argument("--yes", "-y", action="store_true", help="Skip confirmation")

    # status
    p_status = subparsers.add_parser("status", help="Show counts and sync state")
    p_status.add_argument("--json", "-j", action="store_true")

    # widget
    p_widget = subparsers.add_parser("widget", help="Widget view of the current note")
    p_widget.add_argument("widget_action", choices=["show", "next"], nargs="?", default="show")

    return parser


async def run(args: argparse.Namespace, app: NotesToSelf) -> None:
    """Load stores, dispatch one command, then wait for remote writes."""
    try:
        if args.command not in LOCAL_ONLY_COMMANDS:
            await app.load_all()
        result = COMMANDS[args.command](args, app)
        if inspect.isawaitable(result):
            await result
    finally:
        await app.close()


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    namespace = resolve_namespace(args.namespace)
    setup_notestoself_logging(namespace, args.log_level)

    # Initialize with error handling
    try:
        app = NotesToSelf(namespace=namespace, remote=build_remote_store(offline=args.offline))
    except (ValueError, TypeError, OSError) as e:
        logger.error(f"Failed to initialize notestoself: {e}")
        sys.exit(1)

    # Dispatch with error handling
    try:
        asyncio.run(run(args, app))
    except ImportValidationError as e:
        print(f"✗ Import failed: {e}", file=sys.stderr)
        sys.exit(1)
    except (ValueError, TypeError, FileNotFoundError) as e:
        logger.error(f"Input error: {e}")
        print(f"✗ {e}", file=sys.stderr)
        sys.exit(1)
    except NotesToSelfError as e:
        logger.error(f"Command failed: {e}")
        print(f"✗ {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
