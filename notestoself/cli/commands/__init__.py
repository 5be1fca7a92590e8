"""CLI command modules for notestoself."""

from notestoself.cli.commands.records import (
    cmd_add,
    cmd_delete,
    cmd_edit,
    cmd_list,
    cmd_search,
    cmd_todo,
)
from notestoself.cli.commands.status import cmd_status, cmd_widget
from notestoself.cli.commands.transfer import cmd_delete_all, cmd_export, cmd_import

__all__ = [
    "cmd_add",
    "cmd_delete",
    "cmd_delete_all",
    "cmd_edit",
    "cmd_export",
    "cmd_import",
    "cmd_list",
    "cmd_search",
    "cmd_status",
    "cmd_todo",
    "cmd_widget",
]
