"""Status and widget commands."""

from typing import TYPE_CHECKING

from notestoself.cli.commands.helpers import print_json
from notestoself.widget import WidgetReader

if TYPE_CHECKING:
    import argparse

    from notestoself import NotesToSelf


async def cmd_status(args: "argparse.Namespace", app: "NotesToSelf"):
    """Show counts, sync state and remote availability."""
    stats = app.stats()
    online = await app.is_online()

    if getattr(args, "json", False):
        stats["online"] = online
        print_json(stats)
        return

    print(f"Namespace: {stats['namespace']}")
    print(f"Remote:    {'available' if online else 'unavailable (local only)'}")
    print()
    for key, count in stats["counts"].items():
        print(f"  {key:<12} {count:>5}   [{stats['states'][key]}]")
    print(f"  {'total':<12} {stats['total']:>5}")
    if stats["counts"]["todos"]:
        print(f"\nOpen todos: {stats['open_todos']}")


def cmd_widget(args: "argparse.Namespace", app: "NotesToSelf"):
    """Show or advance the widget's current note."""
    reader = WidgetReader(app.kv)
    entry = reader.advance() if args.widget_action == "next" else reader.current_note()
    if entry.is_placeholder:
        print(entry.text)
    else:
        print(f"[{entry.position}] {entry.text}")
