"""Importers for notestoself snapshots."""

from .json_importer import Snapshot, parse_snapshot, read_snapshot_file

__all__ = ["Snapshot", "parse_snapshot", "read_snapshot_file"]
