"""Snapshot import operations for NotesToSelf."""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from notestoself.importers.json_importer import Snapshot, parse_snapshot
from notestoself.protocols import ImportValidationError
from notestoself.sync.merge import MergeResult

logger = logging.getLogger(__name__)


@dataclass
class ImportReport:
    """What an import did, per collection."""

    applied: bool = False
    results: Dict[str, MergeResult] = field(default_factory=dict)
    snapshot: Optional[Snapshot] = None

    @property
    def added(self) -> int:
        return sum(r.added for r in self.results.values())

    @property
    def updated(self) -> int:
        return sum(r.updated for r in self.results.values())

    def message(self) -> str:
        if not self.applied:
            return "Import cancelled. Nothing was changed."
        parts = [
            f"• {key}: {r.added} added, {r.updated} updated, {r.unchanged} unchanged"
            for key, r in self.results.items()
        ]
        return "Import complete:\n" + "\n".join(parts)


class ImportMixin:
    """Import operations for NotesToSelf."""

    def import_notes(self, text: str) -> MergeResult:
        """Merge a notes-only snapshot into the notes store. No confirmation.

        Raises:
            ImportValidationError: If the text is not a valid notes snapshot.
        """
        snapshot = parse_snapshot(text, notes_only=True)
        result = self.notes.merge(snapshot.get("notes"))
        logger.info(
            f"Imported notes: {result.added} added, {result.updated} updated, "
            f"{result.unchanged} unchanged"
        )
        return result

    def import_all(
        self, text: str, confirm: Optional[Callable[[str], bool]] = None
    ) -> ImportReport:
        """Import a complete snapshot after confirmation.

        The snapshot is fully validated before ``confirm`` is called with
        its summary text. Declining leaves every store untouched.

        Raises:
            ImportValidationError: If the text is not a valid complete snapshot.
        """
        snapshot = parse_snapshot(text)
        if not snapshot.complete:
            raise ImportValidationError(
                "This is a notes-only snapshot; import it with the notes importer"
            )

        report = ImportReport(snapshot=snapshot)
        if confirm is not None and not confirm(snapshot.summary()):
            logger.info("Import declined by user")
            return report

        stores = self._snapshot_stores()
        for key, records in snapshot.collections.items():
            report.results[key] = stores[key].merge(records)
        report.applied = True
        logger.info(f"Imported snapshot: {report.added} added, {report.updated} updated")
        return report
