"""Import/merge engine.

Folds an imported collection into an existing one using record identity
and last-write-wins on ``last_modified``:

- unknown id: append
- known id, imported copy strictly newer: replace in place
- otherwise: keep the local copy

Equal timestamps keep the local copy, so merging the same snapshot twice
changes nothing the second time.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence

from notestoself.types import Record

logger = logging.getLogger(__name__)


@dataclass
class MergeResult:
    """Outcome of one merge."""

    records: List[Record] = field(default_factory=list)
    added: int = 0
    updated: int = 0
    unchanged: int = 0
    changed: List[Record] = field(default_factory=list)  # Need a remote write

    @property
    def total_changes(self) -> int:
        return self.added + self.updated

    def to_dict(self) -> Dict[str, int]:
        return {
            "added": self.added,
            "updated": self.updated,
            "unchanged": self.unchanged,
            "total": len(self.records),
        }


def _is_newer(candidate: Record, current: Record) -> bool:
    return candidate.last_modified > current.last_modified


def merge_records(existing: Sequence[Record], imported: Iterable[Record]) -> MergeResult:
    """Merge ``imported`` into ``existing`` without mutating either.

    Order of ``existing`` is preserved; new records are appended in import
    order. A snapshot that names one id twice is resolved by the same
    newer-wins rule, so the result never holds two records with one id.
    """
    result = MergeResult(records=list(existing))
    positions: Dict[str, int] = {}
    for i, record in enumerate(result.records):
        positions.setdefault(record.id, i)

    # id -> index into result.changed, so a later duplicate replaces its entry
    changed_at: Dict[str, int] = {}

    for incoming in imported:
        pos = positions.get(incoming.id)
        if pos is None:
            positions[incoming.id] = len(result.records)
            result.records.append(incoming)
            result.added += 1
            changed_at[incoming.id] = len(result.changed)
            result.changed.append(incoming)
            continue

        current = result.records[pos]
        if _is_newer(incoming, current):
            result.records[pos] = incoming
            if incoming.id in changed_at:
                result.changed[changed_at[incoming.id]] = incoming
            else:
                changed_at[incoming.id] = len(result.changed)
                result.changed.append(incoming)
                result.updated += 1
        elif incoming.id not in changed_at:
            result.unchanged += 1

    logger.debug(
        "Merged %d records: %d added, %d updated, %d unchanged",
        len(result.records),
        result.added,
        result.updated,
        result.unchanged,
    )
    return result
