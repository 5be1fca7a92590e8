"""Remote store adapter.

Abstracts a per-user, eventually-consistent remote database keyed by
record type and record id. Concrete adapters implement four primitives
(account probe, query, modify, delete); everything else (batch chunking,
per-record failure accounting, decode-and-skip on fetch, fetch-then-delete
for bulk removal) lives here so every adapter behaves the same.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Set, Type

from notestoself.codecs import record_from_wire, record_to_wire
from notestoself.protocols import RemoteStoreError, RemoteUnavailableError
from notestoself.types import Record

logger = logging.getLogger(__name__)

# Maximum records per write round trip accepted by the remote service
BATCH_CEILING = 400

ACCOUNT_AVAILABLE = "available"


@dataclass
class BatchResult:
    """Outcome of a batched save."""

    saved: List[str] = field(default_factory=list)  # Record ids confirmed saved
    failures: Dict[str, str] = field(default_factory=dict)  # Record id -> error message
    round_trips: int = 0

    @property
    def success(self) -> bool:
        return not self.failures


def chunked(items: Sequence[Any], size: int = BATCH_CEILING) -> List[Sequence[Any]]:
    """Split ``items`` into consecutive chunks of at most ``size``."""
    if size <= 0:
        raise ValueError("chunk size must be positive")
    return [items[i : i + size] for i in range(0, len(items), size)]


class RemoteStore(ABC):
    """Async remote database adapter.

    Subclasses provide:
    - ``_account_status()``: account/capability probe
    - ``_query(record_type)``: all wire records of a type
    - ``_modify(record_type, wire_records)``: upsert one chunk, returning
      ``{record_id: error_message_or_None}``
    - ``_delete_record(record_type, record_id)``
    """

    batch_size: int = BATCH_CEILING

    # === Primitives ===

    @abstractmethod
    async def _account_status(self) -> str: ...

    @abstractmethod
    async def _query(self, record_type: str) -> List[Dict[str, Any]]: ...

    @abstractmethod
    async def _modify(
        self, record_type: str, wire_records: List[Dict[str, Any]]
    ) -> Dict[str, Optional[str]]: ...

    @abstractmethod
    async def _delete_record(self, record_type: str, record_id: str) -> None: ...

    # === Public contract ===

    async def is_available(self) -> bool:
        """Probe the remote account. Never raises."""
        try:
            return await self._account_status() == ACCOUNT_AVAILABLE
        except Exception as e:
            logger.debug(f"Remote availability check failed: {e}", exc_info=True)
            return False

    async def fetch_all(self, record_cls: Type[Record]) -> List[Record]:
        """Fetch every record of a type, newest ``date`` first.

        Records that fail to decode are logged and skipped.
        """
        wire_records = await self._query(record_cls.RECORD_TYPE)
        records = []
        for wire in wire_records:
            record = record_from_wire(wire)
            if record is None or not isinstance(record, record_cls):
                logger.warning(
                    "Skipping undecodable %s record %s",
                    record_cls.RECORD_TYPE,
                    wire.get("recordName") if isinstance(wire, dict) else "?",
                )
                continue
            records.append(record)
        records.sort(key=lambda r: r.date, reverse=True)
        return records

    async def save(self, record: Record) -> None:
        """Upsert a single record.

        Raises:
            RemoteStoreError: If the remote rejected the record.
        """
        result = await self.save_batch([record])
        if record.id in result.failures:
            raise RemoteStoreError(f"Failed to save {record.RECORD_TYPE}:{record.id}: "
                                   f"{result.failures[record.id]}")

    async def save_batch(self, records: Sequence[Record]) -> BatchResult:
        """Upsert any number of records, one round trip per chunk.

        Records are grouped by type first, so each type takes
        ``ceil(n / batch_size)`` round trips.

        A failing record, or a failing chunk, never stops sibling records
        or later chunks; each failure is reported on its own.
        """
        result = BatchResult()
        if not records:
            return result

        by_type: Dict[str, List[Dict[str, Any]]] = {}
        for record in records:
            by_type.setdefault(record.RECORD_TYPE, []).append(record_to_wire(record))

        for record_type, typed_records in by_type.items():
            for wire_records in chunked(typed_records, self.batch_size):
                result.round_trips += 1
                try:
                    outcome = await self._modify(record_type, wire_records)
                except Exception as e:
                    logger.error(
                        f"Batch save of {len(wire_records)} {record_type} records failed: {e}",
                        exc_info=True,
                    )
                    for wire in wire_records:
                        result.failures[wire["recordName"]] = str(e)[:500]
                    continue

                for wire in wire_records:
                    record_id = wire["recordName"]
                    if record_id not in outcome:
                        result.failures[record_id] = "no result returned"
                    elif outcome[record_id]:
                        logger.warning(f"Error saving {record_type}:{record_id}: {outcome[record_id]}")
                        result.failures[record_id] = outcome[record_id]
                    else:
                        result.saved.append(record_id)

        return result

    async def delete(self, record: Record) -> None:
        """Delete one record by id."""
        await self._delete_record(record.RECORD_TYPE, record.id)

    async def delete_ids(self, record_cls: Type[Record], record_ids: Sequence[str]) -> List[str]:
        """Delete records by id, returning the ids confirmed deleted."""
        deleted = []
        for record_id in record_ids:
            try:
                await self._delete_record(record_cls.RECORD_TYPE, record_id)
                deleted.append(record_id)
            except Exception as e:
                logger.warning(f"Failed to delete {record_cls.RECORD_TYPE}:{record_id}: {e}")
        return deleted

    async def delete_all(self, record_cls: Type[Record]) -> int:
        """Delete every record of a type: fetch, then delete each.

        Not atomic. An interruption leaves a partial deletion behind.
        """
        records = await self.fetch_all(record_cls)
        for record in records:
            await self.delete(record)
        return len(records)

    async def close(self) -> None:
        """Release adapter resources."""
        return None


class InMemoryRemoteStore(RemoteStore):
    """In-process remote store.

    Stands in for the real service in tests and offline sessions. Supports
    toggling availability, injecting per-record and per-call failures, and
    records every primitive call in ``calls``.
    """

    def __init__(self, available: bool = True, batch_size: int = BATCH_CEILING):
        self.available = available
        self.batch_size = batch_size
        self.tables: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.calls: List[tuple] = []
        self.failing_ids: Set[str] = set()
        self.fail_queries = False
        self.fail_modify_calls: Set[int] = set()  # 1-based modify call numbers to fail
        self.fail_deletes_after: Optional[int] = None
        self._modify_count = 0
        self._delete_count = 0

    def _table(self, record_type: str) -> Dict[str, Dict[str, Any]]:
        return self.tables.setdefault(record_type, {})

    async def _account_status(self) -> str:
        self.calls.append(("account_status",))
        return ACCOUNT_AVAILABLE if self.available else "noAccount"

    async def _query(self, record_type: str) -> List[Dict[str, Any]]:
        self.calls.append(("query", record_type))
        if not self.available:
            raise RemoteUnavailableError("remote account unavailable")
        if self.fail_queries:
            raise RemoteStoreError(f"query for {record_type} failed")
        return [dict(wire) for wire in self._table(record_type).values()]

    async def _modify(
        self, record_type: str, wire_records: List[Dict[str, Any]]
    ) -> Dict[str, Optional[str]]:
        self._modify_count += 1
        self.calls.append(("modify", record_type, len(wire_records)))
        if not self.available:
            raise RemoteUnavailableError("remote account unavailable")
        if self._modify_count in self.fail_modify_calls:
            raise RemoteStoreError(f"modify call {self._modify_count} failed")

        outcome: Dict[str, Optional[str]] = {}
        table = self._table(record_type)
        for wire in wire_records:
            record_id = wire["recordName"]
            if record_id in self.failing_ids:
                outcome[record_id] = "serverRecordChanged"
                continue
            stored = dict(wire)
            stored["modifiedAt"] = datetime.now(timezone.utc).isoformat()
            table[record_id] = stored
            outcome[record_id] = None
        return outcome

    async def _delete_record(self, record_type: str, record_id: str) -> None:
        self._delete_count += 1
        self.calls.append(("delete", record_type, record_id))
        if not self.available:
            raise RemoteUnavailableError("remote account unavailable")
        if self.fail_deletes_after is not None and self._delete_count > self.fail_deletes_after:
            raise RemoteStoreError("connection lost during delete")
        self._table(record_type).pop(record_id, None)

    # === Test helpers ===

    def put(self, record: Record) -> None:
        """Store a record directly, bypassing call accounting."""
        self._table(record.RECORD_TYPE)[record.id] = record_to_wire(record)

    def put_wire(self, wire: Dict[str, Any]) -> None:
        self._table(wire["recordType"])[wire["recordName"]] = dict(wire)

    def count(self, record_cls: Type[Record]) -> int:
        return len(self._table(record_cls.RECORD_TYPE))

    def calls_of(self, kind: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == kind]
