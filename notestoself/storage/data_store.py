"""Per-entity data store.

One ``DataStore`` owns the in-memory collection of one record type and
keeps it in step with the shared local store and the remote store.

Mutations are synchronous from the caller's point of view: the collection
and the local store are updated (and the widget reload signal sent) before
the call returns. The remote write is then scheduled on the running event
loop and serialized behind a per-store lock, so remote writes apply in the
order they were issued. ``await flush()`` waits for them.
"""

import asyncio
import json
import logging
from enum import Enum
from typing import Callable, Generic, Iterable, List, Optional, Sequence, Set, Type, TypeVar

from notestoself.logging_config import log_save, log_sync
from notestoself.protocols import KeyValueStore
from notestoself.storage.local import load_collection, save_collection
from notestoself.storage.remote import RemoteStore
from notestoself.sync.merge import MergeResult, merge_records
from notestoself.types import Record, utc_now

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)

TOMBSTONE_SUFFIX = ".pendingDeletes"


class StoreState(Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    SYNCED_REMOTE = "synced_remote"
    SYNCED_LOCAL = "synced_local"


class DataStore(Generic[R]):
    """Collection of one record type with local and remote persistence.

    Subclasses set ``record_cls`` and ``key``; stores with a cursor set
    ``index_key``; stores read by the widget set ``widget_visible``.
    """

    record_cls: Type[Record] = Record
    key: str = ""
    index_key: Optional[str] = None
    widget_visible: bool = False

    def __init__(
        self,
        kv: KeyValueStore,
        remote: RemoteStore,
        clock: Optional[Callable[[], object]] = None,
    ):
        if not self.key:
            raise TypeError(f"{type(self).__name__} must define a storage key")
        self.kv = kv
        self.remote = remote
        self._clock = clock or utc_now
        self.records: List[R] = []
        self.state = StoreState.UNINITIALIZED
        self.is_syncing = False
        self._lock: Optional[asyncio.Lock] = None
        self._pending: Set[asyncio.Task] = set()
        self._changed_while_loading: Set[str] = set()

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)

    @property
    def tombstone_key(self) -> str:
        return f"{self.key}{TOMBSTONE_SUFFIX}"

    def get(self, record_id: str) -> Optional[R]:
        for record in self.records:
            if record.id == record_id:
                return record
        return None

    def find(self, prefix: str) -> Optional[R]:
        """Look up a record by full id or unique id prefix."""
        prefix = prefix.lower()
        matches = [r for r in self.records if r.id.startswith(prefix)]
        return matches[0] if len(matches) == 1 else None

    def _position(self, record_id: str) -> Optional[int]:
        for i, record in enumerate(self.records):
            if record.id == record_id:
                return i
        return None

    # === Loading ===

    async def load(self) -> List[R]:
        """Load remote-first, falling back to the local store.

        Waits for remote writes already issued by this store before
        fetching. Records changed while the fetch is in flight keep their
        local version; the loaded set never overwrites them.
        """
        await self.flush()
        self.state = StoreState.LOADING
        self._changed_while_loading = set()
        fetched = None
        async with self._get_lock():
            if await self.remote.is_available():
                try:
                    await self._retry_tombstones()
                    fetched = await self.remote.fetch_all(self.record_cls)
                except Exception as e:
                    logger.warning(f"Remote load of {self.key} failed, using local data: {e}")
                    fetched = None
            else:
                logger.info(f"Remote unavailable, loading {self.key} from local store")

            if fetched is not None:
                tombstones = set(self._read_tombstones())
                fetched = [r for r in fetched if r.id not in tombstones]
                self._apply_loaded(self._keep_changes_made_while_loading(fetched))
                self.state = StoreState.SYNCED_REMOTE
                log_sync(self.kv.namespace, direction="pull", count=len(fetched))
            else:
                local = load_collection(self.kv, self.key, self.record_cls)
                self._apply_loaded(self._keep_changes_made_while_loading(local))
                self.state = StoreState.SYNCED_LOCAL

        logger.debug(f"Loaded {len(self.records)} {self.key} ({self.state.value})")
        return self.records

    def _note_changed(self, ids: Iterable[str]) -> None:
        if self.state == StoreState.LOADING and not self.is_syncing:
            self._changed_while_loading.update(ids)

    def _keep_changes_made_while_loading(self, loaded: List[R]) -> List[R]:
        """Overlay records the caller changed during the fetch onto ``loaded``.

        Changed ids take their in-memory version, or are dropped if they
        were deleted. Ids unknown to ``loaded`` go to the front.
        """
        changed, self._changed_while_loading = self._changed_while_loading, set()
        if not changed:
            return loaded
        local = {r.id: r for r in self.records if r.id in changed}
        kept = [local.get(r.id, r) for r in loaded if r.id not in changed or r.id in local]
        seen = {r.id for r in kept}
        logger.info(f"Kept {len(changed)} {self.key} change(s) made while loading")
        return [r for r in local.values() if r.id not in seen] + kept

    def _apply_loaded(self, records: List[R]) -> None:
        self.is_syncing = True
        try:
            self.replace_all(records)
        finally:
            self.is_syncing = False

    # === Mutations ===

    def add(self, record: R) -> R:
        """Insert a new record at the front."""
        if self._position(record.id) is not None:
            logger.debug(f"{self.key}: add of known id {record.id}, treating as update")
            return self.update(record)
        self.records.insert(0, record)
        self._clear_tombstones([record.id])
        self._note_changed([record.id])
        self._persist_local()
        log_save(self.kv.namespace, record.RECORD_TYPE, record.id, record.summary)
        self._schedule_push([record])
        return record

    def update(self, record: R) -> R:
        """Replace a record in place, refreshing ``last_modified``.

        An unknown id is inserted at the front instead.
        """
        updated = record.touch(self._clock())
        pos = self._position(record.id)
        if pos is None:
            self.records.insert(0, updated)
            self._clear_tombstones([record.id])
        else:
            self.records[pos] = updated
        self._note_changed([record.id])
        self._persist_local()
        log_save(self.kv.namespace, updated.RECORD_TYPE, updated.id, updated.summary)
        self._schedule_push([updated])
        return updated

    def delete(self, record: R) -> bool:
        """Remove a record by id. Returns False if it was not present."""
        pos = self._position(record.id)
        if pos is None:
            return False
        return bool(self.delete_at([pos]))

    def delete_at(self, indices: Iterable[int]) -> List[R]:
        """Remove records by position, returning the removed records."""
        wanted = {i for i in indices if 0 <= i < len(self.records)}
        if not wanted:
            return []
        removed = [r for i, r in enumerate(self.records) if i in wanted]
        self.records = [r for i, r in enumerate(self.records) if i not in wanted]
        self._add_tombstones([r.id for r in removed])
        self._note_changed(r.id for r in removed)
        self._clamp_index()
        self._persist_local()
        self._schedule(self._remote_delete([r.id for r in removed]))
        return removed

    def delete_all(self) -> int:
        """Clear the collection locally, then remotely.

        The remote side is fetch-then-delete-each; ids whose delete is not
        yet confirmed stay tombstoned and are retried on the next load.
        """
        count = len(self.records)
        self._add_tombstones([r.id for r in self.records])
        self._note_changed(r.id for r in self.records)
        self.records = []
        self._clamp_index()
        self._persist_local()
        self._schedule(self._remote_delete_all())
        return count

    def replace_all(self, records: Sequence[R]) -> None:
        """Replace the whole collection.

        Outside a sync this also pushes every record to the remote store.
        """
        self._note_changed([r.id for r in self.records] + [r.id for r in records])
        self.records = list(records)
        self._clamp_index()
        self._persist_local()
        if not self.is_syncing:
            self._clear_tombstones([r.id for r in self.records])
            self._schedule_push(list(self.records))

    def merge(self, imported: Iterable[R]) -> MergeResult:
        """Fold imported records in, newest ``last_modified`` wins."""
        result = merge_records(self.records, imported)
        self._note_changed(r.id for r in result.changed)
        self.records = list(result.records)
        if result.changed:
            self._clear_tombstones([r.id for r in result.changed])
            self._persist_local()
            self._schedule_push(list(result.changed))
        return result

    def search(self, query: str) -> List[R]:
        """Case-insensitive substring match on the record's ``text``."""
        needle = query.casefold()
        if not needle:
            return []
        return [r for r in self.records if needle in getattr(r, "text", "").casefold()]

    # === Cursor ===

    @property
    def current_index(self) -> int:
        if not self.index_key:
            return 0
        return self.kv.read_int(self.index_key)

    def set_current_index(self, index: int) -> None:
        if not self.index_key:
            raise AttributeError(f"{type(self).__name__} has no cursor")
        if index < 0 or (index >= len(self.records) and index != 0):
            raise IndexError(f"index {index} out of range for {len(self.records)} {self.key}")
        self.kv.write_int(self.index_key, index)
        if self.widget_visible:
            self.kv.notify_reload()

    def _clamp_index(self) -> None:
        if self.index_key and self.current_index >= max(len(self.records), 1):
            self.kv.write_int(self.index_key, 0)

    # === Local persistence ===

    def _persist_local(self) -> None:
        save_collection(self.kv, self.key, self.records)
        if self.widget_visible:
            self.kv.notify_reload()

    def _read_tombstones(self) -> List[str]:
        blob = self.kv.read(self.tombstone_key)
        if not blob:
            return []
        try:
            ids = json.loads(blob.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            logger.warning(f"Discarding unreadable tombstones for {self.key}")
            return []
        return [i for i in ids if isinstance(i, str)] if isinstance(ids, list) else []

    def _write_tombstones(self, ids: List[str]) -> None:
        if ids:
            self.kv.write(self.tombstone_key, json.dumps(sorted(set(ids))).encode("utf-8"))
        else:
            self.kv.remove(self.tombstone_key)

    def _add_tombstones(self, ids: Iterable[str]) -> None:
        ids = list(ids)
        if ids:
            self._write_tombstones(self._read_tombstones() + ids)

    def _clear_tombstones(self, ids: Iterable[str]) -> None:
        current = self._read_tombstones()
        if not current:
            return
        drop = set(ids)
        remaining = [i for i in current if i not in drop]
        if len(remaining) != len(current):
            self._write_tombstones(remaining)

    # === Remote work ===

    def _get_lock(self) -> asyncio.Lock:
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    def _schedule(self, coro) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            logger.debug(f"No event loop running, {self.key} change kept local only")
            return
        task = loop.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def _schedule_push(self, records: List[R]) -> None:
        if records:
            self._schedule(self._push(records))

    async def flush(self) -> None:
        """Wait for every scheduled remote write, including ones queued meanwhile."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _push(self, records: List[R]) -> None:
        async with self._get_lock():
            if not await self.remote.is_available():
                logger.info(f"Remote unavailable, {len(records)} {self.key} change(s) kept local")
                return
            try:
                result = await self.remote.save_batch(records)
            except Exception as e:
                logger.error(f"Remote save of {self.key} failed: {e}", exc_info=True)
                return
            if result.failures:
                logger.warning(f"{len(result.failures)} {self.key} record(s) not saved remotely")
            log_sync(
                self.kv.namespace,
                direction="push",
                count=len(result.saved),
                errors=len(result.failures),
            )

    async def _remote_delete(self, ids: List[str]) -> None:
        async with self._get_lock():
            if not await self.remote.is_available():
                logger.info(f"Remote unavailable, {len(ids)} {self.key} delete(s) pending")
                return
            deleted = await self.remote.delete_ids(self.record_cls, ids)
            self._clear_tombstones(deleted)

    async def _remote_delete_all(self) -> None:
        async with self._get_lock():
            if not await self.remote.is_available():
                logger.info(f"Remote unavailable, remote delete of all {self.key} pending")
                return
            try:
                remote_records = await self.remote.fetch_all(self.record_cls)
            except Exception as e:
                logger.error(f"Could not list remote {self.key} for deletion: {e}")
                return
            # Tombstone everything first so an interruption cannot resurrect records
            self._add_tombstones([r.id for r in remote_records])
            for record in remote_records:
                try:
                    await self.remote.delete(record)
                except Exception as e:
                    logger.error(f"Remote delete of all {self.key} interrupted: {e}")
                    return
                self._clear_tombstones([record.id])

    async def _retry_tombstones(self) -> None:
        """Retry remote deletes left pending. Caller holds the lock."""
        pending = self._read_tombstones()
        if not pending:
            return
        deleted = await self.remote.delete_ids(self.record_cls, pending)
        self._clear_tombstones(deleted)
        logger.info(f"Retried {len(pending)} pending {self.key} delete(s), {len(deleted)} confirmed")
