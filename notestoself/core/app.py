"""NotesToSelf class: main interface for the app's data.

Owns the shared local store, the single remote adapter, and the five
per-entity stores. Export and import live in mixins.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

from notestoself.core.importing import ImportMixin
from notestoself.core.serializers import ExportMixin
from notestoself.logging_config import log_load
from notestoself.protocols import KeyValueStore
from notestoself.storage.data_store import DataStore, StoreState
from notestoself.storage.local import SharedDefaults
from notestoself.storage.remote import RemoteStore
from notestoself.storage.stores import CBTStore, NotesStore, PeopleStore, RemindersStore, TodoStore
from notestoself.types import Record
from notestoself.utils import resolve_namespace

logger = logging.getLogger(__name__)


class NotesToSelf(ExportMixin, ImportMixin):
    """Main interface for notes, reminders, people, CBT entries and todos.

    Examples:
        app = NotesToSelf(remote=build_remote_store())
        await app.load_all()
        app.notes.add(Note(text="Drink water"))
        await app.flush()
    """

    def __init__(
        self,
        namespace: Optional[str] = None,
        kv: Optional[KeyValueStore] = None,
        remote: Optional[RemoteStore] = None,
        clock: Optional[Callable[[], Any]] = None,
        app_version: Optional[str] = None,
    ):
        """Initialize NotesToSelf.

        Args:
            namespace: Shared storage namespace. Defaults to the app group.
            kv: Local store. Defaults to ``SharedDefaults`` for the namespace.
            remote: Remote adapter. Defaults to the configured backend.
            clock: Time source for ``last_modified`` stamps.
            app_version: Version written into exports.
        """
        self.namespace = kv.namespace if kv is not None else resolve_namespace(namespace)
        self.kv = kv if kv is not None else SharedDefaults(self.namespace)
        if remote is None:
            from notestoself.config import build_remote_store

            remote = build_remote_store()
        self.remote = remote

        if app_version is None:
            from notestoself import __version__

            app_version = __version__
        self.app_version = app_version

        self.notes = NotesStore(self.kv, self.remote, clock=clock)
        self.reminders = RemindersStore(self.kv, self.remote, clock=clock)
        self.people = PeopleStore(self.kv, self.remote, clock=clock)
        self.cbt = CBTStore(self.kv, self.remote, clock=clock)
        self.todos = TodoStore(self.kv, self.remote, clock=clock)

        logger.debug(
            f"NotesToSelf initialized: namespace={self.namespace}, "
            f"remote={type(self.remote).__name__}"
        )

    def _snapshot_stores(self) -> Dict[str, DataStore]:
        """Snapshot envelope key -> store."""
        return {
            "notes": self.notes,
            "reminders": self.reminders,
            "people": self.people,
            "cbtEntries": self.cbt,
            "todos": self.todos,
        }

    @property
    def stores(self) -> List[DataStore]:
        return list(self._snapshot_stores().values())

    async def load_all(self) -> Dict[str, int]:
        """Load every store concurrently. Returns counts per collection."""
        await asyncio.gather(*(store.load() for store in self.stores))
        counts = {key: len(store) for key, store in self._snapshot_stores().items()}
        source = "remote" if all(s.state == StoreState.SYNCED_REMOTE for s in self.stores) else "local"
        log_load(self.namespace, source, **counts)
        return counts

    async def flush(self) -> None:
        """Wait for all scheduled remote writes."""
        await asyncio.gather(*(store.flush() for store in self.stores))

    def delete_all_data(self) -> Dict[str, int]:
        """Delete every record in every store, locally and remotely."""
        counts = {key: store.delete_all() for key, store in self._snapshot_stores().items()}
        logger.info(f"Deleted all data: {counts}")
        return counts

    def search(self, query: str) -> List[Record]:
        """Search notes and people by text."""
        return self.notes.search(query) + self.people.search(query)

    async def is_online(self) -> bool:
        return await self.remote.is_available()

    def stats(self) -> Dict[str, Any]:
        """Counts per collection plus per-store sync state."""
        stores = self._snapshot_stores()
        counts = {key: len(store) for key, store in stores.items()}
        return {
            "namespace": self.namespace,
            "counts": counts,
            "total": sum(counts.values()),
            "states": {key: store.state.value for key, store in stores.items()},
            "open_todos": len(self.todos.open_items),
        }

    async def close(self) -> None:
        await self.flush()
        await self.remote.close()
