"""notestoself storage.

Local-first: every collection is written to the shared local store first,
then pushed to the remote store when it is reachable.
"""

from .data_store import DataStore, StoreState
from .local import MemoryDefaults, SharedDefaults, load_collection, save_collection
from .remote import BATCH_CEILING, BatchResult, InMemoryRemoteStore, RemoteStore
from .stores import CBTStore, NotesStore, PeopleStore, RemindersStore, TodoStore

__all__ = [
    "BATCH_CEILING",
    "BatchResult",
    "CBTStore",
    "DataStore",
    "InMemoryRemoteStore",
    "MemoryDefaults",
    "NotesStore",
    "PeopleStore",
    "RemindersStore",
    "RemoteStore",
    "SharedDefaults",
    "StoreState",
    "TodoStore",
    "load_collection",
    "save_collection",
]
