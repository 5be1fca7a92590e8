"""Local fallback persistence.

A small key-value blob store scoped to a shared namespace, so the main app
and the widget process read the same data. Record collections are stored
as JSON arrays; cursors are stored as small integers.

Writes replace a single key. There is no transaction spanning several
keys: a crash between writing a collection and its cursor can leave them
out of step, and readers tolerate that (cursors are range-checked).
"""

import contextlib
import logging
import re
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional, Type

from notestoself.codecs import decode_records, encode_records
from notestoself.protocols import KeyValueStore, RecordDecodeError
from notestoself.types import Record
from notestoself.utils import get_data_home

logger = logging.getLogger(__name__)

# Reserved key holding the reload generation counter
RELOAD_GENERATION_KEY = "__reloadGeneration"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS defaults (
    key TEXT PRIMARY KEY,
    value BLOB NOT NULL,
    updated_at TEXT NOT NULL
)
"""


def _namespace_filename(namespace: str) -> str:
    """Turn a namespace into a safe file name."""
    cleaned = re.sub(r"[^A-Za-z0-9._-]", "_", namespace).strip("._")
    if not cleaned:
        raise ValueError(f"Invalid namespace: {namespace!r}")
    return f"{cleaned}.sqlite3"


def _encode_int(value: int) -> bytes:
    return str(int(value)).encode("ascii")


def _decode_int(blob: Optional[bytes], default: int) -> int:
    if blob is None:
        return default
    try:
        return int(blob.decode("ascii"))
    except (UnicodeDecodeError, ValueError):
        logger.debug("Non-integer value in integer key, using default %s", default)
        return default


class _ReloadMixin:
    """In-process reload listeners plus a persisted generation counter."""

    def _init_reload(self):
        self._listeners: List[Callable[[], None]] = []

    def add_reload_listener(self, listener: Callable[[], None]) -> None:
        self._listeners.append(listener)

    def reload_generation(self) -> int:
        return self.read_int(RELOAD_GENERATION_KEY)

    def notify_reload(self) -> None:
        """Broadcast a reload signal. Carries no data."""
        self.write_int(RELOAD_GENERATION_KEY, self.reload_generation() + 1)
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as e:
                logger.warning(f"Reload listener failed: {e}", exc_info=True)


class SharedDefaults(_ReloadMixin):
    """SQLite-backed shared key-value store.

    One file per namespace under ``<data_home>/shared``. WAL mode lets the
    widget read while the app writes.
    """

    def __init__(self, namespace: str, base_dir: Optional[Path] = None):
        self.namespace = namespace
        directory = Path(base_dir) if base_dir else get_data_home() / "shared"
        directory.mkdir(parents=True, exist_ok=True)
        self.db_path = directory / _namespace_filename(namespace)
        self._init_reload()
        with self._connect() as conn:
            conn.execute(_SCHEMA)

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA busy_timeout=5000")
        return conn

    @contextlib.contextmanager
    def _connect(self):
        """Commit on success, roll back on error, always close."""
        conn = self._get_conn()
        try:
            yield conn
            conn.commit()
        except Exception as e:
            logger.debug(f"Transaction failed, rolling back: {e}")
            conn.rollback()
            raise
        finally:
            conn.close()

    def write(self, key: str, value: bytes) -> None:
        now = datetime.now(timezone.utc).isoformat()
        with self._connect() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO defaults (key, value, updated_at) VALUES (?, ?, ?)",
                (key, sqlite3.Binary(value), now),
            )

    def read(self, key: str) -> Optional[bytes]:
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM defaults WHERE key = ?", (key,)).fetchone()
        return bytes(row[0]) if row else None

    def remove(self, key: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM defaults WHERE key = ?", (key,))

    def read_int(self, key: str, default: int = 0) -> int:
        return _decode_int(self.read(key), default)

    def write_int(self, key: str, value: int) -> None:
        self.write(key, _encode_int(value))

    def keys(self) -> List[str]:
        with self._connect() as conn:
            rows = conn.execute("SELECT key FROM defaults ORDER BY key").fetchall()
        return [row[0] for row in rows]


class MemoryDefaults(_ReloadMixin):
    """Dict-backed store for tests and throwaway sessions."""

    def __init__(self, namespace: str = "memory"):
        self.namespace = namespace
        self._data: Dict[str, bytes] = {}
        self._init_reload()

    def write(self, key: str, value: bytes) -> None:
        self._data[key] = bytes(value)

    def read(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def read_int(self, key: str, default: int = 0) -> int:
        return _decode_int(self.read(key), default)

    def write_int(self, key: str, value: int) -> None:
        self.write(key, _encode_int(value))

    def keys(self) -> List[str]:
        return sorted(self._data)


# === Collection helpers ===


def load_collection(kv: KeyValueStore, key: str, cls: Type[Record]) -> List[Record]:
    """Read a record collection, treating absent or corrupt data as empty.

    Corrupt cached state must never block startup, so decode failures are
    logged and swallowed here.
    """
    blob = kv.read(key)
    if blob is None:
        return []
    try:
        return decode_records(cls, blob)
    except RecordDecodeError as e:
        logger.warning(f"Discarding unreadable cached '{key}' collection: {e}")
        return []


def save_collection(kv: KeyValueStore, key: str, records: List[Record]) -> None:
    """Write a record collection as a JSON array."""
    kv.write(key, encode_records(records))
