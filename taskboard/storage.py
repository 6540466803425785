"""
Key-value storage backends for board persistence.

The board only needs an opaque get/set/remove primitive. Two backends:
  MemoryKeyValueStore  - dict-backed, for tests and throwaway sessions
  SqliteKeyValueStore  - system_state table in a SQLite file
"""
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterator, Optional, Protocol

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the underlying store cannot be read or written."""
    pass


class KeyValueStore(Protocol):
    """Opaque string key/value primitive supplied by the environment."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryKeyValueStore:
    """In-process store. Values live as long as the object."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


def _connect(db_path: str) -> sqlite3.Connection:
    """Open a connection with dict-like rows."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def _session(db_path: str) -> Iterator[sqlite3.Connection]:
    """Transaction on a fresh connection, closed afterwards."""
    conn = _connect(db_path)
    try:
        with conn:
            yield conn
    finally:
        conn.close()


class SqliteKeyValueStore:
    """SQLite-backed store using a single system_state table."""

    def __init__(self, db_path: str = None):
        """Initialize store and create the table if needed."""
        if db_path is None:
            db_path = str(Path.home() / ".local" / "share" / "taskboard" / "board.db")
        self.db_path = db_path
        try:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
            self._init_schema()
        except (OSError, sqlite3.Error) as e:
            raise StorageError(f"Cannot open store at {db_path}: {e}") from e
        logger.debug(f"Opened key-value store at {db_path}")

    def _init_schema(self):
        with _session(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS system_state (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.commit()

    def get(self, key: str) -> Optional[str]:
        try:
            with _session(self.db_path) as conn:
                row = conn.execute(
                    "SELECT value FROM system_state WHERE key = ? LIMIT 1",
                    (key,)
                ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Error reading {key}: {e}") from e
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        now = datetime.now(timezone.utc).isoformat()
        try:
            with _session(self.db_path) as conn:
                conn.execute("""
                    INSERT INTO system_state (key, value, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at
                """, (key, value, now))
                conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Error writing {key}: {e}") from e

    def remove(self, key: str) -> None:
        try:
            with _session(self.db_path) as conn:
                conn.execute("DELETE FROM system_state WHERE key = ?", (key,))
                conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Error removing {key}: {e}") from e


def open_store(backend: str, db_path: Optional[str] = None) -> KeyValueStore:
    """Build the store named by config ("sqlite" or "memory")."""
    if backend == "memory":
        return MemoryKeyValueStore()
    if backend == "sqlite":
        return SqliteKeyValueStore(db_path)
    raise ValueError(f"Unknown storage backend: {backend}")
