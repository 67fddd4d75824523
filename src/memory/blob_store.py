"""
Keyed blob storage, the only durability primitive the stores depend on.

Schema (SQLite)
---------------
blobs : key TEXT PK, value BLOB, updated_at TEXT

Usage
-----
    blobs = SQLiteBlobStore()              # opens/creates data/chatbot.db
    blobs.set("k", b"...")
    blobs.get("k")                         # b"..." or None
"""
from __future__ import annotations

import os
import sqlite3
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from src.utils.logging import get_logger

logger = get_logger(__name__)

_DEFAULT_DB = Path(__file__).resolve().parents[2] / "data" / "chatbot.db"


def key_part(value: str) -> str:
    """
    Escape one id for use inside a composite key.

    ``%`` and ``_`` are percent-encoded so that ``_`` only ever separates
    parts: ids without either character (UUIDs) are left unchanged.
    """
    return value.replace("%", "%25").replace("_", "%5F")


class KeyedBlobStore(ABC):
    """A persistent key → bytes store."""

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """Return the stored bytes for *key*, or None when absent."""

    @abstractmethod
    def set(self, key: str, value: bytes) -> None:
        """Store *value* under *key*, replacing any previous value."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete *key*; removing a missing key is a no-op."""

    @abstractmethod
    def keys(self, prefix: str = "") -> List[str]:
        """Return all keys starting with *prefix*."""


class SQLiteBlobStore(KeyedBlobStore):
    """SQLite-backed blob store, durable across process restarts."""

    def __init__(self, db_path: Optional[Path] = None) -> None:
        env_path = os.environ.get("CHATBOT_DB_PATH")
        self.db_path = Path(db_path or env_path or _DEFAULT_DB)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    # ── schema ────────────────────────────────────────────────────────────────

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS blobs (
                    key         TEXT PRIMARY KEY,
                    value       BLOB NOT NULL,
                    updated_at  TEXT NOT NULL
                );
            """)

    # ── public API ────────────────────────────────────────────────────────────

    # Read and write failures are logged and degrade to "absent" / no-op.

    def get(self, key: str) -> Optional[bytes]:
        try:
            with self._connect() as conn:
                row = conn.execute("SELECT value FROM blobs WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as exc:
            logger.error("Blob read failed for %s: %s", key, exc, exc_info=True)
            return None
        return bytes(row[0]) if row else None

    def set(self, key: str, value: bytes) -> None:
        now = datetime.now(timezone.utc).isoformat()
        try:
            with self._connect() as conn:
                conn.execute(
                    "INSERT OR REPLACE INTO blobs (key, value, updated_at) VALUES (?, ?, ?)",
                    (key, sqlite3.Binary(value), now),
                )
        except sqlite3.Error as exc:
            logger.error("Blob write failed for %s: %s", key, exc, exc_info=True)

    def remove(self, key: str) -> None:
        try:
            with self._connect() as conn:
                conn.execute("DELETE FROM blobs WHERE key = ?", (key,))
        except sqlite3.Error as exc:
            logger.error("Blob delete failed for %s: %s", key, exc, exc_info=True)

    def keys(self, prefix: str = "") -> List[str]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT key FROM blobs WHERE substr(key, 1, ?) = ? ORDER BY key",
                (len(prefix), prefix),
            ).fetchall()
        return [r[0] for r in rows]


class InMemoryBlobStore(KeyedBlobStore):
    """Process-local blob store; contents vanish with the process."""

    def __init__(self) -> None:
        self._data: Dict[str, bytes] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        with self._lock:
            self._data[key] = bytes(value)

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self, prefix: str = "") -> List[str]:
        with self._lock:
            return sorted(k for k in self._data if k.startswith(prefix))
