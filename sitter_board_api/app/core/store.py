"""
Key‑value store collaborator.

The services treat persistence as a black box offering ``get``,
``put``, ``delete``, ``scan_prefix`` and a ``compare_and_swap``
primitive conditioned on a per‑key version stamp.  ``SQLiteKeyValueStore`` is
the default implementation, built on the single ``kv_store`` table
created by ``core.db``.  Records are JSON documents; the store never
looks inside them.

Any ``sqlite3.Error`` is re‑raised as ``StorageError``.  The store does
not retry failed calls.
"""

import json
import logging
import sqlite3
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from .db import get_connection
from .errors import StorageError


Record = Dict[str, Any]

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Interface consumed by the services."""

    @abstractmethod
    def get_with_version(self, key: str) -> Tuple[Optional[Record], int]:
        """Return ``(record, version)``; ``(None, 0)`` for a missing key."""

    @abstractmethod
    def put(self, key: str, record: Record) -> int:
        """Unconditionally write ``record`` and return its new version."""

    @abstractmethod
    def scan_prefix(self, prefix: str) -> List[Record]:
        """Return every record whose key starts with ``prefix``."""

    @abstractmethod
    def compare_and_swap(self, key: str, expected_version: int, record: Record) -> bool:
        """Write ``record`` only if the stored version equals ``expected_version``.

        An ``expected_version`` of ``0`` means the key must not exist
        yet.  Returns ``False`` when another writer got there first.
        """

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove ``key``; returns ``False`` if it did not exist."""

    def get(self, key: str) -> Optional[Record]:
        record, _ = self.get_with_version(key)
        return record


class SQLiteKeyValueStore(KeyValueStore):
    """Key‑value store backed by the ``kv_store`` SQLite table."""

    def get_with_version(self, key: str) -> Tuple[Optional[Record], int]:
        try:
            conn = get_connection()
            try:
                row = conn.execute(
                    "SELECT value, version FROM kv_store WHERE key = ?",
                    (key,),
                ).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read {key}") from e
        if not row:
            return None, 0
        return json.loads(row["value"]), row["version"]

    def put(self, key: str, record: Record) -> int:
        try:
            conn = get_connection()
            try:
                conn.execute(
                    """
                    INSERT INTO kv_store (key, value, version) VALUES (?, ?, 1)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        version = kv_store.version + 1,
                        updated_at = CURRENT_TIMESTAMP
                    """,
                    (key, json.dumps(record)),
                )
                row = conn.execute(
                    "SELECT version FROM kv_store WHERE key = ?", (key,)
                ).fetchone()
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to write {key}") from e
        return row["version"]

    def scan_prefix(self, prefix: str) -> List[Record]:
        try:
            conn = get_connection()
            try:
                rows = conn.execute(
                    "SELECT value FROM kv_store WHERE substr(key, 1, ?) = ? ORDER BY key",
                    (len(prefix), prefix),
                ).fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to scan prefix {prefix}") from e
        return [json.loads(row["value"]) for row in rows]

    def compare_and_swap(self, key: str, expected_version: int, record: Record) -> bool:
        value = json.dumps(record)
        try:
            conn = get_connection()
            try:
                if expected_version == 0:
                    cursor = conn.execute(
                        "INSERT OR IGNORE INTO kv_store (key, value, version) VALUES (?, ?, 1)",
                        (key, value),
                    )
                else:
                    # A single statement, so a failed or lost write leaves the
                    # previous record untouched.
                    cursor = conn.execute(
                        """
                        UPDATE kv_store
                        SET value = ?, version = version + 1, updated_at = CURRENT_TIMESTAMP
                        WHERE key = ? AND version = ?
                        """,
                        (value, key, expected_version),
                    )
                swapped = cursor.rowcount == 1
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to write {key}") from e
        if not swapped:
            logger.debug("Compare-and-swap on %s lost at version %s", key, expected_version)
        return swapped

    def delete(self, key: str) -> bool:
        try:
            conn = get_connection()
            try:
                cursor = conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
                deleted = cursor.rowcount == 1
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to delete {key}") from e
        return deleted


_store: Optional[KeyValueStore] = None


def get_store() -> KeyValueStore:
    """Return the process‑wide store, creating the SQLite one on first use."""
    global _store
    if _store is None:
        _store = SQLiteKeyValueStore()
    return _store


def set_store(store: Optional[KeyValueStore]) -> None:
    """Replace the process‑wide store (``None`` resets to the default)."""
    global _store
    _store = store
