"""SQLite tag store adapter.

Implements the core TagStorePort using a single SQLite database file.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from typing import Iterator, List, Optional, Tuple

from core.errors import StoreError

LOGGER = logging.getLogger(__name__)


class SQLiteTransaction:
    """Key-value view of the tags table bound to an open transaction."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def get(self, key: str) -> Optional[bytes]:
        try:
            row = self._conn.execute(
                "SELECT stickers FROM tags WHERE tag = ?",
                (key,),
            ).fetchone()
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to read tag {key!r}: {exc}") from exc
        return bytes(row["stickers"]) if row else None

    def set(self, key: str, value: bytes) -> None:
        try:
            self._conn.execute(
                """
                INSERT INTO tags (tag, stickers)
                VALUES (?, ?)
                ON CONFLICT(tag) DO UPDATE SET stickers = excluded.stickers
                """,
                (key, value),
            )
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to write tag {key!r}: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            self._conn.execute("DELETE FROM tags WHERE tag = ?", (key,))
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to delete tag {key!r}: {exc}") from exc


class SQLiteTagStore:
    """Thin SQLite wrapper that satisfies the TagStorePort contract.

    One connection is opened for the whole process. Transactions are
    serialized by a lock and started with BEGIN IMMEDIATE, so a
    read-modify-write on a tag can never interleave with another writer,
    including one in a different process.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()

    def open(self) -> None:
        """Open the connection and create the schema if needed.

        Tables:
        - tags: one row per normalized tag, stickers as an encoded entry
        """

        with self._lock:
            if self._conn is not None:
                return
            try:
                # isolation_level=None leaves transaction control to us.
                conn = sqlite3.connect(
                    self._db_path,
                    check_same_thread=False,
                    isolation_level=None,
                )
                conn.row_factory = sqlite3.Row
                # Fields:
                # - tag: NFC-normalized tag (PRIMARY KEY)
                # - stickers: JSON array of sticker refs in insertion order
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS tags (
                        tag TEXT PRIMARY KEY,
                        stickers BLOB NOT NULL
                    )
                    """
                )
            except sqlite3.Error as exc:
                raise StoreError(f"Failed to open tag store at {self._db_path}: {exc}") from exc
            self._conn = conn
        LOGGER.info("Tag store opened at %s", self._db_path)

    def close(self) -> None:
        with self._lock:
            if self._conn is None:
                return
            self._conn.close()
            self._conn = None
        LOGGER.info("Tag store closed")

    def _require_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreError("Tag store is not open")
        return self._conn

    @contextmanager
    def transaction(self) -> Iterator[SQLiteTransaction]:
        """Run the block in one transaction; roll back if it raises."""

        with self._lock:
            conn = self._require_conn()
            try:
                conn.execute("BEGIN IMMEDIATE")
            except sqlite3.Error as exc:
                raise StoreError(f"Failed to begin transaction: {exc}") from exc

            try:
                yield SQLiteTransaction(conn)
            except BaseException:
                self._rollback(conn)
                raise

            try:
                conn.execute("COMMIT")
            except sqlite3.Error as exc:
                self._rollback(conn)
                raise StoreError(f"Failed to commit transaction: {exc}") from exc

    @staticmethod
    def _rollback(conn: sqlite3.Connection) -> None:
        if not conn.in_transaction:
            return
        try:
            conn.execute("ROLLBACK")
        except sqlite3.Error:
            LOGGER.exception("Rollback failed")

    def iter_entries(self) -> List[Tuple[str, bytes]]:
        """Return all (tag, encoded entry) rows ordered by tag."""

        with self._lock:
            conn = self._require_conn()
            try:
                rows = conn.execute("SELECT tag, stickers FROM tags ORDER BY tag").fetchall()
            except sqlite3.Error as exc:
                raise StoreError(f"Failed to list tags: {exc}") from exc
        return [(row["tag"], bytes(row["stickers"])) for row in rows]
