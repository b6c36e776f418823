"""Bucketed byte-string key/value store on top of a single SQLite file.

Read-write transactions run under BEGIN IMMEDIATE and an in-process writer
lock, so at most one writer is active at a time. Read-only transactions pin
a WAL snapshot on entry and never see writes committed after that point.
"""
from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Tuple

from .errors import StoreError

SCHEMA_SQL = Path(__file__).with_name("schema.sql")


def _as_bytes(value) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def get_connection(db_path: str, timeout: float = 5.0) -> sqlite3.Connection:
    # isolation_level=None: transactions are opened explicitly below
    conn = sqlite3.connect(db_path, timeout=timeout, isolation_level=None, check_same_thread=False)
    conn.execute("PRAGMA foreign_keys = ON")
    conn.execute("PRAGMA synchronous = FULL")
    return conn


class Bucket:
    def __init__(self, tx: "Tx", name: bytes):
        self._tx = tx
        self.name = name

    def get(self, key) -> Optional[bytes]:
        row = self._tx.conn.execute(
            "SELECT value FROM entry WHERE bucket = ? AND key = ?",
            (self.name, _as_bytes(key)),
        ).fetchone()
        if row is None:
            return None
        return _as_bytes(row[0])

    def put(self, key, value) -> None:
        self._tx.check_writable()
        key = _as_bytes(key)
        if not key:
            raise StoreError("key must not be empty")
        self._tx.conn.execute(
            "INSERT INTO entry(bucket, key, value) VALUES(?, ?, ?) "
            "ON CONFLICT(bucket, key) DO UPDATE SET value = excluded.value",
            (self.name, key, _as_bytes(value)),
        )

    def items(self) -> Iterator[Tuple[bytes, bytes]]:
        cur = self._tx.conn.execute(
            "SELECT key, value FROM entry WHERE bucket = ? ORDER BY key",
            (self.name,),
        )
        for key, value in cur:
            yield _as_bytes(key), _as_bytes(value)


class Tx:
    """One open transaction; only valid inside KVStore.update()/view()."""

    def __init__(self, conn: sqlite3.Connection, writable: bool):
        self.conn = conn
        self.writable = writable

    def check_writable(self) -> None:
        if not self.writable:
            raise StoreError("write attempted inside a read-only transaction")

    def bucket(self, name) -> Optional[Bucket]:
        name = _as_bytes(name)
        row = self.conn.execute("SELECT 1 FROM bucket WHERE name = ?", (name,)).fetchone()
        return Bucket(self, name) if row else None

    def create_bucket_if_not_exists(self, name) -> Bucket:
        self.check_writable()
        name = _as_bytes(name)
        if not name:
            raise StoreError("bucket name must not be empty")
        self.conn.execute("INSERT OR IGNORE INTO bucket(name) VALUES(?)", (name,))
        return Bucket(self, name)

    def buckets(self) -> Iterator[Tuple[bytes, Bucket]]:
        names = [_as_bytes(r[0]) for r in self.conn.execute("SELECT name FROM bucket ORDER BY name")]
        for name in names:
            yield name, Bucket(self, name)


class KVStore:
    def __init__(self, path: str, timeout: float = 5.0):
        self.path = str(path)
        self.timeout = timeout
        self._write_lock = threading.Lock()
        self._closed = False

    @classmethod
    def open(cls, path: str, timeout: float = 5.0) -> "KVStore":
        """Open or create the store file and apply the schema (idempotent)."""
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        store = cls(path, timeout=timeout)
        try:
            conn = get_connection(store.path, timeout)
            try:
                conn.execute("PRAGMA journal_mode = WAL")
                conn.executescript(SCHEMA_SQL.read_text(encoding="utf-8"))
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StoreError(f"cannot open store {path}: {e}") from e
        return store

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self._closed = True

    def _connect(self) -> sqlite3.Connection:
        if self._closed:
            raise StoreError("store is closed")
        return get_connection(self.path, self.timeout)

    @contextmanager
    def update(self) -> Iterator[Tx]:
        """Read-write transaction: commit on success, roll back and re-raise otherwise."""
        with self._write_lock:
            conn = self._connect()
            try:
                conn.execute("BEGIN IMMEDIATE")
                try:
                    yield Tx(conn, writable=True)
                except BaseException:
                    conn.rollback()
                    raise
                else:
                    conn.execute("COMMIT")
            finally:
                conn.close()

    @contextmanager
    def view(self) -> Iterator[Tx]:
        conn = self._connect()
        try:
            conn.execute("BEGIN")
            # the first read fixes the snapshot
            conn.execute("SELECT count(*) FROM bucket").fetchone()
            try:
                yield Tx(conn, writable=False)
            finally:
                conn.rollback()
        finally:
            conn.close()
