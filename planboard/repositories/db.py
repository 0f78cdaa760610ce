# Rev 0.2.0

"""SQLite image store (Rev 0.2.0)
- The database lives in an in-memory connection, foreign_keys=ON
- Reads run directly; writes go through a single-worker FIFO queue
- Every committed write unit re-persists the whole image:
  serialize -> <file>.tmp -> os.replace (overwrite in place if rename is refused)
"""
from __future__ import annotations
import os
import sqlite3
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar

from planboard.repositories.migrations import run_migrations
from planboard.utils.logging_setup import get_logger

T = TypeVar("T")

Params = Sequence[Any]
WriteUnit = Callable[[sqlite3.Connection], T]


def _row_to_dict(cursor: sqlite3.Cursor, row: tuple) -> Dict[str, Any]:
    return {d[0]: row[i] for i, d in enumerate(cursor.description)}


def write_image(path: Path, data: bytes) -> None:
    """Atomically replace ``path`` with ``data``."""
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_bytes(data)
    try:
        os.replace(tmp, path)
    except PermissionError:
        # Some Windows setups refuse to rename over an existing file.
        path.write_bytes(data)
        if tmp.exists():
            tmp.unlink()


class Database:
    def __init__(self, path: Path | str | None, *, migrate: bool = True) -> None:
        self._log = get_logger("Database")
        self.path = Path(path) if path is not None else None
        self._lock = threading.RLock()
        self._queue = ThreadPoolExecutor(max_workers=1, thread_name_prefix="planboard-writer")
        self._closed = False
        # unmigrated opens stay read-only on disk until a unit commits
        self._dirty = migrate

        self.conn = sqlite3.connect(":memory:", isolation_level=None, check_same_thread=False)
        if self.path is not None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if self.path.exists():
                self.conn.deserialize(self.path.read_bytes())
                self._log.info("Loaded database image %s", self.path)
            else:
                self._log.info("Creating database image %s", self.path)
        self.conn.execute("PRAGMA foreign_keys=ON;")

        if migrate:
            with self._lock:
                run_migrations(self.conn)
            self.persist()

    # ---------- reads ----------

    def all(self, sql: str, params: Params = ()) -> List[Dict[str, Any]]:
        with self._lock:
            cur = self.conn.execute(sql, tuple(params))
            return [_row_to_dict(cur, r) for r in cur.fetchall()]

    def one(self, sql: str, params: Params = ()) -> Optional[Dict[str, Any]]:
        rows = self.all(sql, params)
        return rows[0] if rows else None

    def scalar(self, sql: str, params: Params = ()) -> Any:
        with self._lock:
            row = self.conn.execute(sql, tuple(params)).fetchone()
        return row[0] if row else None

    # ---------- writes ----------

    def run(self, sql: str, params: Params = ()) -> "Future[int]":
        """Queue one statement; the future resolves to its lastrowid."""
        return self.submit(lambda conn: conn.execute(sql, tuple(params)).lastrowid)

    def submit(self, unit: WriteUnit) -> "Future[T]":
        """Queue ``unit(conn)`` to run inside a single transaction."""
        if self._closed:
            raise RuntimeError("Database is closed")
        return self._queue.submit(self._apply, unit)

    def _apply(self, unit: WriteUnit) -> T:
        with self._lock:
            self.conn.execute("BEGIN IMMEDIATE;")
            try:
                result = unit(self.conn)
            except BaseException:
                self.conn.execute("ROLLBACK;")
                raise
            self.conn.execute("COMMIT;")
            self._dirty = True
            self.persist()
            return result

    def persist(self) -> None:
        if self.path is None:
            return
        with self._lock:
            data = self.conn.serialize()
        write_image(self.path, data)

    # ---------- lifecycle ----------

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.shutdown(wait=True)
        if self._dirty:
            self.persist()
        self.conn.close()
        self._log.info("Closed database %s", self.path or ":memory:")

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
