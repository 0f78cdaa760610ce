# Rev 0.2.0
# planboard – shared plumbing for the SQLite repositories
from __future__ import annotations
import sqlite3
from typing import Any, Dict, List, Optional, Sequence

from planboard.repositories.db import Database


class SQLiteRepository:
    """
    Reads go through the store (or, inside a write unit, the unit's own
    connection so uncommitted rows are visible). Writes always take the
    unit's connection: repositories never open transactions themselves.
    """

    def __init__(self, db: Database):
        self._db = db

    def _fetch_all(
        self, sql: str, params: Sequence[Any] = (), conn: Optional[sqlite3.Connection] = None
    ) -> List[Dict[str, Any]]:
        if conn is None:
            return self._db.all(sql, params)
        cur = conn.execute(sql, tuple(params))
        cols = [d[0] for d in cur.description]
        return [{cols[i]: row[i] for i in range(len(cols))} for row in cur.fetchall()]

    def _fetch_one(
        self, sql: str, params: Sequence[Any] = (), conn: Optional[sqlite3.Connection] = None
    ) -> Optional[Dict[str, Any]]:
        rows = self._fetch_all(sql, params, conn)
        return rows[0] if rows else None

    def _count(self, sql: str, params: Sequence[Any] = (), conn: Optional[sqlite3.Connection] = None) -> int:
        row = self._fetch_one(sql, params, conn)
        if not row:
            return 0
        value = next(iter(row.values()))
        return int(value) if value is not None else 0


class SQLiteOrderedRepository(SQLiteRepository):
    """Per-project lists ordered by a positive, unique sortOrder."""

    table: str = ""

    def next_sort_order(self, project_id: int, conn: Optional[sqlite3.Connection] = None) -> int:
        return self._count(
            f"SELECT COALESCE(MAX(sortOrder), 0) + 1 AS nextSortOrder FROM {self.table} WHERE projectId = ?",
            (project_id,),
            conn,
        )

    def find_neighbor(self, project_id: int, sort_order: int, direction: str) -> Optional[Dict[str, Any]]:
        """Closest row strictly above ("up") or below ("down") ``sort_order``."""
        if direction == "up":
            sql = f"""
                SELECT id, sortOrder FROM {self.table}
                WHERE projectId = ? AND sortOrder < ?
                ORDER BY sortOrder DESC, id DESC
                LIMIT 1
            """
        else:
            sql = f"""
                SELECT id, sortOrder FROM {self.table}
                WHERE projectId = ? AND sortOrder > ?
                ORDER BY sortOrder ASC, id ASC
                LIMIT 1
            """
        return self._fetch_one(sql, (project_id, sort_order))

    def swap_sort_order(
        self, conn: sqlite3.Connection, first_id: int, first_order: int, second_id: int, second_order: int
    ) -> None:
        conn.execute(f"UPDATE {self.table} SET sortOrder = ? WHERE id = ?", (second_order, first_id))
        conn.execute(f"UPDATE {self.table} SET sortOrder = ? WHERE id = ?", (first_order, second_id))

    def count_for_project(self, project_id: int, conn: Optional[sqlite3.Connection] = None) -> int:
        return self._count(f"SELECT COUNT(*) AS total FROM {self.table} WHERE projectId = ?", (project_id,), conn)

    def delete(self, conn: sqlite3.Connection, row_id: int) -> bool:
        # activity_instances rows go with it through ON DELETE CASCADE
        cur = conn.execute(f"DELETE FROM {self.table} WHERE id = ?", (row_id,))
        return cur.rowcount > 0
