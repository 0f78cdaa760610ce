# Rev 0.2.0
from __future__ import annotations
import sqlite3
from typing import List, Optional, Set

from planboard.models.entities import Activity
from planboard.repositories.sqlite_base_repository import SQLiteOrderedRepository

_COLUMNS = "id, projectId, name, color, createdAt, sortOrder"


class SQLiteActivityRepository(SQLiteOrderedRepository):
    """Colored activity palette of a project, ordered by (sortOrder, id)."""

    table = "activities"

    def list_for_project(self, project_id: int) -> List[Activity]:
        rows = self._fetch_all(
            f"""
            SELECT {_COLUMNS}
            FROM activities
            WHERE projectId = ?
            ORDER BY sortOrder ASC, id ASC
            """,
            (project_id,),
        )
        return [Activity.from_row(r) for r in rows]

    def get(self, project_id: int, activity_id: int, conn: Optional[sqlite3.Connection] = None) -> Optional[Activity]:
        row = self._fetch_one(
            f"SELECT {_COLUMNS} FROM activities WHERE projectId = ? AND id = ?",
            (project_id, activity_id),
            conn,
        )
        return Activity.from_row(row) if row else None

    def ids_for_project(self, project_id: int) -> Set[int]:
        return {int(r["id"]) for r in self._fetch_all("SELECT id FROM activities WHERE projectId = ?", (project_id,))}

    def insert(self, conn: sqlite3.Connection, project_id: int, name: str, color: str, now: str) -> int:
        cur = conn.execute(
            "INSERT INTO activities (projectId, name, color, createdAt, sortOrder) VALUES (?, ?, ?, ?, ?)",
            (project_id, name, color, now, self.next_sort_order(project_id, conn)),
        )
        return int(cur.lastrowid)

    def update(self, conn: sqlite3.Connection, activity_id: int, name: str, color: str) -> bool:
        cur = conn.execute("UPDATE activities SET name = ?, color = ? WHERE id = ?", (name, color, activity_id))
        return cur.rowcount > 0
