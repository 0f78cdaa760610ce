# Rev 0.2.0
from __future__ import annotations
import sqlite3
from typing import List, Optional, Set

from planboard.models.entities import SubProject
from planboard.repositories.sqlite_base_repository import SQLiteOrderedRepository

_COLUMNS = "id, projectId, name, sortOrder, createdAt"


class SQLiteSubProjectRepository(SQLiteOrderedRepository):
    """Sub-projects of a project, ordered by (sortOrder, id)."""

    table = "subprojects"

    def list_for_project(self, project_id: int) -> List[SubProject]:
        rows = self._fetch_all(
            f"""
            SELECT {_COLUMNS}
            FROM subprojects
            WHERE projectId = ?
            ORDER BY sortOrder ASC, id ASC
            """,
            (project_id,),
        )
        return [SubProject.from_row(r) for r in rows]

    def get(self, project_id: int, sub_project_id: int, conn: Optional[sqlite3.Connection] = None) -> Optional[SubProject]:
        row = self._fetch_one(
            f"SELECT {_COLUMNS} FROM subprojects WHERE projectId = ? AND id = ?",
            (project_id, sub_project_id),
            conn,
        )
        return SubProject.from_row(row) if row else None

    def names_for_project(self, project_id: int, conn: Optional[sqlite3.Connection] = None) -> Set[str]:
        """Case-folded names, matching the NOCASE uniqueness index."""
        rows = self._fetch_all("SELECT name FROM subprojects WHERE projectId = ?", (project_id,), conn)
        return {r["name"].lower() for r in rows}

    def insert(self, conn: sqlite3.Connection, project_id: int, name: str, now: str, sort_order: Optional[int] = None) -> int:
        if sort_order is None:
            sort_order = self.next_sort_order(project_id, conn)
        cur = conn.execute(
            "INSERT INTO subprojects (projectId, name, sortOrder, createdAt) VALUES (?, ?, ?, ?)",
            (project_id, name, sort_order, now),
        )
        return int(cur.lastrowid)

    def rename(self, conn: sqlite3.Connection, sub_project_id: int, name: str) -> bool:
        cur = conn.execute("UPDATE subprojects SET name = ? WHERE id = ?", (name, sub_project_id))
        return cur.rowcount > 0
