# Rev 0.2.0
# planboard – SQLiteProjectRepository (Rev 0.2.0, schema version 2)
from __future__ import annotations
import sqlite3
from typing import List, Optional

from planboard.models.entities import Project
from planboard.repositories.sqlite_base_repository import SQLiteRepository

_COLUMNS = "id, name, startDate, endDate, lengthDays, createdAt, updatedAt"


class SQLiteProjectRepository(SQLiteRepository):
    """
    Project rows plus the project-wide counts that span child tables.
    Instances belong to a project through their activity.
    """

    # ---------- public API ----------

    def list_projects(self) -> List[Project]:
        rows = self._fetch_all(
            f"""
            SELECT {_COLUMNS}
            FROM projects
            ORDER BY datetime(updatedAt) DESC, id DESC
            """
        )
        return [Project.from_row(r) for r in rows]

    def get_project(self, project_id: int, conn: Optional[sqlite3.Connection] = None) -> Optional[Project]:
        row = self._fetch_one(f"SELECT {_COLUMNS} FROM projects WHERE id = ?", (project_id,), conn)
        return Project.from_row(row) if row else None

    def count_out_of_range_instances(
        self, project_id: int, start_date: str, end_date: str, conn: Optional[sqlite3.Connection] = None
    ) -> int:
        return self._count(
            """
            SELECT COUNT(*) AS total
            FROM activity_instances ai
            JOIN activities a ON a.id = ai.activityId
            WHERE a.projectId = ?
              AND (ai.day < ? OR ai.day > ?)
            """,
            (project_id, start_date, end_date),
            conn,
        )

    def count_instances(self, project_id: int) -> int:
        return self._count(
            """
            SELECT COUNT(*) AS total
            FROM activity_instances ai
            JOIN activities a ON a.id = ai.activityId
            WHERE a.projectId = ?
            """,
            (project_id,),
        )

    # ---------- mutations (inside a write unit) ----------

    def insert_project(
        self, conn: sqlite3.Connection, *, name: str, start_date: str, end_date: str, length_days: int, now: str
    ) -> int:
        cur = conn.execute(
            """
            INSERT INTO projects (name, startDate, endDate, lengthDays, createdAt, updatedAt)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (name, start_date, end_date, length_days, now, now),
        )
        return int(cur.lastrowid)

    def update_project(
        self,
        conn: sqlite3.Connection,
        project_id: int,
        *,
        name: str,
        start_date: str,
        end_date: str,
        length_days: int,
        now: str,
    ) -> bool:
        cur = conn.execute(
            """
            UPDATE projects
            SET name = ?, startDate = ?, endDate = ?, lengthDays = ?, updatedAt = ?
            WHERE id = ?
            """,
            (name, start_date, end_date, length_days, now, project_id),
        )
        return cur.rowcount > 0

    def delete_out_of_range_instances(
        self, conn: sqlite3.Connection, project_id: int, start_date: str, end_date: str
    ) -> int:
        cur = conn.execute(
            """
            DELETE FROM activity_instances
            WHERE id IN (
                SELECT ai.id
                FROM activity_instances ai
                JOIN activities a ON a.id = ai.activityId
                WHERE a.projectId = ?
                  AND (ai.day < ? OR ai.day > ?)
            )
            """,
            (project_id, start_date, end_date),
        )
        return cur.rowcount

    def delete_project(self, conn: sqlite3.Connection, project_id: int) -> bool:
        cur = conn.execute("DELETE FROM projects WHERE id = ?", (project_id,))
        return cur.rowcount > 0
