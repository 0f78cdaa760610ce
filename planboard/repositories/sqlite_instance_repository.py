# Rev 0.2.0
from __future__ import annotations
import sqlite3
from typing import Iterable, List, Optional

from planboard.models.entities import Instance
from planboard.repositories.sqlite_base_repository import SQLiteRepository

_COLUMNS = "ai.id, ai.subProjectId, ai.activityId, ai.day, ai.createdAt"


class SQLiteInstanceRepository(SQLiteRepository):
    """
    activity_instances: at most one row per (subProjectId, activityId, day).
    Cleanup on parent deletes is left to ON DELETE CASCADE.
    """

    # ---------- reads ----------

    def list_for_project(self, project_id: int) -> List[Instance]:
        rows = self._fetch_all(
            f"""
            SELECT {_COLUMNS}
            FROM activity_instances ai
            JOIN activities a ON a.id = ai.activityId
            WHERE a.projectId = ?
            ORDER BY ai.day ASC, a.sortOrder ASC, ai.id ASC
            """,
            (project_id,),
        )
        return [Instance.from_row(r) for r in rows]

    def list_for_subproject(self, sub_project_id: int, conn: Optional[sqlite3.Connection] = None) -> List[Instance]:
        rows = self._fetch_all(
            f"""
            SELECT {_COLUMNS}
            FROM activity_instances ai
            WHERE ai.subProjectId = ?
            ORDER BY ai.day ASC, ai.id ASC
            """,
            (sub_project_id,),
            conn,
        )
        return [Instance.from_row(r) for r in rows]

    def get_by_key(
        self, sub_project_id: int, activity_id: int, day: str, conn: Optional[sqlite3.Connection] = None
    ) -> Optional[Instance]:
        row = self._fetch_one(
            f"""
            SELECT {_COLUMNS}
            FROM activity_instances ai
            WHERE ai.subProjectId = ? AND ai.activityId = ? AND ai.day = ?
            """,
            (sub_project_id, activity_id, day),
            conn,
        )
        return Instance.from_row(row) if row else None

    def count_for_activity(self, activity_id: int, conn: Optional[sqlite3.Connection] = None) -> int:
        return self._count(
            "SELECT COUNT(*) AS total FROM activity_instances WHERE activityId = ?", (activity_id,), conn
        )

    def count_for_subproject(self, sub_project_id: int, conn: Optional[sqlite3.Connection] = None) -> int:
        return self._count(
            "SELECT COUNT(*) AS total FROM activity_instances WHERE subProjectId = ?", (sub_project_id,), conn
        )

    # ---------- mutations (inside a write unit) ----------

    def insert(self, conn: sqlite3.Connection, sub_project_id: int, activity_id: int, day: str, now: str) -> int:
        cur = conn.execute(
            "INSERT INTO activity_instances (subProjectId, activityId, day, createdAt) VALUES (?, ?, ?, ?)",
            (sub_project_id, activity_id, day, now),
        )
        return int(cur.lastrowid)

    def delete(self, conn: sqlite3.Connection, instance_id: int) -> bool:
        cur = conn.execute("DELETE FROM activity_instances WHERE id = ?", (instance_id,))
        return cur.rowcount > 0

    def delete_many(self, conn: sqlite3.Connection, instance_ids: Iterable[int]) -> int:
        cur = conn.executemany("DELETE FROM activity_instances WHERE id = ?", [(i,) for i in instance_ids])
        return max(cur.rowcount, 0)

    def move(self, conn: sqlite3.Connection, instance_id: int, day: str) -> None:
        conn.execute("UPDATE activity_instances SET day = ? WHERE id = ?", (day, instance_id))

    def copy_into(
        self,
        conn: sqlite3.Connection,
        source_sub_project_id: int,
        target_sub_project_id: int,
        now: str,
        activity_ids: Optional[Iterable[int]] = None,
    ) -> int:
        sql = """
            INSERT INTO activity_instances (subProjectId, activityId, day, createdAt)
            SELECT ?, activityId, day, ?
            FROM activity_instances
            WHERE subProjectId = ?
        """
        params: list = [target_sub_project_id, now, source_sub_project_id]
        if activity_ids is not None:
            ids = sorted(set(activity_ids))
            if not ids:
                return 0
            sql += f" AND activityId IN ({', '.join('?' * len(ids))})"
            params.extend(ids)
        sql += " ORDER BY day ASC, id ASC"
        cur = conn.execute(sql, params)
        return cur.rowcount
