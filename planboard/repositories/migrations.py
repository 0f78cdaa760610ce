# Rev 0.2.0

"""Schema creation and in-place upgrades (Rev 0.2.0)
- Creates the four planning tables and their indexes on first open
- Upgrades pre-partition databases: activities.sortOrder, subprojects table,
  a "Main" sub-project per project, activity_instances.subProjectId backfill
- PRAGMA user_version records the applied schema version
"""
from __future__ import annotations
import sqlite3
from typing import Iterable

from planboard.models.types import DEFAULT_SUBPROJECT_NAME
from planboard.utils.dates import utc_now_iso
from planboard.utils.logging_setup import get_logger

SCHEMA_VERSION = 2

EXPECTED_TABLES = ("projects", "subprojects", "activities", "activity_instances")

EXPECTED_INDEXES = (
    "idx_activities_project_name",
    "idx_subprojects_project_name",
    "idx_projects_date_range",
    "idx_activities_project_order",
    "idx_subprojects_project_order",
    "idx_instances_subproject_day",
    "idx_instances_activity_subproject_day",
)

_log = get_logger("migrations")


def user_version(conn: sqlite3.Connection) -> int:
    (version,) = conn.execute("PRAGMA user_version;").fetchone()
    return int(version or 0)


def table_exists(conn: sqlite3.Connection, table: str) -> bool:
    row = conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ? LIMIT 1", (table,)
    ).fetchone()
    return row is not None


def has_column(conn: sqlite3.Connection, table: str, column: str) -> bool:
    rows = conn.execute(f"PRAGMA table_info({table})").fetchall()
    # r: cid, name, type, notnull, dflt_value, pk
    return any(r[1] == column for r in rows)


def _exec_all(conn: sqlite3.Connection, statements: Iterable[str]) -> None:
    for sql in statements:
        conn.execute(sql)


def ensure_base_tables(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS projects (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            startDate TEXT NOT NULL,
            endDate TEXT NOT NULL,
            lengthDays INTEGER NOT NULL CHECK (lengthDays >= 1),
            createdAt TEXT NOT NULL,
            updatedAt TEXT NOT NULL
        )
        """
    )
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS activities (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            projectId INTEGER NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
            name TEXT NOT NULL,
            color TEXT NOT NULL,
            createdAt TEXT NOT NULL,
            sortOrder INTEGER NOT NULL DEFAULT 0
        )
        """
    )
    if not has_column(conn, "activities", "sortOrder"):
        _log.info("Adding activities.sortOrder")
        conn.execute("ALTER TABLE activities ADD COLUMN sortOrder INTEGER NOT NULL DEFAULT 0")
    conn.execute("UPDATE activities SET sortOrder = id WHERE sortOrder IS NULL OR sortOrder = 0")

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS subprojects (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            projectId INTEGER NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
            name TEXT NOT NULL,
            sortOrder INTEGER NOT NULL DEFAULT 0,
            createdAt TEXT NOT NULL
        )
        """
    )


def ensure_main_subproject_per_project(conn: sqlite3.Connection) -> int:
    """Give every project lacking a "Main" sub-project one; returns rows added."""
    cur = conn.execute(
        """
        INSERT INTO subprojects (projectId, name, sortOrder, createdAt)
        SELECT p.id,
               ?,
               COALESCE((SELECT MAX(s.sortOrder) + 1 FROM subprojects s WHERE s.projectId = p.id), 1),
               ?
        FROM projects p
        WHERE NOT EXISTS (
            SELECT 1 FROM subprojects s
            WHERE s.projectId = p.id AND LOWER(s.name) = LOWER(?)
        )
        """,
        (DEFAULT_SUBPROJECT_NAME, utc_now_iso(), DEFAULT_SUBPROJECT_NAME),
    )
    conn.execute("UPDATE subprojects SET sortOrder = id WHERE sortOrder IS NULL OR sortOrder = 0")
    if cur.rowcount:
        _log.info("Backfilled %d default sub-project(s)", cur.rowcount)
    return max(cur.rowcount, 0)


def _create_activity_instances_table(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS activity_instances (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            subProjectId INTEGER NOT NULL REFERENCES subprojects(id) ON DELETE CASCADE,
            activityId INTEGER NOT NULL REFERENCES activities(id) ON DELETE CASCADE,
            day TEXT NOT NULL,
            createdAt TEXT NOT NULL,
            UNIQUE(subProjectId, activityId, day)
        )
        """
    )


def migrate_activity_instances(conn: sqlite3.Connection) -> None:
    if not table_exists(conn, "activity_instances"):
        _create_activity_instances_table(conn)
        return

    if not has_column(conn, "activity_instances", "subProjectId"):
        _log.info("Rebuilding activity_instances with subProjectId")
        conn.execute("ALTER TABLE activity_instances RENAME TO activity_instances_legacy")
        _create_activity_instances_table(conn)
        cur = conn.execute(
            """
            INSERT INTO activity_instances (id, subProjectId, activityId, day, createdAt)
            SELECT ai.id, sp.id, ai.activityId, ai.day, ai.createdAt
            FROM activity_instances_legacy ai
            JOIN activities a ON a.id = ai.activityId
            JOIN subprojects sp
              ON sp.projectId = a.projectId
             AND LOWER(sp.name) = LOWER(?)
            """,
            (DEFAULT_SUBPROJECT_NAME,),
        )
        _log.info("Moved %d legacy instance(s) into their project's default sub-project", cur.rowcount)
        conn.execute("DROP TABLE activity_instances_legacy")
        return

    # transitional files may still hold NULL subProjectId values
    conn.execute(
        """
        UPDATE activity_instances
        SET subProjectId = (
            SELECT sp.id
            FROM activities a
            JOIN subprojects sp
              ON sp.projectId = a.projectId
             AND LOWER(sp.name) = LOWER(?)
            WHERE a.id = activity_instances.activityId
            LIMIT 1
        )
        WHERE subProjectId IS NULL
        """,
        (DEFAULT_SUBPROJECT_NAME,),
    )


def ensure_indexes(conn: sqlite3.Connection) -> None:
    _exec_all(conn, (
        "CREATE UNIQUE INDEX IF NOT EXISTS idx_activities_project_name ON activities(projectId, name COLLATE NOCASE)",
        "CREATE UNIQUE INDEX IF NOT EXISTS idx_subprojects_project_name ON subprojects(projectId, name COLLATE NOCASE)",
        "CREATE INDEX IF NOT EXISTS idx_projects_date_range ON projects(startDate, endDate)",
        "CREATE INDEX IF NOT EXISTS idx_activities_project_order ON activities(projectId, sortOrder, id)",
        "CREATE INDEX IF NOT EXISTS idx_subprojects_project_order ON subprojects(projectId, sortOrder, id)",
        "CREATE INDEX IF NOT EXISTS idx_instances_subproject_day ON activity_instances(subProjectId, day)",
        "CREATE INDEX IF NOT EXISTS idx_instances_activity_subproject_day "
        "ON activity_instances(activityId, subProjectId, day)",
    ))


def run_migrations(conn: sqlite3.Connection) -> int:
    """Bring ``conn`` to SCHEMA_VERSION inside one transaction; returns the version."""
    before = user_version(conn)
    conn.execute("BEGIN;")
    try:
        # leftover of a removed time-clock feature
        conn.execute("DROP INDEX IF EXISTS idx_clock_events_occurred_at")
        conn.execute("DROP TABLE IF EXISTS clock_events")

        ensure_base_tables(conn)
        if before < SCHEMA_VERSION:
            ensure_main_subproject_per_project(conn)
        migrate_activity_instances(conn)
        ensure_indexes(conn)
        if before < SCHEMA_VERSION:
            conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
    except Exception:
        conn.execute("ROLLBACK;")
        raise
    conn.execute("COMMIT;")

    if before < SCHEMA_VERSION:
        _log.info("Schema upgraded from version %d to %d", before, SCHEMA_VERSION)
    return max(before, SCHEMA_VERSION)
