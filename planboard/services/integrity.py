# Rev 0.2.0
"""Whole-database invariant checks.

Each check returns human-readable violation lines; an empty list from
``check_invariants`` means the file is consistent.
"""
from __future__ import annotations

from typing import List

from planboard.repositories.db import Database
from planboard.utils.dates import diff_days_inclusive, is_date_key


def _length_mismatches(db: Database) -> List[str]:
    out = []
    for p in db.all("SELECT id, startDate, endDate, lengthDays FROM projects ORDER BY id"):
        if not (is_date_key(p["startDate"]) and is_date_key(p["endDate"])):
            out.append(f"project #{p['id']}: malformed date range {p['startDate']}..{p['endDate']}")
            continue
        expected = diff_days_inclusive(p["startDate"], p["endDate"])
        if expected < 1 or expected != p["lengthDays"]:
            out.append(f"project #{p['id']}: lengthDays={p['lengthDays']} but range spans {expected} day(s)")
    return out


def _instances_out_of_range(db: Database) -> List[str]:
    rows = db.all(
        """
        SELECT ai.id, ai.day, p.id AS projectId, p.startDate, p.endDate
        FROM activity_instances ai
        JOIN activities a ON a.id = ai.activityId
        JOIN projects p ON p.id = a.projectId
        WHERE ai.day < p.startDate OR ai.day > p.endDate
        ORDER BY ai.id
        """
    )
    return [
        f"instance #{r['id']}: day {r['day']} outside project #{r['projectId']} ({r['startDate']}..{r['endDate']})"
        for r in rows
    ]


def _instances_across_projects(db: Database) -> List[str]:
    rows = db.all(
        """
        SELECT ai.id, a.projectId AS activityProject, sp.projectId AS subProject
        FROM activity_instances ai
        JOIN activities a ON a.id = ai.activityId
        JOIN subprojects sp ON sp.id = ai.subProjectId
        WHERE a.projectId <> sp.projectId
        ORDER BY ai.id
        """
    )
    return [
        f"instance #{r['id']}: activity in project #{r['activityProject']}, sub-project in project #{r['subProject']}"
        for r in rows
    ]


def _projects_without_subprojects(db: Database) -> List[str]:
    rows = db.all(
        """
        SELECT p.id FROM projects p
        WHERE NOT EXISTS (SELECT 1 FROM subprojects s WHERE s.projectId = p.id)
        ORDER BY p.id
        """
    )
    return [f"project #{r['id']}: has no sub-project" for r in rows]


def _sort_order_problems(db: Database, table: str) -> List[str]:
    out = []
    for r in db.all(f"SELECT id, projectId FROM {table} WHERE sortOrder < 1 ORDER BY id"):
        out.append(f"{table} #{r['id']}: non-positive sortOrder")
    dupes = db.all(
        f"""
        SELECT projectId, sortOrder, COUNT(*) AS total
        FROM {table}
        GROUP BY projectId, sortOrder
        HAVING COUNT(*) > 1
        ORDER BY projectId, sortOrder
        """
    )
    for r in dupes:
        out.append(f"{table}: sortOrder {r['sortOrder']} used {r['total']} times in project #{r['projectId']}")
    return out


def _duplicate_instances(db: Database) -> List[str]:
    rows = db.all(
        """
        SELECT subProjectId, activityId, day, COUNT(*) AS total
        FROM activity_instances
        GROUP BY subProjectId, activityId, day
        HAVING COUNT(*) > 1
        """
    )
    return [
        f"instances: {r['total']} rows for sub-project #{r['subProjectId']}, activity #{r['activityId']}, {r['day']}"
        for r in rows
    ]


def _foreign_key_problems(db: Database) -> List[str]:
    rows = db.all("PRAGMA foreign_key_check")
    return [f"{r['table']} rowid {r['rowid']}: dangling reference to {r['parent']}" for r in rows]


def check_invariants(db: Database) -> List[str]:
    problems: List[str] = []
    problems += _length_mismatches(db)
    problems += _instances_out_of_range(db)
    problems += _instances_across_projects(db)
    problems += _projects_without_subprojects(db)
    problems += _sort_order_problems(db, "subprojects")
    problems += _sort_order_problems(db, "activities")
    problems += _duplicate_instances(db)
    problems += _foreign_key_problems(db)
    return problems
