# tests/test_integrity.py
from __future__ import annotations

from planboard.services.integrity import check_invariants


def _raw(db, sql, params=()):
    # bypasses the service to plant inconsistent rows
    db.run(sql, params).result()


def test_clean_database_passes(db, service, project, main_sub, activity):
    service.assign_instance(project.id, activity.id, {"subProjectId": main_sub.id, "date": "2026-03-02"})
    assert check_invariants(db) == []


def test_reports_length_mismatch(db, project):
    _raw(db, "UPDATE projects SET lengthDays = 3 WHERE id = ?", (project.id,))
    problems = check_invariants(db)
    assert len(problems) == 1
    assert "lengthDays=3" in problems[0]


def test_reports_out_of_range_instance(db, service, project, main_sub, activity):
    inst = service.assign_instance(project.id, activity.id, {"subProjectId": main_sub.id, "date": "2026-03-02"})
    _raw(db, "UPDATE activity_instances SET day = '2026-04-01' WHERE id = ?", (inst.id,))
    assert any("outside project" in p for p in check_invariants(db))


def test_reports_cross_project_instance(db, service, project, main_sub):
    other = service.create_project({"name": "Other", "startDate": "2026-03-02", "lengthDays": 7})
    foreign = service.create_activity(other.id, {"name": "Foreign", "color": "#000000"})
    _raw(
        db,
        "INSERT INTO activity_instances (subProjectId, activityId, day, createdAt) VALUES (?, ?, '2026-03-02', 'x')",
        (main_sub.id, foreign.id),
    )
    assert any("sub-project in project" in p for p in check_invariants(db))


def test_reports_missing_sub_project_and_sort_order_clash(db, service, project, main_sub):
    service.create_activity(project.id, {"name": "A", "color": "#000000"})
    service.create_activity(project.id, {"name": "B", "color": "#000000"})
    _raw(db, "UPDATE activities SET sortOrder = 1")
    _raw(db, "DELETE FROM subprojects WHERE id = ?", (main_sub.id,))
    problems = check_invariants(db)
    assert f"project #{project.id}: has no sub-project" in problems
    assert any(p.startswith("activities: sortOrder 1 used 2 times") for p in problems)
