# tests/test_projects.py
from __future__ import annotations

import pytest

from planboard.models.errors import InvalidInput, NotFound, PreconditionRequired
from planboard.models.results import ProjectUpdate
from planboard.models.types import DEFAULT_SUBPROJECT_NAME, PROJECT_RANGE_PRUNE_REQUIRED


def _range(name="Launch", start="2026-03-02", end="2026-03-08", **extra):
    return {"name": name, "startDate": start, "endDate": end, **extra}


def test_create_seeds_default_sub_project(service, project):
    assert (project.start_date, project.end_date, project.length_days) == ("2026-03-02", "2026-03-08", 7)
    assert project.created_at == project.updated_at
    assert project.created_at.endswith("Z")
    subs = service.list_subprojects(project.id)
    assert [(s.name, s.sort_order) for s in subs] == [(DEFAULT_SUBPROJECT_NAME, 1)]


def test_create_with_custom_seed_name(service):
    p = service.create_project({"name": "Ops", "startDate": "2026-03-02", "lengthDays": 2, "subProjectName": " Week 1 "})
    assert [s.name for s in service.list_subprojects(p.id)] == ["Week 1"]


def test_create_rejects_bad_payload(service):
    with pytest.raises(InvalidInput):
        service.create_project({"name": "Ops", "startDate": "2026-03-02"})
    assert service.list_projects() == []


def test_list_orders_by_most_recent_update(service, db):
    first = service.create_project(_range("First"))
    second = service.create_project(_range("Second"))
    assert [p.id for p in service.list_projects()] == [second.id, first.id]

    db.run("UPDATE projects SET updatedAt = ? WHERE id = ?", ("2020-01-01T00:00:00.000Z", second.id)).result()
    assert [p.id for p in service.list_projects()] == [first.id, second.id]


def test_get_project_errors(service):
    with pytest.raises(NotFound):
        service.get_project(999)
    with pytest.raises(InvalidInput):
        service.get_project("abc")


def test_rename_and_extend_without_confirmation(service, project):
    result = service.update_project(project.id, _range("Relaunch", end="2026-03-10"))
    assert isinstance(result, ProjectUpdate)
    assert result.pruned_instances == 0
    assert (result.project.name, result.project.length_days) == ("Relaunch", 9)
    assert result.project.updated_at >= project.updated_at
    assert result.project.created_at == project.created_at


def test_update_with_length_only(service, project):
    result = service.update_project(project.id, {"name": "Launch", "startDate": "2026-03-04", "lengthDays": 2})
    assert result.project.end_date == "2026-03-05"


def test_shrink_requires_confirmation(service, project, main_sub, activity):
    for day in ("2026-03-02", "2026-03-07", "2026-03-08"):
        service.assign_instance(project.id, activity.id, {"subProjectId": main_sub.id, "date": day})

    result = service.update_project(project.id, _range(end="2026-03-06"))
    assert isinstance(result, PreconditionRequired)
    assert result.code == PROJECT_RANGE_PRUNE_REQUIRED
    assert result.out_of_range_instances == 2
    assert result.to_dict()["outOfRangeInstances"] == 2
    assert result.status == 409
    # nothing changed
    assert service.get_project(project.id).end_date == "2026-03-08"
    assert len(service.get_board(project.id).instances) == 3

    confirmed = service.update_project(project.id, _range(end="2026-03-06"), confirm_trim_out_of_range=True)
    assert confirmed.pruned_instances == 2
    assert confirmed.to_dict()["prunedInstances"] == 2
    assert [i.day for i in service.get_board(project.id).instances] == ["2026-03-02"]


def test_confirmation_flag_in_payload(service, project, main_sub, activity):
    service.assign_instance(project.id, activity.id, {"subProjectId": main_sub.id, "date": "2026-03-02"})
    result = service.update_project(
        project.id, _range(start="2026-03-03", confirmTrimOutOfRangeInstances=True)
    )
    assert result.pruned_instances == 1
    assert result.project.length_days == 6


def test_delete_project_reports_cascade(service, db, project, main_sub, activity):
    extra = service.create_subproject(project.id, {"name": "Plan B"})
    service.assign_instance(project.id, activity.id, {"subProjectId": main_sub.id, "date": "2026-03-02"})
    service.assign_instance(project.id, activity.id, {"subProjectId": extra.id, "date": "2026-03-02"})

    result = service.delete_project(project.id)
    assert result.to_dict() == {
        "deletedId": project.id,
        "deletedSubprojects": 2,
        "deletedActivities": 1,
        "deletedInstances": 2,
    }
    with pytest.raises(NotFound):
        service.get_project(project.id)
    for table in ("subprojects", "activities", "activity_instances"):
        assert db.scalar(f"SELECT COUNT(*) FROM {table}") == 0


def test_delete_unknown_project(service):
    with pytest.raises(NotFound):
        service.delete_project(42)


def test_board_selection_errors(service, project):
    with pytest.raises(InvalidInput):
        service.get_board(project.id, "abc")
    with pytest.raises(NotFound):
        service.get_board(project.id, 9999)


def test_board_recreates_missing_default_sub_project(service, db, project):
    db.run("DELETE FROM subprojects WHERE projectId = ?", (project.id,)).result()
    board = service.get_board(project.id)
    assert [s.name for s in board.subprojects] == [DEFAULT_SUBPROJECT_NAME]
    assert board.active_sub_project_id == board.subprojects[0].id
