# tests/test_instances.py
from __future__ import annotations

import pytest

from planboard.models.errors import Conflict, InvalidInput, NameConflict, NotFound


def _payload(sub, day):
    return {"subProjectId": sub.id, "date": day}


def test_assign_and_unassign(service, project, main_sub, activity):
    inst = service.assign_instance(project.id, activity.id, _payload(main_sub, "2026-03-04"))
    assert (inst.sub_project_id, inst.activity_id, inst.day) == (main_sub.id, activity.id, "2026-03-04")
    assert inst.to_dict()["subProjectId"] == main_sub.id

    result = service.unassign_instance(project.id, activity.id, "2026-03-04", main_sub.id)
    assert result.to_dict() == {
        "deletedId": inst.id,
        "activityId": activity.id,
        "subProjectId": main_sub.id,
        "date": "2026-03-04",
    }
    assert service.get_board(project.id).instances == []


def test_assign_accepts_edge_days(service, project, main_sub, activity):
    service.assign_instance(project.id, activity.id, _payload(main_sub, project.start_date))
    service.assign_instance(project.id, activity.id, _payload(main_sub, project.end_date))
    assert len(service.get_board(project.id).instances) == 2


def test_duplicate_triple_conflicts(service, project, main_sub, activity):
    service.assign_instance(project.id, activity.id, _payload(main_sub, "2026-03-04"))
    with pytest.raises(Conflict) as info:
        service.assign_instance(project.id, activity.id, _payload(main_sub, "2026-03-04"))
    assert not isinstance(info.value, NameConflict)
    assert info.value.to_dict()["code"] == "CONFLICT"


def test_same_day_in_another_sub_project_is_fine(service, project, main_sub, activity):
    other = service.create_subproject(project.id, {"name": "Plan B"})
    service.assign_instance(project.id, activity.id, _payload(main_sub, "2026-03-04"))
    service.assign_instance(project.id, activity.id, _payload(other, "2026-03-04"))
    assert len(service.get_board(project.id).instances) == 2


@pytest.mark.parametrize("day", ["2026-03-01", "2026-03-09", "2026-03-32", "", None])
def test_assign_rejects_bad_or_out_of_range_days(service, project, main_sub, activity, day):
    with pytest.raises(InvalidInput):
        service.assign_instance(project.id, activity.id, _payload(main_sub, day))


def test_assign_requires_sub_project(service, project, activity):
    with pytest.raises(InvalidInput):
        service.assign_instance(project.id, activity.id, {"date": "2026-03-04"})


def test_assign_rejects_foreign_sub_project(service, project, activity):
    other = service.create_project({"name": "Other", "startDate": "2026-03-02", "lengthDays": 7})
    foreign = service.list_subprojects(other.id)[0]
    with pytest.raises(NotFound):
        service.assign_instance(project.id, activity.id, _payload(foreign, "2026-03-04"))


def test_unassign_missing_instance(service, project, main_sub, activity):
    with pytest.raises(NotFound):
        service.unassign_instance(project.id, activity.id, "2026-03-04", main_sub.id)
    with pytest.raises(InvalidInput):
        service.unassign_instance(project.id, activity.id, "2026-03-04", None)
