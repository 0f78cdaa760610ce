# tests/test_board_projection.py
from __future__ import annotations

from planboard.models.entities import Activity, Instance, Project, SubProject
from planboard.services.board import project_board, resolve_active_sub_project

TS = "2026-01-01T00:00:00.000Z"
PROJECT = Project(1, "Launch", "2026-03-06", "2026-03-09", 4, TS, TS)
SUBS = [SubProject(11, 1, "Later", 2, TS), SubProject(10, 1, "Main", 1, TS)]
ACTS = [Activity(21, 1, "Test", "#00FF00", 2, TS), Activity(20, 1, "Build", "#FF0000", 1, TS)]
INSTANCES = [
    Instance(100, 10, 20, "2026-03-06", TS),
    Instance(101, 11, 20, "2026-03-06", TS),
    Instance(102, 10, 21, "2026-03-06", TS),
    Instance(103, 10, 21, "2026-03-09", TS),
]


def test_resolve_active_sub_project():
    assert resolve_active_sub_project([], None) is None
    assert resolve_active_sub_project(SUBS, None) == 11
    assert resolve_active_sub_project(SUBS, 10) == 10


def test_board_shape():
    board = project_board(PROJECT, SUBS, ACTS, INSTANCES, 10)
    assert [d.date for d in board.days] == ["2026-03-06", "2026-03-07", "2026-03-08", "2026-03-09"]
    assert [d.is_weekend for d in board.days] == [False, True, True, False]
    assert [s.id for s in board.subprojects] == [10, 11]
    assert [a.id for a in board.activities] == [20, 21]
    assert board.active_sub_project_id == 10


def test_instance_map_covers_active_sub_project_only():
    board = project_board(PROJECT, SUBS, ACTS, INSTANCES, 10)
    assert board.instance_map == {20: {"2026-03-06": 100}, 21: {"2026-03-06": 102, "2026-03-09": 103}}


def test_sub_project_day_map_covers_everything():
    board = project_board(PROJECT, SUBS, ACTS, INSTANCES, 10)
    assert board.sub_project_day_map[10]["2026-03-06"] == [
        {"instanceId": 100, "activityId": 20},
        {"instanceId": 102, "activityId": 21},
    ]
    assert board.sub_project_day_map[11] == {"2026-03-06": [{"instanceId": 101, "activityId": 20}]}


def test_board_to_dict_uses_string_keys():
    out = project_board(PROJECT, SUBS, ACTS, INSTANCES, 11).to_dict()
    assert out["activeSubProjectId"] == 11
    assert out["instanceMap"] == {"20": {"2026-03-06": 101}}
    assert set(out["subProjectDayMap"]) == {"10", "11"}
    assert out["days"][1] == {"date": "2026-03-07", "isWeekend": True}
    assert out["project"]["lengthDays"] == 4
