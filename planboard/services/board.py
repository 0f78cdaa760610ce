# Rev 0.2.0
"""Board projection: the single read model the schedule grid renders."""
from __future__ import annotations

from typing import Dict, List, Optional

from planboard.models.entities import Activity, Instance, Project, SubProject
from planboard.models.results import Board
from planboard.utils.dates import build_day_range


def resolve_active_sub_project(subprojects: List[SubProject], requested: Optional[int]) -> Optional[int]:
    """Requested id when given, else the first sub-project, else None."""
    if requested is not None:
        return requested
    return subprojects[0].id if subprojects else None


def project_board(
    project: Project,
    subprojects: List[SubProject],
    activities: List[Activity],
    instances: List[Instance],
    active_sub_project_id: Optional[int],
) -> Board:
    """
    ``instances`` must already be ordered by (day, activity sortOrder, id);
    the per-day lists of ``sub_project_day_map`` keep that order.
    """
    instance_map: Dict[int, Dict[str, int]] = {}
    day_map: Dict[int, Dict[str, List[Dict[str, int]]]] = {}

    for inst in instances:
        day_map.setdefault(inst.sub_project_id, {}).setdefault(inst.day, []).append(
            {"instanceId": inst.id, "activityId": inst.activity_id}
        )
        if inst.sub_project_id == active_sub_project_id:
            instance_map.setdefault(inst.activity_id, {})[inst.day] = inst.id

    return Board(
        project=project,
        days=build_day_range(project.start_date, project.end_date),
        subprojects=sorted(subprojects, key=lambda s: (s.sort_order, s.id)),
        activities=sorted(activities, key=lambda a: (a.sort_order, a.id)),
        active_sub_project_id=active_sub_project_id,
        instances=list(instances),
        instance_map=instance_map,
        sub_project_day_map=day_map,
    )
