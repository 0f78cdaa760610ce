# Rev 0.2.0
"""Command results returned by the planning service."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .entities import Activity, Instance, Project, SubProject
from ..utils.dates import DayCell


@dataclass(frozen=True)
class ProjectUpdate:
    project: Project
    pruned_instances: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {**self.project.to_dict(), "prunedInstances": self.pruned_instances}


@dataclass(frozen=True)
class ProjectDeletion:
    deleted_id: int
    deleted_subprojects: int
    deleted_activities: int
    deleted_instances: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "deletedId": self.deleted_id,
            "deletedSubprojects": self.deleted_subprojects,
            "deletedActivities": self.deleted_activities,
            "deletedInstances": self.deleted_instances,
        }


@dataclass(frozen=True)
class Deletion:
    """Deleted sub-project or activity, with the instances it took along."""
    deleted_id: int
    deleted_instances: int

    def to_dict(self) -> Dict[str, Any]:
        return {"deletedId": self.deleted_id, "deletedInstances": self.deleted_instances}


@dataclass(frozen=True)
class Unassignment:
    deleted_id: int
    activity_id: int
    sub_project_id: int
    date: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "deletedId": self.deleted_id,
            "activityId": self.activity_id,
            "subProjectId": self.sub_project_id,
            "date": self.date,
        }


@dataclass(frozen=True)
class Reorder:
    moved: bool
    item: Union[SubProject, Activity]

    def to_dict(self) -> Dict[str, Any]:
        key = "subproject" if isinstance(self.item, SubProject) else "activity"
        return {"moved": self.moved, key: self.item.to_dict()}


@dataclass(frozen=True)
class Duplication:
    subproject: SubProject
    copied_instances: int

    def to_dict(self) -> Dict[str, Any]:
        return {"subproject": self.subproject.to_dict(), "copiedInstances": self.copied_instances}


@dataclass(frozen=True)
class ShiftOutcome:
    requested_shift_days: int
    moved_count: int
    skipped_out_of_range_count: int
    skipped_duplicate_count: int
    deleted_out_of_range_count: int
    total_source_count: int
    moved_instance_ids: List[int] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "requestedShiftDays": self.requested_shift_days,
            "movedCount": self.moved_count,
            "skippedOutOfRangeCount": self.skipped_out_of_range_count,
            "skippedDuplicateCount": self.skipped_duplicate_count,
            "deletedOutOfRangeCount": self.deleted_out_of_range_count,
            "totalSourceCount": self.total_source_count,
            "movedInstanceIds": list(self.moved_instance_ids),
        }


@dataclass(frozen=True)
class Board:
    project: Project
    days: List[DayCell]
    subprojects: List[SubProject]
    activities: List[Activity]
    active_sub_project_id: Optional[int]
    instances: List[Instance]
    # instance_map[activity_id][day] -> instance id, active sub-project only
    instance_map: Dict[int, Dict[str, int]]
    # sub_project_day_map[sub_project_id][day] -> [(instance id, activity id), ...]
    sub_project_day_map: Dict[int, Dict[str, List[Dict[str, int]]]]

    def to_dict(self) -> Dict[str, Any]:
        # JSON object keys are strings
        return {
            "project": self.project.to_dict(),
            "days": [d.to_dict() for d in self.days],
            "activities": [a.to_dict() for a in self.activities],
            "subprojects": [s.to_dict() for s in self.subprojects],
            "activeSubProjectId": self.active_sub_project_id,
            "instances": [i.to_dict() for i in self.instances],
            "instanceMap": {
                str(activity_id): dict(days) for activity_id, days in self.instance_map.items()
            },
            "subProjectDayMap": {
                str(sub_id): {day: list(cells) for day, cells in days.items()}
                for sub_id, days in self.sub_project_day_map.items()
            },
        }
