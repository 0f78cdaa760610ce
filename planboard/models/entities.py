# Rev 0.2.0
"""Typed rows of the four planning tables.

Column names on disk (and keys on the wire) are camelCase; attributes are
snake_case. ``from_row`` reads a store row, ``to_dict`` gives the wire shape.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Mapping


@dataclass(frozen=True)
class Project:
    id: int
    name: str
    start_date: str
    end_date: str
    length_days: int
    created_at: str
    updated_at: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Project":
        return cls(
            id=int(row["id"]),
            name=row["name"],
            start_date=row["startDate"],
            end_date=row["endDate"],
            length_days=int(row["lengthDays"]),
            created_at=row["createdAt"],
            updated_at=row["updatedAt"],
        )

    def contains(self, day: str) -> bool:
        # date keys compare correctly as strings
        return self.start_date <= day <= self.end_date

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "lengthDays": self.length_days,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass(frozen=True)
class SubProject:
    id: int
    project_id: int
    name: str
    sort_order: int
    created_at: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "SubProject":
        return cls(
            id=int(row["id"]),
            project_id=int(row["projectId"]),
            name=row["name"],
            sort_order=int(row["sortOrder"]),
            created_at=row["createdAt"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "projectId": self.project_id,
            "name": self.name,
            "sortOrder": self.sort_order,
            "createdAt": self.created_at,
        }


@dataclass(frozen=True)
class Activity:
    id: int
    project_id: int
    name: str
    color: str
    sort_order: int
    created_at: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Activity":
        return cls(
            id=int(row["id"]),
            project_id=int(row["projectId"]),
            name=row["name"],
            color=row["color"],
            sort_order=int(row["sortOrder"]),
            created_at=row["createdAt"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "projectId": self.project_id,
            "name": self.name,
            "color": self.color,
            "createdAt": self.created_at,
            "sortOrder": self.sort_order,
        }


@dataclass(frozen=True)
class Instance:
    id: int
    sub_project_id: int
    activity_id: int
    day: str
    created_at: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Instance":
        return cls(
            id=int(row["id"]),
            sub_project_id=int(row["subProjectId"]),
            activity_id=int(row["activityId"]),
            day=row["day"],
            created_at=row["createdAt"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "subProjectId": self.sub_project_id,
            "activityId": self.activity_id,
            "day": self.day,
            "createdAt": self.created_at,
        }
