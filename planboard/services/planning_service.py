# Rev 0.2.0

"""Planning service (Rev 0.2.0)
Command/query facade over the planning store.

- Reads hit the store directly; every write is one queued unit, so
  multi-statement commands (reorder, shift, duplicate, prune) are atomic
- Commands return the affected entity or a result record; hazardous
  commands return PreconditionRequired until re-issued with confirmation
- InvalidInput / NotFound / Conflict / NameConflict are raised
"""
from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import Any, Iterator, List, Mapping, Optional, Type, Union

from planboard.models.entities import Activity, Instance, Project, SubProject
from planboard.models.errors import Conflict, InvalidInput, NameConflict, NotFound, PreconditionRequired
from planboard.models.results import (
    Board,
    Deletion,
    Duplication,
    ProjectDeletion,
    ProjectUpdate,
    Reorder,
    ShiftOutcome,
    Unassignment,
)
from planboard.models.types import (
    DEFAULT_SUBPROJECT_NAME,
    PROJECT_RANGE_PRUNE_REQUIRED,
    SUBPROJECT_MINIMUM_REQUIRED,
    SUBPROJECT_SHIFT_OUT_OF_RANGE_DELETE_REQUIRED,
)
from planboard.repositories.db import Database
from planboard.repositories.sqlite_activity_repository import SQLiteActivityRepository
from planboard.repositories.sqlite_instance_repository import SQLiteInstanceRepository
from planboard.repositories.sqlite_project_repository import SQLiteProjectRepository
from planboard.repositories.sqlite_subproject_repository import SQLiteSubProjectRepository
from planboard.services.board import project_board, resolve_active_sub_project
from planboard.services.shift_planner import plan_shift
from planboard.services.validation import (
    normalize_activity_payload,
    normalize_project_payload,
    normalize_subproject_payload,
    parse_activity_ids,
    parse_date,
    parse_direction,
    parse_id,
    parse_name,
    parse_optional_id,
    parse_shift_days,
)
from planboard.utils.dates import utc_now_iso

Payload = Optional[Mapping[str, Any]]

ACTIVITY_NAME_TAKEN = "Activity name must be unique within this project."
SUBPROJECT_NAME_TAKEN = "Sub-project name must be unique within this project."
INSTANCE_TAKEN = "An instance already exists for this sub-project, activity, and day."


@contextmanager
def _unique_violation_as(error: Type[Conflict], message: str) -> Iterator[None]:
    try:
        yield
    except sqlite3.IntegrityError as exc:
        if "UNIQUE constraint failed" in str(exc):
            raise error(message) from exc
        raise


def copy_name(base: str, taken: set[str]) -> str:
    """First free "<base> (copy)", "<base> (copy 2)", ... (case-insensitive)."""
    candidate = f"{base} (copy)"
    n = 2
    while candidate.lower() in taken:
        candidate = f"{base} (copy {n})"
        n += 1
    return candidate


class PlanningService:
    def __init__(
        self,
        db: Database,
        *,
        projects: SQLiteProjectRepository | None = None,
        subprojects: SQLiteSubProjectRepository | None = None,
        activities: SQLiteActivityRepository | None = None,
        instances: SQLiteInstanceRepository | None = None,
    ):
        self._db = db
        self._projects = projects or SQLiteProjectRepository(db)
        self._subprojects = subprojects or SQLiteSubProjectRepository(db)
        self._activities = activities or SQLiteActivityRepository(db)
        self._instances = instances or SQLiteInstanceRepository(db)

    # ---------- internals ----------

    def _write(self, unit) -> Any:
        """Queue ``unit`` and wait for it; store errors re-raise here."""
        return self._db.submit(unit).result()

    def _require_project(self, project_id: int) -> Project:
        project = self._projects.get_project(project_id)
        if project is None:
            raise NotFound("Project not found.")
        return project

    def _require_subproject(self, project_id: int, sub_project_id: int) -> SubProject:
        sub = self._subprojects.get(project_id, sub_project_id)
        if sub is None:
            raise NotFound("Sub-project not found.")
        return sub

    def _require_activity(self, project_id: int, activity_id: int) -> Activity:
        activity = self._activities.get(project_id, activity_id)
        if activity is None:
            raise NotFound("Activity not found.")
        return activity

    # ---------- projects ----------

    def list_projects(self) -> List[Project]:
        return self._projects.list_projects()

    def get_project(self, project_id: Any) -> Project:
        return self._require_project(parse_id(project_id, "project id"))

    def create_project(self, payload: Payload) -> Project:
        """Insert the project together with its seed sub-project."""
        value = normalize_project_payload(payload)
        seed_name = DEFAULT_SUBPROJECT_NAME
        if payload and "subProjectName" in payload:
            seed_name = normalize_subproject_payload({"name": payload["subProjectName"]}).name

        def unit(conn: sqlite3.Connection) -> int:
            now = utc_now_iso()
            project_id = self._projects.insert_project(
                conn,
                name=value.name,
                start_date=value.start_date,
                end_date=value.end_date,
                length_days=value.length_days,
                now=now,
            )
            self._subprojects.insert(conn, project_id, seed_name, now, sort_order=1)
            return project_id

        return self._require_project(self._write(unit))

    def update_project(
        self, project_id: Any, payload: Payload, confirm_trim_out_of_range: bool = False
    ) -> Union[ProjectUpdate, PreconditionRequired]:
        """
        Rename and/or re-range a project. Instances that would fall outside
        the new range are only pruned once the caller confirms.
        """
        pid = parse_id(project_id, "project id")
        self._require_project(pid)
        value = normalize_project_payload(payload)
        confirm = confirm_trim_out_of_range or bool((payload or {}).get("confirmTrimOutOfRangeInstances"))

        out_of_range = self._projects.count_out_of_range_instances(pid, value.start_date, value.end_date)
        if out_of_range > 0 and not confirm:
            return PreconditionRequired(PROJECT_RANGE_PRUNE_REQUIRED, out_of_range)

        def unit(conn: sqlite3.Connection) -> int:
            pruned = self._projects.delete_out_of_range_instances(conn, pid, value.start_date, value.end_date)
            self._projects.update_project(
                conn,
                pid,
                name=value.name,
                start_date=value.start_date,
                end_date=value.end_date,
                length_days=value.length_days,
                now=utc_now_iso(),
            )
            return pruned

        pruned = self._write(unit)
        return ProjectUpdate(self._require_project(pid), pruned)

    def delete_project(self, project_id: Any) -> ProjectDeletion:
        pid = parse_id(project_id, "project id")
        self._require_project(pid)
        result = ProjectDeletion(
            deleted_id=pid,
            deleted_subprojects=self._subprojects.count_for_project(pid),
            deleted_activities=self._activities.count_for_project(pid),
            deleted_instances=self._projects.count_instances(pid),
        )
        self._write(lambda conn: self._projects.delete_project(conn, pid))
        return result

    # ---------- sub-projects ----------

    def list_subprojects(self, project_id: Any) -> List[SubProject]:
        pid = parse_id(project_id, "project id")
        self._require_project(pid)
        return self._subprojects.list_for_project(pid)

    def create_subproject(self, project_id: Any, payload: Payload) -> SubProject:
        pid = parse_id(project_id, "project id")
        self._require_project(pid)
        value = normalize_subproject_payload(payload)
        with _unique_violation_as(NameConflict, SUBPROJECT_NAME_TAKEN):
            sub_id = self._write(lambda conn: self._subprojects.insert(conn, pid, value.name, utc_now_iso()))
        return self._require_subproject(pid, sub_id)

    def rename_subproject(self, project_id: Any, sub_project_id: Any, payload: Payload) -> SubProject:
        pid = parse_id(project_id, "project id")
        sid = parse_id(sub_project_id, "sub-project id")
        self._require_subproject(pid, sid)
        value = normalize_subproject_payload(payload)
        with _unique_violation_as(NameConflict, SUBPROJECT_NAME_TAKEN):
            self._write(lambda conn: self._subprojects.rename(conn, sid, value.name))
        return self._require_subproject(pid, sid)

    def reorder_subproject(self, project_id: Any, sub_project_id: Any, direction: Any) -> Reorder:
        pid = parse_id(project_id, "project id")
        sid = parse_id(sub_project_id, "sub-project id")
        step = parse_direction(direction)
        sub = self._require_subproject(pid, sid)

        neighbor = self._subprojects.find_neighbor(pid, sub.sort_order, step)
        if neighbor is None:
            return Reorder(False, sub)
        self._write(
            lambda conn: self._subprojects.swap_sort_order(
                conn, sub.id, sub.sort_order, int(neighbor["id"]), int(neighbor["sortOrder"])
            )
        )
        return Reorder(True, self._require_subproject(pid, sid))

    def delete_subproject(self, project_id: Any, sub_project_id: Any) -> Union[Deletion, PreconditionRequired]:
        pid = parse_id(project_id, "project id")
        sid = parse_id(sub_project_id, "sub-project id")
        self._require_subproject(pid, sid)

        def unit(conn: sqlite3.Connection) -> Union[Deletion, PreconditionRequired]:
            if self._subprojects.count_for_project(pid, conn) <= 1:
                return PreconditionRequired(SUBPROJECT_MINIMUM_REQUIRED)
            removed = self._instances.count_for_subproject(sid, conn)
            self._subprojects.delete(conn, sid)
            return Deletion(sid, removed)

        return self._write(unit)

    def duplicate_subproject(self, project_id: Any, source_id: Any, payload: Payload = None) -> Duplication:
        """
        Clone a sub-project and its instances. ``payload`` may carry a
        ``name`` (must be free) and an ``activityIds`` filter.
        """
        pid = parse_id(project_id, "project id")
        sid = parse_id(source_id, "sub-project id")
        source = self._require_subproject(pid, sid)
        payload = payload or {}

        raw_name = payload.get("name")
        requested_name = None
        if not (raw_name is None or (isinstance(raw_name, str) and not raw_name.strip())):
            requested_name = parse_name(raw_name, "Sub-project")

        activity_ids = parse_activity_ids(payload.get("activityIds"))
        if activity_ids is not None:
            known = self._activities.ids_for_project(pid)
            if any(a not in known for a in activity_ids):
                raise InvalidInput("activityIds must only reference activities of this project.")

        def unit(conn: sqlite3.Connection) -> tuple[int, int]:
            taken = self._subprojects.names_for_project(pid, conn)
            if requested_name is not None:
                if requested_name.lower() in taken:
                    raise NameConflict(SUBPROJECT_NAME_TAKEN)
                name = requested_name
            else:
                name = copy_name(source.name, taken)
            now = utc_now_iso()
            new_id = self._subprojects.insert(conn, pid, name, now)
            copied = self._instances.copy_into(conn, source.id, new_id, now, activity_ids)
            return new_id, copied

        with _unique_violation_as(NameConflict, SUBPROJECT_NAME_TAKEN):
            new_id, copied = self._write(unit)
        return Duplication(self._require_subproject(pid, new_id), copied)

    def shift_subproject(
        self, project_id: Any, sub_project_id: Any, days: Any, confirm_delete: bool = False
    ) -> Union[ShiftOutcome, PreconditionRequired]:
        """
        Move every instance of a sub-project by ``days``. Instances whose
        target falls outside the project are deleted once confirmed; a move
        onto an already claimed (activity, day) is skipped.
        """
        pid = parse_id(project_id, "project id")
        sid = parse_id(sub_project_id, "sub-project id")
        delta = parse_shift_days(days)
        project = self._require_project(pid)
        self._require_subproject(pid, sid)

        probe = plan_shift(self._instances.list_for_subproject(sid), delta, project.start_date, project.end_date)
        if probe.out_of_range and not confirm_delete:
            return PreconditionRequired(SUBPROJECT_SHIFT_OUT_OF_RANGE_DELETE_REQUIRED, len(probe.out_of_range))

        def unit(conn: sqlite3.Connection) -> Union[ShiftOutcome, PreconditionRequired]:
            # re-plan on the state this unit actually writes against
            current = self._instances.list_for_subproject(sid, conn)
            plan = plan_shift(current, delta, project.start_date, project.end_date)
            if plan.out_of_range and not confirm_delete:
                return PreconditionRequired(SUBPROJECT_SHIFT_OUT_OF_RANGE_DELETE_REQUIRED, len(plan.out_of_range))

            deleted = self._instances.delete_many(conn, [i.id for i in plan.out_of_range])
            for inst, target in plan.apply_order():
                self._instances.move(conn, inst.id, target)
            return ShiftOutcome(
                requested_shift_days=delta,
                moved_count=len(plan.moves),
                skipped_out_of_range_count=len(plan.out_of_range),
                skipped_duplicate_count=len(plan.duplicates),
                deleted_out_of_range_count=deleted,
                total_source_count=len(current),
                moved_instance_ids=[inst.id for inst, _ in plan.moves],
            )

        return self._write(unit)

    # ---------- activities ----------

    def list_activities(self, project_id: Any) -> List[Activity]:
        pid = parse_id(project_id, "project id")
        self._require_project(pid)
        return self._activities.list_for_project(pid)

    def create_activity(self, project_id: Any, payload: Payload) -> Activity:
        pid = parse_id(project_id, "project id")
        self._require_project(pid)
        value = normalize_activity_payload(payload)
        with _unique_violation_as(NameConflict, ACTIVITY_NAME_TAKEN):
            activity_id = self._write(
                lambda conn: self._activities.insert(conn, pid, value.name, value.color, utc_now_iso())
            )
        return self._require_activity(pid, activity_id)

    def update_activity(self, project_id: Any, activity_id: Any, payload: Payload) -> Activity:
        pid = parse_id(project_id, "project id")
        aid = parse_id(activity_id, "activity id")
        self._require_project(pid)
        self._require_activity(pid, aid)
        value = normalize_activity_payload(payload)
        with _unique_violation_as(NameConflict, ACTIVITY_NAME_TAKEN):
            self._write(lambda conn: self._activities.update(conn, aid, value.name, value.color))
        return self._require_activity(pid, aid)

    def reorder_activity(self, project_id: Any, activity_id: Any, direction: Any) -> Reorder:
        pid = parse_id(project_id, "project id")
        aid = parse_id(activity_id, "activity id")
        step = parse_direction(direction)
        activity = self._require_activity(pid, aid)

        neighbor = self._activities.find_neighbor(pid, activity.sort_order, step)
        if neighbor is None:
            return Reorder(False, activity)
        self._write(
            lambda conn: self._activities.swap_sort_order(
                conn, activity.id, activity.sort_order, int(neighbor["id"]), int(neighbor["sortOrder"])
            )
        )
        return Reorder(True, self._require_activity(pid, aid))

    def delete_activity(self, project_id: Any, activity_id: Any) -> Deletion:
        pid = parse_id(project_id, "project id")
        aid = parse_id(activity_id, "activity id")
        self._require_activity(pid, aid)
        removed = self._instances.count_for_activity(aid)
        self._write(lambda conn: self._activities.delete(conn, aid))
        return Deletion(aid, removed)

    # ---------- instances ----------

    def assign_instance(self, project_id: Any, activity_id: Any, payload: Payload) -> Instance:
        pid = parse_id(project_id, "project id")
        aid = parse_id(activity_id, "activity id")
        self._require_activity(pid, aid)
        payload = payload or {}

        if payload.get("subProjectId") is None:
            raise InvalidInput("subProjectId is required.")
        sid = parse_id(payload.get("subProjectId"), "subProjectId")
        self._require_subproject(pid, sid)

        day = parse_date(payload.get("date"))
        project = self._require_project(pid)
        if not project.contains(day):
            raise InvalidInput("date must be within the project range.")
        if self._instances.get_by_key(sid, aid, day) is not None:
            raise Conflict(INSTANCE_TAKEN)

        with _unique_violation_as(Conflict, INSTANCE_TAKEN):
            self._write(lambda conn: self._instances.insert(conn, sid, aid, day, utc_now_iso()))
        return self._instances.get_by_key(sid, aid, day)

    def unassign_instance(self, project_id: Any, activity_id: Any, date: Any, sub_project_id: Any) -> Unassignment:
        pid = parse_id(project_id, "project id")
        aid = parse_id(activity_id, "activity id")
        day = parse_date(date, "Instance date")
        if sub_project_id is None:
            raise InvalidInput("subProjectId is required.")
        sid = parse_id(sub_project_id, "subProjectId")
        self._require_activity(pid, aid)
        self._require_subproject(pid, sid)

        instance = self._instances.get_by_key(sid, aid, day)
        if instance is None:
            raise NotFound("Activity instance not found.")
        self._write(lambda conn: self._instances.delete(conn, instance.id))
        return Unassignment(instance.id, aid, sid, day)

    # ---------- board ----------

    def _ensure_default_subproject(self, conn: sqlite3.Connection, project_id: int) -> None:
        if self._subprojects.count_for_project(project_id, conn) == 0:
            self._subprojects.insert(conn, project_id, DEFAULT_SUBPROJECT_NAME, utc_now_iso(), sort_order=1)

    def get_board(self, project_id: Any, sub_project_id: Any = None) -> Board:
        """
        Compose the schedule read model. ``instance_map`` covers only the
        active sub-project; ``sub_project_day_map`` covers all of them.
        """
        pid = parse_id(project_id, "project id")
        project = self._require_project(pid)
        requested = parse_optional_id(sub_project_id, "subProjectId")

        if self._subprojects.count_for_project(pid) == 0:
            self._write(lambda conn: self._ensure_default_subproject(conn, pid))

        subprojects = self._subprojects.list_for_project(pid)
        if requested is not None and all(s.id != requested for s in subprojects):
            raise NotFound("Sub-project not found.")

        return project_board(
            project,
            subprojects,
            self._activities.list_for_project(pid),
            self._instances.list_for_project(pid),
            resolve_active_sub_project(subprojects, requested),
        )
