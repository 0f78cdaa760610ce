# Rev 0.2.0
# planboard/viewmodels/projects_viewmodel.py
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from PySide6.QtCore import QObject, Signal

from planboard.models.errors import PlanningError, PreconditionRequired
from planboard.utils.logging_setup import get_logger


class ProjectsViewModel(QObject):
    """
    Emits:
      projectsReloaded([project dict, ...])      most recently updated first
      confirmationRequired(code, instance count)  re-issue with confirm=True
      failed(code, message)
    """
    projectsReloaded = Signal(list)
    confirmationRequired = Signal(str, int)
    failed = Signal(str, str)

    def __init__(self, planning_service):
        super().__init__()
        self._planning = planning_service
        self._log = get_logger("ProjectsViewModel")

    # ---- queries
    def reload(self) -> None:
        rows = [p.to_dict() for p in self._planning.list_projects()]
        self.projectsReloaded.emit(rows)

    # ---- commands
    def create_project(self, payload: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        try:
            project = self._planning.create_project(payload)
        except PlanningError as exc:
            self._fail(exc)
            return None
        self.reload()
        return project.to_dict()

    def update_project(self, project_id: int, payload: Mapping[str, Any], confirm: bool = False) -> Optional[Dict[str, Any]]:
        try:
            result = self._planning.update_project(project_id, payload, confirm_trim_out_of_range=confirm)
        except PlanningError as exc:
            self._fail(exc)
            return None
        if isinstance(result, PreconditionRequired):
            self.confirmationRequired.emit(result.code, result.out_of_range_instances or 0)
            return None
        self.reload()
        return result.to_dict()

    def delete_project(self, project_id: int) -> bool:
        try:
            self._planning.delete_project(project_id)
        except PlanningError as exc:
            self._fail(exc)
            return False
        self.reload()
        return True

    # ---- internals
    def _fail(self, exc: PlanningError) -> None:
        self._log.warning("%s: %s", exc.code, exc.message)
        self.failed.emit(exc.code, exc.message)
