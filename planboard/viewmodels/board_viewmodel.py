# Rev 0.2.0
# planboard/viewmodels/board_viewmodel.py
from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from PySide6.QtCore import QObject, Signal

from planboard.models.errors import PlanningError, PreconditionRequired
from planboard.models.results import Board
from planboard.utils.logging_setup import get_logger


class BoardViewModel(QObject):
    """
    Holds the open project and its active sub-project, turns grid gestures
    into planning commands and re-emits the board after every change.

    Emits:
      boardLoaded(board dict)
      confirmationRequired(code, instance count)
      failed(code, message)
      shifted(shift outcome dict)
    """
    boardLoaded = Signal(dict)
    confirmationRequired = Signal(str, int)
    failed = Signal(str, str)
    shifted = Signal(dict)

    def __init__(self, planning_service):
        super().__init__()
        self._planning = planning_service
        self._log = get_logger("BoardViewModel")
        self.project_id: Optional[int] = None
        self.active_sub_project_id: Optional[int] = None
        self._board: Optional[Board] = None

    # ---- queries
    def load(self, project_id: Optional[int] = None) -> bool:
        if project_id is not None and project_id != self.project_id:
            self.project_id = project_id
            self.active_sub_project_id = None
        if self.project_id is None:
            return False
        try:
            board = self._planning.get_board(self.project_id, self.active_sub_project_id)
        except PlanningError as exc:
            self._fail(exc)
            return False
        self._board = board
        self.active_sub_project_id = board.active_sub_project_id
        self.boardLoaded.emit(board.to_dict())
        return True

    def board(self) -> Optional[Board]:
        return self._board

    def select_sub_project(self, sub_project_id: int) -> bool:
        previous = self.active_sub_project_id
        self.active_sub_project_id = sub_project_id
        if not self.load():
            self.active_sub_project_id = previous
            return False
        return True

    # ---- commands
    def toggle_cell(self, activity_id: int, day: str) -> bool:
        """Assign the activity on ``day`` in the active sub-project, or clear it."""
        if self._board is None or self.active_sub_project_id is None:
            return False
        occupied = day in self._board.instance_map.get(activity_id, {})
        if occupied:
            ok = self._call(
                self._planning.unassign_instance, self.project_id, activity_id, day, self.active_sub_project_id
            )
        else:
            ok = self._call(
                self._planning.assign_instance,
                self.project_id,
                activity_id,
                {"subProjectId": self.active_sub_project_id, "date": day},
            )
        return ok is not None and self.load()

    def reorder_activity(self, activity_id: int, direction: str) -> bool:
        result = self._call(self._planning.reorder_activity, self.project_id, activity_id, direction)
        if result is None:
            return False
        if result.moved:
            self.load()
        return result.moved

    def reorder_subproject(self, sub_project_id: int, direction: str) -> bool:
        result = self._call(self._planning.reorder_subproject, self.project_id, sub_project_id, direction)
        if result is None:
            return False
        if result.moved:
            self.load()
        return result.moved

    def shift_active(self, days: int, confirm: bool = False) -> Optional[Dict[str, Any]]:
        if self.active_sub_project_id is None:
            return None
        result = self._call(
            self._planning.shift_subproject, self.project_id, self.active_sub_project_id, days, confirm
        )
        if result is None:
            return None
        if isinstance(result, PreconditionRequired):
            self.confirmationRequired.emit(result.code, result.out_of_range_instances or 0)
            return None
        outcome = result.to_dict()
        self.shifted.emit(outcome)
        self.load()
        return outcome

    def duplicate_active(self, name: Optional[str] = None, activity_ids: Optional[Iterable[int]] = None) -> Optional[int]:
        """Clone the active sub-project and switch the board to the copy."""
        if self.active_sub_project_id is None:
            return None
        payload: Dict[str, Any] = {}
        if name is not None:
            payload["name"] = name
        if activity_ids is not None:
            payload["activityIds"] = list(activity_ids)
        result = self._call(
            self._planning.duplicate_subproject, self.project_id, self.active_sub_project_id, payload
        )
        if result is None:
            return None
        self.active_sub_project_id = result.subproject.id
        self.load()
        return result.subproject.id

    # ---- internals
    def _call(self, command, *args):
        try:
            return command(*args)
        except PlanningError as exc:
            self._fail(exc)
            return None

    def _fail(self, exc: PlanningError) -> None:
        self._log.warning("%s: %s", exc.code, exc.message)
        self.failed.emit(exc.code, exc.message)
