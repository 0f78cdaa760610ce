# Rev 0.2.0
"""Error taxonomy of the planning core.

Raised: InvalidInput, NotFound, Conflict, NameConflict.
Returned: PreconditionRequired, the sentinel of the confirm-and-retry
protocol. Callers re-issue the same command with the confirm flag set.
Each variant carries the HTTP status a transport is expected to use.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .types import (
    PROJECT_RANGE_PRUNE_REQUIRED,
    SUBPROJECT_MINIMUM_REQUIRED,
    SUBPROJECT_SHIFT_OUT_OF_RANGE_DELETE_REQUIRED,
    PreconditionCode,
)


class PlanningError(Exception):
    code = "PLANNING_ERROR"
    status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "error": self.message}


class InvalidInput(PlanningError):
    code = "INVALID_INPUT"
    status = 400


class NotFound(PlanningError):
    code = "NOT_FOUND"
    status = 404


class Conflict(PlanningError):
    """Uniqueness violation on an instance triple."""
    code = "CONFLICT"
    status = 409


class NameConflict(Conflict):
    """Case-insensitive name collision inside one project."""
    code = "NAME_CONFLICT"


_DEFAULT_MESSAGES: Dict[str, str] = {
    PROJECT_RANGE_PRUNE_REQUIRED: (
        "Updating this project would remove {n} activity instance(s) outside the new date range."
    ),
    SUBPROJECT_SHIFT_OUT_OF_RANGE_DELETE_REQUIRED: (
        "Shifting this sub-project would delete {n} activity instance(s) that fall outside the project range."
    ),
    SUBPROJECT_MINIMUM_REQUIRED: "A project must have at least one sub-project.",
}


@dataclass(frozen=True)
class PreconditionRequired:
    code: PreconditionCode
    out_of_range_instances: Optional[int] = None
    message: str = field(default="")

    status = 409

    def __post_init__(self):
        if not self.message:
            template = _DEFAULT_MESSAGES.get(self.code, self.code)
            object.__setattr__(self, "message", template.format(n=self.out_of_range_instances))

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"code": self.code, "error": self.message}
        if self.out_of_range_instances is not None:
            out["outOfRangeInstances"] = self.out_of_range_instances
        return out
