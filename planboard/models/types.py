# planboard type definitions
# Rev 0.2.0

from __future__ import annotations
from typing import Literal

# Reorder moves one step towards the top ("up") or the bottom ("down")
Direction = Literal["up", "down"]
DIRECTIONS: tuple[str, ...] = ("up", "down")

PreconditionCode = Literal[
    "PROJECT_RANGE_PRUNE_REQUIRED",
    "SUBPROJECT_SHIFT_OUT_OF_RANGE_DELETE_REQUIRED",
    "SUBPROJECT_MINIMUM_REQUIRED",
]

PROJECT_RANGE_PRUNE_REQUIRED: PreconditionCode = "PROJECT_RANGE_PRUNE_REQUIRED"
SUBPROJECT_SHIFT_OUT_OF_RANGE_DELETE_REQUIRED: PreconditionCode = "SUBPROJECT_SHIFT_OUT_OF_RANGE_DELETE_REQUIRED"
SUBPROJECT_MINIMUM_REQUIRED: PreconditionCode = "SUBPROJECT_MINIMUM_REQUIRED"

DEFAULT_SUBPROJECT_NAME = "Main"
