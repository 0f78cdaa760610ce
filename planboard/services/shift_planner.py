# Rev 0.2.0
"""Partition-then-apply plan for moving a sub-project's instances in time.

The plan is computed up front so the write unit only replays it:
out-of-range instances are listed for deletion, in-range ones are claimed
in (day, id) order and any target key already claimed is skipped.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Set, Tuple

from planboard.models.entities import Instance
from planboard.utils.dates import add_days

Key = Tuple[int, str]  # (activityId, day) inside one sub-project


@dataclass
class ShiftPlan:
    days: int
    out_of_range: List[Instance] = field(default_factory=list)
    moves: List[Tuple[Instance, str]] = field(default_factory=list)
    duplicates: List[Instance] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.out_of_range) + len(self.moves) + len(self.duplicates)

    def apply_order(self) -> List[Tuple[Instance, str]]:
        """
        Order in which UPDATEs never trip the unique index mid-way:
        the leading edge moves first (latest day first for a forward shift).
        """
        return sorted(self.moves, key=lambda m: (m[0].day, m[0].id), reverse=self.days > 0)


def plan_shift(
    instances: Iterable[Instance],
    days: int,
    start_date: str,
    end_date: str,
    occupied: Iterable[Key] = (),
) -> ShiftPlan:
    """
    ``instances`` are the rows being shifted; ``occupied`` holds keys of rows
    in the same sub-project that stay where they are.

    Shifting a whole sub-project never collides with itself: every target is
    claimed once, so ``duplicates`` stays empty unless ``occupied`` is given.
    A target past the calendar limits counts as out of range.
    """
    plan = ShiftPlan(days=days)
    candidates: List[Tuple[Instance, str]] = []
    for inst in sorted(instances, key=lambda i: (i.day, i.id)):
        try:
            target = add_days(inst.day, days)
        except OverflowError:
            plan.out_of_range.append(inst)
            continue
        if target < start_date or target > end_date:
            plan.out_of_range.append(inst)
        else:
            candidates.append((inst, target))

    claimed: Set[Key] = set(occupied)
    for inst, target in candidates:
        key = (inst.activity_id, target)
        if key in claimed:
            plan.duplicates.append(inst)
            continue
        claimed.add(key)
        plan.moves.append((inst, target))

    # a skipped row keeps its day, so nothing may move onto it either
    while plan.duplicates:
        staying = {(d.activity_id, d.day) for d in plan.duplicates}
        blocked = [m for m in plan.moves if (m[0].activity_id, m[1]) in staying]
        if not blocked:
            break
        for move in blocked:
            plan.moves.remove(move)
            plan.duplicates.append(move[0])
    plan.duplicates.sort(key=lambda i: (i.day, i.id))
    return plan
