# Rev 0.2.0
"""Boundary parsing: loosely typed payloads in, validated values out.

Every function raises ``InvalidInput`` with a user-facing message on the
first problem found. Unknown payload keys are ignored.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from planboard.models.errors import InvalidInput
from planboard.models.types import DIRECTIONS, Direction
from planboard.utils.dates import add_days, diff_days_inclusive, parse_date_key, to_date_key

HEX_COLOR_PATTERN = re.compile(r"#[0-9a-fA-F]{6}")
_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")
_DECIMAL_PATTERN = re.compile(r"[+-]?(?:[0-9]+\.[0-9]*|\.[0-9]+)")


@dataclass(frozen=True)
class ProjectInput:
    name: str
    start_date: str
    end_date: str
    length_days: int


@dataclass(frozen=True)
class ActivityInput:
    name: str
    color: str


@dataclass(frozen=True)
class SubProjectInput:
    name: str


def _as_integer(value: Any) -> Optional[int]:
    """Integer value of ints, integral floats and their string forms ("3", "3.0"); else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        if _INTEGER_PATTERN.fullmatch(text):
            return int(text)
        if _DECIMAL_PATTERN.fullmatch(text):
            return _as_integer(float(text))
    return None


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _trimmed(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def parse_id(value: Any, label: str = "id") -> int:
    parsed = _as_integer(value)
    if parsed is None or parsed < 1:
        raise InvalidInput(f"Invalid {label}.")
    return parsed


def parse_optional_id(value: Any, label: str = "id") -> Optional[int]:
    return None if value is None else parse_id(value, label)


def parse_date(value: Any, label: str = "date") -> str:
    key = _trimmed(value)
    try:
        parse_date_key(key)
    except ValueError:
        raise InvalidInput(f"{label} must be a valid date key (YYYY-MM-DD).") from None
    return key


def parse_direction(value: Any) -> Direction:
    if value not in DIRECTIONS:
        raise InvalidInput("direction must be 'up' or 'down'.")
    return value


def parse_shift_days(value: Any) -> int:
    days = _as_integer(value)
    if days is None or days == 0:
        raise InvalidInput("days must be a non-zero integer.")
    return days


def parse_length_days(value: Any) -> int:
    days = _as_integer(value)
    if days is None or days < 1:
        raise InvalidInput("lengthDays must be an integer greater than 0.")
    return days


def parse_name(value: Any, label: str) -> str:
    name = _trimmed(value)
    if not name:
        raise InvalidInput(f"{label} name is required.")
    return name


def normalize_project_payload(payload: Optional[Mapping[str, Any]]) -> ProjectInput:
    """Validate name and date range, deriving whichever of endDate/lengthDays is missing."""
    payload = payload or {}
    name = parse_name(payload.get("name"), "Project")

    try:
        start = parse_date_key(payload.get("startDate"))
    except ValueError:
        raise InvalidInput("A valid startDate (YYYY-MM-DD) is required.") from None

    end_raw = payload.get("endDate")
    length_raw = payload.get("lengthDays")
    has_end = isinstance(end_raw, str) and bool(end_raw.strip())
    has_length = not _blank(length_raw)
    if not has_end and not has_length:
        raise InvalidInput("Provide either endDate or lengthDays.")

    length_days = parse_length_days(length_raw) if has_length else None
    if has_end:
        try:
            end = parse_date_key(end_raw.strip())
        except ValueError:
            raise InvalidInput("endDate must be a valid date key (YYYY-MM-DD).") from None
        derived = diff_days_inclusive(start, end)
        if derived < 1:
            raise InvalidInput("endDate cannot be before startDate.")
        if length_days is not None and derived != length_days:
            raise InvalidInput("endDate and lengthDays are inconsistent.")
        return ProjectInput(name, to_date_key(start), to_date_key(end), derived)

    try:
        end_key = add_days(start, length_days - 1)
    except OverflowError:
        raise InvalidInput("lengthDays is too large for the calendar.") from None
    return ProjectInput(name, to_date_key(start), end_key, length_days)


def normalize_activity_payload(payload: Optional[Mapping[str, Any]]) -> ActivityInput:
    payload = payload or {}
    name = parse_name(payload.get("name"), "Activity")
    color = _trimmed(payload.get("color"))
    if not HEX_COLOR_PATTERN.fullmatch(color):
        raise InvalidInput("Activity color must be a hex value like #1A2B3C.")
    return ActivityInput(name, color)


def normalize_subproject_payload(payload: Optional[Mapping[str, Any]]) -> SubProjectInput:
    payload = payload or {}
    return SubProjectInput(parse_name(payload.get("name"), "Sub-project"))


def parse_activity_ids(value: Any) -> Optional[List[int]]:
    """Optional list of activity ids; None means "no filter"."""
    if value is None:
        return None
    if not isinstance(value, (list, tuple, set, frozenset)):
        raise InvalidInput("activityIds must be a list of activity ids.")
    return [parse_id(v, "activity id") for v in value]
