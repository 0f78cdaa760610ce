# Rev 0.2.0
"""Calendar-day arithmetic over ``YYYY-MM-DD`` keys.

All values are plain UTC calendar days; nothing here looks at the local
time zone. Keys are validated by round-trip, so ``2026-02-30`` is rejected
instead of silently rolling over into March.
"""
from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone
from typing import List, NamedTuple, Union

DATE_KEY_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")

DateLike = Union[str, date]


class DayCell(NamedTuple):
    date: str
    is_weekend: bool

    def to_dict(self) -> dict:
        return {"date": self.date, "isWeekend": self.is_weekend}


def parse_date_key(value: object) -> date:
    """Parse a strict ``YYYY-MM-DD`` key; raise ValueError for anything else."""
    if not isinstance(value, str) or not DATE_KEY_PATTERN.fullmatch(value):
        raise ValueError(f"not a YYYY-MM-DD date key: {value!r}")
    year, month, day = (int(part) for part in value.split("-"))
    # date() refuses out-of-range parts, which is the round-trip check
    parsed = date(year, month, day)
    if to_date_key(parsed) != value:
        raise ValueError(f"date key does not round-trip: {value!r}")
    return parsed


def is_date_key(value: object) -> bool:
    try:
        parse_date_key(value)
    except ValueError:
        return False
    return True


def to_date_key(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def _as_date(value: DateLike) -> date:
    return value if isinstance(value, date) else parse_date_key(value)


def add_days(key: DateLike, amount: int) -> str:
    return to_date_key(_as_date(key) + timedelta(days=amount))


def diff_days_inclusive(start: DateLike, end: DateLike) -> int:
    """Number of days in [start, end]; only meaningful when end >= start."""
    return (_as_date(end) - _as_date(start)).days + 1


def is_weekend(value: DateLike) -> bool:
    # Monday == 0 ... Saturday == 5, Sunday == 6
    return _as_date(value).weekday() >= 5


def build_day_range(start: DateLike, end: DateLike) -> List[DayCell]:
    first, last = _as_date(start), _as_date(end)
    days: List[DayCell] = []
    cursor = first
    while cursor <= last:
        days.append(DayCell(to_date_key(cursor), cursor.weekday() >= 5))
        cursor += timedelta(days=1)
    return days


def utc_now_iso() -> str:
    """Current UTC instant as ``2026-02-10T08:15:30.123Z``."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")
