# tests/test_validation.py
from __future__ import annotations

import pytest

from planboard.models.errors import InvalidInput
from planboard.services.validation import (
    normalize_activity_payload,
    normalize_project_payload,
    normalize_subproject_payload,
    parse_activity_ids,
    parse_date,
    parse_direction,
    parse_id,
    parse_shift_days,
)


def _error(fn, *args) -> str:
    with pytest.raises(InvalidInput) as info:
        fn(*args)
    return info.value.message


# --- projects --------------------------------------------------------------

def test_project_end_date_derived_from_length():
    value = normalize_project_payload({"name": "  Launch ", "startDate": "2026-03-02", "lengthDays": 7})
    assert (value.name, value.start_date, value.end_date, value.length_days) == (
        "Launch", "2026-03-02", "2026-03-08", 7,
    )


def test_project_length_derived_from_end_date():
    value = normalize_project_payload({"name": "Launch", "startDate": "2026-03-02", "endDate": "2026-03-02"})
    assert value.length_days == 1


def test_project_length_accepts_integer_strings():
    value = normalize_project_payload({"name": "Launch", "startDate": "2026-03-02", "lengthDays": "3"})
    assert value.end_date == "2026-03-04"


def test_project_consistent_end_and_length_accepted():
    value = normalize_project_payload(
        {"name": "Launch", "startDate": "2026-03-02", "endDate": "2026-03-08", "lengthDays": 7}
    )
    assert value.length_days == 7


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"startDate": "2026-03-02", "lengthDays": 1}, "Project name is required."),
        ({"name": "   ", "startDate": "2026-03-02", "lengthDays": 1}, "Project name is required."),
        ({"name": "P", "startDate": "2026-02-30", "lengthDays": 1}, "A valid startDate (YYYY-MM-DD) is required."),
        ({"name": "P", "startDate": "2026-03-02"}, "Provide either endDate or lengthDays."),
        ({"name": "P", "startDate": "2026-03-02", "endDate": "2026-03-01"}, "endDate cannot be before startDate."),
        (
            {"name": "P", "startDate": "2026-03-02", "endDate": "2026-03-08", "lengthDays": 6},
            "endDate and lengthDays are inconsistent.",
        ),
    ],
)
def test_project_payload_errors(payload, message):
    assert _error(normalize_project_payload, payload) == message


@pytest.mark.parametrize("length", [0, -3, 1.5, True, "two"])
def test_project_length_must_be_positive_integer(length):
    with pytest.raises(InvalidInput):
        normalize_project_payload({"name": "P", "startDate": "2026-03-02", "lengthDays": length})


# --- activities / sub-projects --------------------------------------------

def test_activity_payload_trims_and_checks_color():
    value = normalize_activity_payload({"name": " Build ", "color": " #a1B2c3 "})
    assert (value.name, value.color) == ("Build", "#a1B2c3")


@pytest.mark.parametrize("color", ["#12345", "123456", "#12345G", "", None])
def test_activity_color_must_be_hex(color):
    with pytest.raises(InvalidInput):
        normalize_activity_payload({"name": "Build", "color": color})


def test_subproject_name_required():
    assert _error(normalize_subproject_payload, {"name": " "}) == "Sub-project name is required."
    assert normalize_subproject_payload({"name": " Phase 2 "}).name == "Phase 2"


# --- scalars ---------------------------------------------------------------

def test_parse_id():
    assert parse_id("12") == 12
    assert parse_id(3.0) == 3
    for bad in (0, -1, True, "x", None, 2.5):
        with pytest.raises(InvalidInput):
            parse_id(bad)


def test_parse_date_trims():
    assert parse_date(" 2026-03-04 ") == "2026-03-04"
    with pytest.raises(InvalidInput):
        parse_date("2026-03-32")


def test_parse_direction():
    assert parse_direction("up") == "up"
    with pytest.raises(InvalidInput):
        parse_direction("left")


def test_parse_shift_days():
    assert parse_shift_days("-2") == -2
    assert parse_shift_days(4) == 4
    for bad in (0, "0", 1.5, None, "soon"):
        with pytest.raises(InvalidInput):
            parse_shift_days(bad)


def test_parse_activity_ids():
    assert parse_activity_ids(None) is None
    assert parse_activity_ids([1, "2"]) == [1, 2]
    assert parse_activity_ids([]) == []
    with pytest.raises(InvalidInput):
        parse_activity_ids("1,2")
    with pytest.raises(InvalidInput):
        parse_activity_ids([0])


def test_integral_decimal_strings_are_integers():
    assert parse_id("3.0") == 3
    assert parse_shift_days(" -2.0 ") == -2
    value = normalize_project_payload({"name": "P", "startDate": "2026-03-02", "lengthDays": "3.0"})
    assert value.end_date == "2026-03-04"
    for bad in ("3.5", "1e3", ".", "3..0"):
        with pytest.raises(InvalidInput):
            parse_id(bad)


def test_project_length_beyond_the_calendar():
    with pytest.raises(InvalidInput) as info:
        normalize_project_payload({"name": "P", "startDate": "2026-03-02", "lengthDays": 10**7})
    assert info.value.message.startswith("lengthDays")
