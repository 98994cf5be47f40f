"""Tests for date/time parsing and business-hours classification."""

from datetime import date, datetime

import pytest

from healthtracker.services.datetimes import (
    date_sort_key,
    day_name,
    format_date,
    format_time,
    is_business_hours,
    mask_date_input,
    mask_time_input,
    parse_date,
    parse_time,
)

# 10/06/2030 is a Monday.
_MONDAY = date(2030, 6, 10)
_SATURDAY = date(2030, 6, 15)
_SUNDAY = date(2030, 6, 16)


def test_parse_date_accepts_strict_format():
    assert parse_date("10/06/2025") == date(2025, 6, 10)
    assert parse_date("29/02/2028") == date(2028, 2, 29)


@pytest.mark.parametrize(
    "value",
    [
        "",
        None,
        "10-06-2025",
        "1/06/2025",
        "10/6/2025",
        "10/06/25",
        "aa/bb/cccc",
        "31/04/2025",
        "29/02/2025",
        "00/01/2025",
        "10/13/2025",
        "10/06/0000",
        " 10/06/2025",
        "10/06/2025\n",
        "2025-06-10",
    ],
)
def test_parse_date_rejects_malformed(value):
    assert parse_date(value) is None


def test_parse_time_combines_with_base_date():
    assert parse_time("09:30", date(2025, 6, 10)) == datetime(2025, 6, 10, 9, 30)
    assert parse_time("00:00", date(2025, 6, 10)) == datetime(2025, 6, 10, 0, 0)
    assert parse_time("23:59", date(2025, 6, 10)) == datetime(2025, 6, 10, 23, 59)


def test_parse_time_ignores_time_of_day_of_base():
    base = datetime(2025, 6, 10, 15, 45)
    assert parse_time("09:30", base) == datetime(2025, 6, 10, 9, 30)


@pytest.mark.parametrize(
    "value", ["", None, "24:00", "9:30", "09:60", "0930", "09:30:00", "ab:cd", "-1:00"]
)
def test_parse_time_rejects_malformed(value):
    assert parse_time(value, date(2025, 6, 10)) is None


@pytest.mark.parametrize(
    ("day", "hour", "minute", "expected"),
    [
        (_MONDAY, 6, 59, False),
        (_MONDAY, 7, 0, True),
        (_MONDAY, 12, 0, True),
        (_MONDAY, 18, 59, True),
        (_MONDAY, 19, 0, False),
        (_SATURDAY, 8, 59, False),
        (_SATURDAY, 9, 0, True),
        (_SATURDAY, 12, 59, True),
        (_SATURDAY, 13, 0, False),
        (_SUNDAY, 10, 0, False),
    ],
)
def test_is_business_hours(day, hour, minute, expected):
    instant = datetime(day.year, day.month, day.day, hour, minute)
    assert is_business_hours(instant) is expected


def test_formatting_helpers():
    assert format_date(date(2025, 1, 5)) == "05/01/2025"
    assert format_time(datetime(2025, 1, 5, 7, 3)) == "07:03"
    assert day_name(_MONDAY) == "Monday"
    assert day_name(_SUNDAY) == "Sunday"


def test_date_sort_key_is_chronological_with_garbage_last():
    values = ["01/02/2025", "31/01/2025", "bogus", "15/12/2024"]
    assert sorted(values, key=date_sort_key) == [
        "15/12/2024",
        "31/01/2025",
        "01/02/2025",
        "bogus",
    ]


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("1", "1"),
        ("1006", "10/06"),
        ("100", "10/0"),
        ("10062025", "10/06/2025"),
        ("10/06/2025", "10/06/2025"),
        ("1006202599", "10/06/2025"),
    ],
)
def test_mask_date_input(raw, expected):
    assert mask_date_input(raw) == expected


def test_mask_time_input():
    assert mask_time_input("9") == "9"
    assert mask_time_input("0930") == "09:30"
    assert mask_time_input("09h30") == "09:30"
