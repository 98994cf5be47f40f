"""Parsing and classification of event dates and times.

Dates are ``DD/MM/YYYY`` and times ``HH:MM`` (24-hour), ASCII digits with
fixed separators. Nothing here is locale-sensitive and ISO dates are not
accepted.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time

DATE_FORMAT = "%d/%m/%Y"
TIME_FORMAT = "%H:%M"

_DATE_RE = re.compile(r"\d{2}/\d{2}/\d{4}", re.ASCII)
_TIME_RE = re.compile(r"([01]\d|2[0-3]):([0-5]\d)", re.ASCII)
_NON_DIGIT_RE = re.compile(r"\D", re.ASCII)

_DAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

# weekday() -> (opening hour, closing hour), closing hour exclusive.
_BUSINESS_HOURS = {
    0: (7, 19),
    1: (7, 19),
    2: (7, 19),
    3: (7, 19),
    4: (7, 19),
    5: (9, 13),
}


def is_valid_date_format(value: str | None) -> bool:
    return bool(value) and _DATE_RE.fullmatch(value) is not None


def is_valid_time_format(value: str | None) -> bool:
    return bool(value) and _TIME_RE.fullmatch(value) is not None


def parse_date(value: str | None) -> date | None:
    """Parse a strict ``DD/MM/YYYY`` string, or return ``None``.

    The value must also name a real calendar day, so ``31/04/2025`` and
    ``29/02/2025`` are rejected.
    """
    if not is_valid_date_format(value):
        return None
    day, month, year = (int(part) for part in value.split("/"))
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_time(value: str | None, base_date: date) -> datetime | None:
    """Combine a strict ``HH:MM`` string with *base_date*'s calendar day."""
    if not value:
        return None
    match = _TIME_RE.fullmatch(value)
    if match is None:
        return None
    if isinstance(base_date, datetime):
        base_date = base_date.date()
    return datetime.combine(base_date, time(int(match[1]), int(match[2])))


def format_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def format_time(value: datetime | time) -> str:
    return value.strftime(TIME_FORMAT)


def day_name(value: date) -> str:
    return _DAY_NAMES[value.weekday()]


def is_weekend(value: date) -> bool:
    return value.weekday() >= 5


def is_business_hours(instant: datetime) -> bool:
    """Mon-Fri 07:00-19:00, Sat 09:00-13:00, never on Sunday.

    Only the hour is looked at, so 18:59 is inside and 19:00 is not.
    """
    window = _BUSINESS_HOURS.get(instant.weekday())
    if window is None:
        return False
    opens, closes = window
    return opens <= instant.hour < closes


def date_sort_key(value: str) -> date:
    """Chronological key for ``DD/MM/YYYY`` strings; unparseable values sort last."""
    return parse_date(value) or date.max


def mask_date_input(value: str) -> str:
    """Keep the digits of *value* and lay them out as ``DD/MM/YYYY``."""
    digits = _NON_DIGIT_RE.sub("", value)
    if len(digits) <= 2:
        return digits
    if len(digits) <= 4:
        return f"{digits[:2]}/{digits[2:]}"
    return f"{digits[:2]}/{digits[2:4]}/{digits[4:8]}"


def mask_time_input(value: str) -> str:
    """Keep the digits of *value* and lay them out as ``HH:MM``."""
    digits = _NON_DIGIT_RE.sub("", value)
    if len(digits) <= 2:
        return digits
    return f"{digits[:2]}:{digits[2:4]}"
