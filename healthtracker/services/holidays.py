"""Holiday lookup over the built-in national table plus user holidays."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from healthtracker.domain.models import Holiday
from healthtracker.services.datetimes import day_name, is_weekend

BUILTIN_HOLIDAYS: tuple[Holiday, ...] = (
    Holiday(id="builtin-01-01", date="2025-01-01", name="Ano Novo", is_recurring=True),
    Holiday(
        id="builtin-05-01", date="2025-05-01", name="Dia do Trabalho", is_recurring=True
    ),
    Holiday(
        id="builtin-09-07",
        date="2025-09-07",
        name="Independência do Brasil",
        is_recurring=True,
    ),
    Holiday(id="builtin-12-25", date="2025-12-25", name="Natal", is_recurring=True),
)


def merge_holidays(user_holidays: Iterable[Holiday] = ()) -> list[Holiday]:
    """Built-in holidays first, then the user's, without duplicate ids."""
    merged: dict[str, Holiday] = {h.id: h for h in BUILTIN_HOLIDAYS}
    for holiday in user_holidays:
        merged.setdefault(holiday.id, holiday)
    return list(merged.values())


def is_holiday(day: date, user_holidays: Iterable[Holiday] = ()) -> Holiday | None:
    """Return the holiday falling on *day*, if any.

    An exact ``YYYY-MM-DD`` match wins over a recurring month/day match.
    """
    holidays = merge_holidays(user_holidays)
    iso_day = day.isoformat()

    for holiday in holidays:
        if holiday.date == iso_day:
            return holiday

    month_day = iso_day[5:]
    for holiday in holidays:
        if holiday.is_recurring and holiday.date[5:] == month_day:
            return holiday
    return None


def off_day_reason(day: date, user_holidays: Iterable[Holiday] = ()) -> str | None:
    """Describe why *day* is an off day (weekend or holiday), or ``None``."""
    if is_weekend(day):
        return day_name(day)
    holiday = is_holiday(day, user_holidays)
    if holiday is not None:
        return f"holiday - {holiday.name}"
    return None
