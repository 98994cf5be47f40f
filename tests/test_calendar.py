"""Tests for timeline grouping, calendar windows and the file listing."""

from datetime import date

import pytest

from healthtracker.domain.models import (
    CalendarView,
    Event,
    EventFile,
    EventType,
    FileType,
)
from healthtracker.services.calendar import (
    attachments_by_event,
    calendar_window,
    event_dates,
    events_in_window,
    group_by_date,
)


def _make_event(event_date: str, start: str = "09:00", **overrides) -> Event:
    defaults = dict(
        type=EventType.SESSION,
        event_date=event_date,
        start_time=start,
        end_time="23:00",
        location_name="Clínica Vida",
    )
    defaults.update(overrides)
    return Event(**defaults)


def test_group_by_date_orders_days_and_start_times():
    events = [
        _make_event("02/01/2031", "08:00"),
        _make_event("25/12/2030", "15:00"),
        _make_event("10/06/2030", "11:00"),
        _make_event("25/12/2030", "09:30"),
        _make_event("11/06/2030", "10:00", is_deleted=True),
    ]

    groups = group_by_date(events)

    assert [g.event_date for g in groups] == ["10/06/2030", "25/12/2030", "02/01/2031"]
    christmas = groups[1]
    assert [e.start_time for e in christmas.events] == ["09:30", "15:00"]
    assert christmas.weekday == "Wednesday"
    assert christmas.holiday_name == "Natal"
    assert groups[0].holiday_name is None


def test_group_by_date_empty():
    assert group_by_date([]) == []


@pytest.mark.parametrize(
    ("anchor", "view", "expected"),
    [
        (date(2030, 6, 12), CalendarView.DAY, (date(2030, 6, 12), date(2030, 6, 12))),
        (date(2030, 6, 12), CalendarView.WEEK, (date(2030, 6, 9), date(2030, 6, 15))),
        (date(2030, 6, 9), CalendarView.WEEK, (date(2030, 6, 9), date(2030, 6, 15))),
        (date(2030, 6, 15), CalendarView.WEEK, (date(2030, 6, 9), date(2030, 6, 15))),
        (date(2030, 6, 12), CalendarView.MONTH, (date(2030, 6, 1), date(2030, 6, 30))),
        (date(2028, 2, 10), CalendarView.MONTH, (date(2028, 2, 1), date(2028, 2, 29))),
    ],
)
def test_calendar_window(anchor, view, expected):
    assert calendar_window(anchor, view) == expected


def test_events_in_window():
    inside_late = _make_event("15/06/2030", "10:00")
    inside_early = _make_event("09/06/2030", "10:00")
    outside = _make_event("16/06/2030")
    deleted = _make_event("12/06/2030", is_deleted=True)

    selected = events_in_window(
        [inside_late, outside, deleted, inside_early],
        date(2030, 6, 9),
        date(2030, 6, 15),
    )

    assert selected == [inside_early, inside_late]


def test_event_dates_are_distinct_and_sorted():
    events = [
        _make_event("11/06/2030"),
        _make_event("10/06/2030"),
        _make_event("11/06/2030", "14:00"),
        _make_event("12/06/2030", is_deleted=True),
    ]

    assert event_dates(events) == [date(2030, 6, 10), date(2030, 6, 11)]


def _attach(event: Event, file_type: FileType, is_deleted: bool = False) -> EventFile:
    file = EventFile(
        event_id=event.id, type=file_type, path="docs/file.pdf", is_deleted=is_deleted
    )
    event.files.append(file)
    return file


def test_attachments_by_event():
    later = _make_event("25/12/2030", professional_name="Dra. Maria Souza")
    report = _attach(later, FileType.REPORT)
    earlier = _make_event("10/06/2030", is_deleted=True)
    invoice = _attach(earlier, FileType.INVOICE)
    _attach(earlier, FileType.REQUISITION, is_deleted=True)
    only_removed = _make_event("11/06/2030")
    _attach(only_removed, FileType.CERTIFICATE, is_deleted=True)
    _make_event("12/06/2030")

    entries = attachments_by_event([later, only_removed, earlier])

    assert [e.event_id for e in entries] == [earlier.id, later.id]
    assert entries[0].is_deleted is True
    assert entries[0].files == [invoice]
    assert entries[1].files == [report]
    assert entries[1].title == "Sessões - Dra. Maria Souza"
    assert entries[1].weekday == "Wednesday"
    assert entries[1].holiday_name == "Natal"
