"""Tests for event status and the past/ongoing edit lock."""

from datetime import datetime

import pytest

from healthtracker.domain.models import Event, EventStatus, EventType
from healthtracker.errors import EventLockedError
from healthtracker.services.status import ensure_mutable, event_status, is_locked


def _make_event(**overrides) -> Event:
    defaults = dict(
        type=EventType.CONSULTATION,
        event_date="10/06/2030",
        start_time="09:00",
        end_time="10:00",
        location_name="Hospital São Lucas",
    )
    defaults.update(overrides)
    return Event(**defaults)


@pytest.mark.parametrize(
    ("now", "expected"),
    [
        (datetime(2030, 6, 9, 23, 0), EventStatus.FUTURE),
        (datetime(2030, 6, 10, 8, 0), EventStatus.TODAY),
        (datetime(2030, 6, 10, 9, 0), EventStatus.ONGOING),
        (datetime(2030, 6, 10, 9, 30), EventStatus.ONGOING),
        (datetime(2030, 6, 10, 10, 0), EventStatus.ONGOING),
        (datetime(2030, 6, 10, 10, 1), EventStatus.PAST),
        (datetime(2030, 7, 1, 0, 0), EventStatus.PAST),
    ],
)
def test_timed_event_status(now, expected):
    assert event_status(_make_event(), now) == expected


@pytest.mark.parametrize(
    ("now", "expected"),
    [
        (datetime(2030, 6, 10, 8, 0), EventStatus.TODAY),
        (datetime(2030, 6, 10, 9, 30), EventStatus.TODAY),
        (datetime(2030, 6, 10, 10, 0), EventStatus.TODAY),
        (datetime(2030, 6, 10, 10, 1), EventStatus.PAST),
    ],
)
def test_prescription_status_counts_one_hour_from_start(now, expected):
    prescription = _make_event(type=EventType.PRESCRIPTION, end_time=None)
    assert event_status(prescription, now) == expected


def test_unparseable_event_is_future():
    # Only reachable for records built without validation.
    event = _make_event().model_copy(update={"event_date": "not a date"})
    assert event_status(event, datetime(2030, 6, 10, 9, 30)) == EventStatus.FUTURE


def test_past_and_ongoing_events_are_locked():
    event = _make_event()

    assert is_locked(event, datetime(2030, 6, 10, 9, 30)) is True
    assert is_locked(event, datetime(2030, 6, 11, 9, 30)) is True
    assert is_locked(event, datetime(2030, 6, 10, 8, 0)) is False


def test_ensure_mutable_raises_for_locked_event():
    event = _make_event()

    ensure_mutable(event, datetime(2030, 6, 10, 8, 0))
    with pytest.raises(EventLockedError) as exc_info:
        ensure_mutable(event, datetime(2030, 6, 10, 12, 0))
    assert exc_info.value.status == "past"
