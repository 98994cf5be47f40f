"""Tests for the domain event bus and its history handlers."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from healthtracker.domain.bus import EventBus
from healthtracker.domain.events import (
    AttachmentAdded,
    AttachmentRemoved,
    EventCancelled,
    EventConfirmed,
    EventRescheduled,
    EventScheduled,
)
from healthtracker.domain.handlers import HandlerRegistry
from healthtracker.domain.models import Event, EventType, HistoryEntryType
from healthtracker.repos.memory import EventRepository, HistoryRepository


@pytest.fixture()
def env():
    """Fresh bus + repos + registry for each test."""
    bus = EventBus()
    event_repo = EventRepository()
    history_repo = HistoryRepository()
    registry = HandlerRegistry(bus=bus, event_repo=event_repo, history_repo=history_repo)

    class Env:
        pass

    e = Env()
    e.bus = bus
    e.event_repo = event_repo
    e.history_repo = history_repo
    e.registry = registry
    return e


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


def test_bus_calls_handlers_in_registration_order():
    bus = EventBus()
    calls = []
    bus.subscribe(EventScheduled, lambda e: calls.append(("first", e.event_id)))
    bus.subscribe(EventScheduled, lambda e: calls.append(("second", e.event_id)))

    assert bus.publish(EventScheduled(event_id="abc")) == 2
    assert bus.publish(EventConfirmed(event_id="abc")) == 0

    assert calls == [("first", "abc"), ("second", "abc")]


def test_event_scheduled_records_history(env):
    event = _make_event()
    env.event_repo.upsert(event)

    env.bus.publish(EventScheduled(event_id=event.id))

    entries = env.history_repo.list_for_event(event.id)
    assert [e.type for e in entries] == [HistoryEntryType.SCHEDULED]
    assert entries[0].payload == {
        "type": "Consulta",
        "event_date": "10/06/2030",
        "start_time": "09:00",
        "location_name": "Hospital São Lucas",
    }


def test_unknown_event_is_ignored(env):
    env.bus.publish(EventScheduled(event_id="missing"))
    env.bus.publish(EventConfirmed(event_id="missing"))

    assert env.history_repo.list_for_event("missing") == []


def test_event_confirmed_marks_event(env):
    event = _make_event()
    env.event_repo.upsert(event)

    env.bus.publish(EventConfirmed(event_id=event.id))

    assert event.is_confirmed is True
    entries = env.history_repo.list_for_event(event.id)
    assert entries[-1].type == HistoryEntryType.CONFIRMED


def test_full_lifecycle_history(env):
    event = _make_event()
    env.event_repo.upsert(event)
    deleted_at = datetime(2030, 6, 5, 8, 0, tzinfo=timezone.utc)

    env.bus.publish(EventScheduled(event_id=event.id))
    env.bus.publish(EventRescheduled(event_id=event.id, changed_fields=["start_time"]))
    env.bus.publish(AttachmentAdded(event_id=event.id, file_id="f1"))
    env.bus.publish(AttachmentRemoved(event_id=event.id, file_id="f1"))
    env.bus.publish(EventCancelled(event_id=event.id, deleted_at=deleted_at))

    entries = env.history_repo.list_for_event(event.id)
    assert [e.type for e in entries] == [
        HistoryEntryType.SCHEDULED,
        HistoryEntryType.RESCHEDULED,
        HistoryEntryType.ATTACHMENT_ADDED,
        HistoryEntryType.ATTACHMENT_REMOVED,
        HistoryEntryType.CANCELLED,
    ]
    assert entries[1].payload == {"changed_fields": ["start_time"]}
    assert entries[-1].payload == {"deleted_at": deleted_at.isoformat()}
