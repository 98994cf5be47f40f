"""Lifecycle status of a stored event relative to the current time."""

from __future__ import annotations

from datetime import datetime, timedelta

from healthtracker.domain.models import Event, EventStatus
from healthtracker.errors import EventLockedError
from healthtracker.services.datetimes import parse_date, parse_time

# Events without an end time count as finished this long after they start.
OPEN_ENDED_DURATION = timedelta(hours=1)

LOCKED_STATUSES = frozenset({EventStatus.PAST, EventStatus.ONGOING})


def event_status(event: Event, now: datetime) -> EventStatus:
    """Classify *event* as past, ongoing, today or future at naive local *now*.

    Events whose date or start time do not parse are reported as future.
    """
    day = parse_date(event.event_date)
    if day is None:
        return EventStatus.FUTURE
    start = parse_time(event.start_time, day)
    if start is None:
        return EventStatus.FUTURE
    end = parse_time(event.end_time, day)

    if end is not None:
        if start <= now <= end:
            return EventStatus.ONGOING
        if now > end:
            return EventStatus.PAST
    elif now > start + OPEN_ENDED_DURATION:
        return EventStatus.PAST

    if day == now.date():
        return EventStatus.TODAY
    return EventStatus.FUTURE


def is_locked(event: Event, now: datetime) -> bool:
    return event_status(event, now) in LOCKED_STATUSES


def ensure_mutable(event: Event, now: datetime) -> None:
    """Raise ``EventLockedError`` if *event* is past or ongoing."""
    status = event_status(event, now)
    if status in LOCKED_STATUSES:
        raise EventLockedError(event.id, status.value)
