"""Service for detecting scheduling conflicts between events."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, timedelta

from healthtracker.domain.models import Event, EventDraft, OverlapResult, rule_for
from healthtracker.services.datetimes import parse_date, parse_time

# Minimum gap between events held at different locations.
TRAVEL_BUFFER = timedelta(hours=1)

# Assumed length of a candidate without an end time.
DEFAULT_DURATION = timedelta(hours=1)


def intervals_overlap(
    start: datetime, end: datetime, other_start: datetime, other_end: datetime
) -> bool:
    """Half-open overlap test; touching boundaries (end == start) do not overlap."""
    return start < other_end and end > other_start


def violates_buffer(
    start: datetime,
    end: datetime,
    other_start: datetime,
    other_end: datetime,
    buffer: timedelta = TRAVEL_BUFFER,
) -> bool:
    """True when ``[start, end]`` comes within *buffer* of the other event.

    Each clause below is sufficient on its own. Taken together they amount
    to the candidate touching the closed window
    ``[other_start - buffer, other_end + buffer]``, so a gap of exactly
    *buffer* still counts as a violation.
    """
    window_start = other_start - buffer
    window_end = other_end + buffer

    starts_in_lead_buffer = window_start <= start <= other_start
    ends_in_trail_buffer = other_end <= end <= window_end
    spans_lead_buffer = start <= window_start and end >= other_start
    starts_in_window = window_start <= start <= window_end
    ends_in_window = window_start <= end <= window_end
    encloses_window = start <= window_start and end >= window_end

    return (
        starts_in_lead_buffer
        or ends_in_trail_buffer
        or spans_lead_buffer
        or starts_in_window
        or ends_in_window
        or encloses_window
    )


def _timed_targets(
    events: list[Event], day: date
) -> list[tuple[Event, datetime, datetime]]:
    """Events that can be conflicted against, with their parsed interval."""
    targets = []
    for event in events:
        if not rule_for(event.type).checks_overlaps:
            continue
        start = parse_time(event.start_time, day)
        end = parse_time(event.end_time, day)
        if start is None or end is None:
            continue
        targets.append((event, start, end))
    return targets


def _direct_conflict_message(event: Event) -> str:
    return (
        f'Conflict: event "{event.type} - {event.professional_name}" '
        f"at {event.start_time} in the same location ({event.location_name})"
    )


def _buffer_message(event: Event) -> str:
    return (
        "A 1-hour interval is required between events at different locations. "
        f'Event "{event.type} - {event.professional_name}" at {event.start_time}'
    )


def check_event_overlaps(
    candidate: EventDraft | Event,
    existing_events: Iterable[Event],
) -> OverlapResult:
    """Check *candidate* against the other events scheduled on the same day.

    Deleted events and the candidate itself (when editing) are ignored.
    Prescriptions never conflict, either as the candidate or as a target.
    A same-location overlap is reported first; only when there is none are
    other-location events checked for the one-hour travel buffer. The first
    offending event in *existing_events* order is the one reported.
    """
    if not candidate.event_date or not candidate.start_time:
        return OverlapResult(has_overlap=False)

    same_day = [
        event
        for event in existing_events
        if event.event_date == candidate.event_date
        and not event.is_deleted
        and (candidate.id is None or event.id != candidate.id)
    ]
    if not same_day:
        return OverlapResult(has_overlap=False)

    if not rule_for(candidate.type).checks_overlaps:
        return OverlapResult(has_overlap=False)

    day = parse_date(candidate.event_date)
    if day is None:
        return OverlapResult(has_overlap=False)

    start = parse_time(candidate.start_time, day)
    if start is None:
        return OverlapResult(has_overlap=False)

    if candidate.end_time:
        end = parse_time(candidate.end_time, day)
        if end is None:
            return OverlapResult(has_overlap=False)
    else:
        end = start + DEFAULT_DURATION

    targets = _timed_targets(same_day, day)

    for event, other_start, other_end in targets:
        if event.location_name == candidate.location_name and intervals_overlap(
            start, end, other_start, other_end
        ):
            return OverlapResult(
                has_overlap=True, message=_direct_conflict_message(event)
            )

    for event, other_start, other_end in targets:
        if event.location_name != candidate.location_name and violates_buffer(
            start, end, other_start, other_end
        ):
            return OverlapResult(has_overlap=True, message=_buffer_message(event))

    return OverlapResult(has_overlap=False)
