"""Timeline grouping, calendar windows and the per-event file listing."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from datetime import date

from dateutil.relativedelta import SU, relativedelta

from healthtracker.domain.models import (
    CalendarView,
    DayGroup,
    Event,
    EventAttachments,
    Holiday,
)
from healthtracker.services.datetimes import date_sort_key, day_name, parse_date
from healthtracker.services.holidays import is_holiday


def group_by_date(
    events: Iterable[Event], holidays: Iterable[Holiday] = ()
) -> list[DayGroup]:
    """Group non-deleted events by day.

    Days come out in chronological order and the events of each day sorted
    by start time.
    """
    holidays = list(holidays)
    grouped: dict[str, list[Event]] = defaultdict(list)
    for event in events:
        if not event.is_deleted:
            grouped[event.event_date].append(event)

    groups: list[DayGroup] = []
    for event_date in sorted(grouped, key=date_sort_key):
        day = parse_date(event_date)
        holiday = is_holiday(day, holidays) if day else None
        groups.append(
            DayGroup(
                event_date=event_date,
                weekday=day_name(day) if day else "",
                holiday_name=holiday.name if holiday else None,
                events=sorted(grouped[event_date], key=lambda e: e.start_time),
            )
        )
    return groups


def calendar_window(anchor: date, view: CalendarView) -> tuple[date, date]:
    """Inclusive ``(first, last)`` days shown around *anchor*.

    Weeks run Sunday to Saturday.
    """
    if view == CalendarView.DAY:
        return anchor, anchor
    if view == CalendarView.WEEK:
        first = anchor + relativedelta(weekday=SU(-1))
        return first, first + relativedelta(days=6)
    return anchor + relativedelta(day=1), anchor + relativedelta(day=31)


def events_in_window(events: Iterable[Event], first: date, last: date) -> list[Event]:
    """Non-deleted events dated within ``[first, last]``, in timeline order."""
    selected = []
    for event in events:
        day = parse_date(event.event_date)
        if not event.is_deleted and day is not None and first <= day <= last:
            selected.append(event)
    return sorted(selected, key=lambda e: (date_sort_key(e.event_date), e.start_time))


def event_dates(events: Iterable[Event]) -> list[date]:
    """Distinct days that carry at least one non-deleted event."""
    days = {parse_date(e.event_date) for e in events if not e.is_deleted}
    days.discard(None)
    return sorted(days)


def attachments_by_event(
    events: Iterable[Event], holidays: Iterable[Holiday] = ()
) -> list[EventAttachments]:
    """Events that still carry documents, oldest first.

    Removed files are left out. Deleted events are kept and flagged.
    """
    holidays = list(holidays)
    entries: list[EventAttachments] = []
    ordered = sorted(events, key=lambda e: (date_sort_key(e.event_date), e.start_time))
    for event in ordered:
        files = [f for f in event.files if not f.is_deleted]
        if not files:
            continue
        day = parse_date(event.event_date)
        holiday = is_holiday(day, holidays) if day else None
        entries.append(
            EventAttachments(
                event_id=event.id,
                title=f"{event.type.value} - {event.professional_name}",
                event_date=event.event_date,
                weekday=day_name(day) if day else "",
                holiday_name=holiday.name if holiday else None,
                is_deleted=event.is_deleted,
                deleted_at=event.deleted_at,
                files=files,
            )
        )
    return entries
