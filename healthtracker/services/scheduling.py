"""Runs every scheduling rule against a form draft and folds the results."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

import structlog

from healthtracker.domain.models import (
    Event,
    EventDraft,
    Holiday,
    SchedulingVerdict,
)
from healthtracker.services.conflicts import check_event_overlaps
from healthtracker.services.validation import (
    validate_date,
    validate_required_fields,
    validate_time,
)

logger = structlog.get_logger(__name__)


def evaluate_draft(
    draft: EventDraft,
    existing_events: Iterable[Event],
    holidays: Iterable[Holiday] = (),
    today: date | None = None,
) -> SchedulingVerdict:
    """Validate *draft* the way the event form does before saving it.

    Overlaps are only checked once the date and both times are valid.
    """
    errors = validate_required_fields(
        {"type": draft.type, "location_name": draft.location_name}
    )
    warnings: dict[str, str] = {}

    date_result = validate_date(draft.event_date or "", holidays, today)
    if not date_result.is_valid:
        errors["event_date"] = date_result.error
    elif date_result.warning:
        warnings["event_date"] = date_result.warning

    time_result = validate_time(
        draft.start_time or "", draft.end_time, draft.type, draft.event_date or ""
    )
    if not time_result.start_time_valid:
        errors["start_time"] = time_result.start_time_error
    if not time_result.end_time_valid:
        errors["end_time"] = time_result.end_time_error
    if time_result.warning:
        warnings["time"] = time_result.warning

    if (
        date_result.is_valid
        and time_result.start_time_valid
        and time_result.end_time_valid
    ):
        overlap = check_event_overlaps(draft, existing_events)
        if overlap.has_overlap:
            errors["schedule"] = overlap.message
            logger.info(
                "scheduling_conflict",
                event_id=draft.id,
                event_date=draft.event_date,
                start_time=draft.start_time,
                location_name=draft.location_name,
            )

    if errors:
        logger.info("draft_rejected", event_id=draft.id, fields=sorted(errors))

    return SchedulingVerdict(errors=errors, warnings=warnings)
