"""Field-level date and time rules for scheduling an event.

Every function returns a result object; invalid input never raises.
``error`` fields block saving, ``warning`` fields only need the user to
confirm.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from typing import Any

from healthtracker.domain.models import (
    EventType,
    Holiday,
    TimeValidationResult,
    ValidationResult,
    rule_for,
)
from healthtracker.services.datetimes import (
    is_business_hours,
    is_valid_time_format,
    parse_date,
    parse_time,
)
from healthtracker.services.holidays import off_day_reason

REQUIRED_FIELD = "Required field"
INVALID_DATE = "Invalid date. Use DD/MM/YYYY, e.g. 06/05/2025"
INVALID_START_TIME = "Invalid time. Use HH:MM, e.g. 14:30"
INVALID_END_TIME = "Invalid time. Use HH:MM, e.g. 15:30"
END_TIME_REQUIRED = "End time is required"
END_BEFORE_START = "End time must be after start time"
PAST_EVENT_WARNING = "Past events cannot be edited or deleted"
OUTSIDE_BUSINESS_HOURS = "Event outside business hours. Please confirm."
INVALID_ATTACHMENT_TYPE = "Invalid file. Use PDF, JPEG or PNG"
ATTACHMENT_TOO_LARGE = "File too large. Maximum size: {limit_mb}MB"

ALLOWED_ATTACHMENT_TYPES = frozenset({"application/pdf", "image/jpeg", "image/png"})
MAX_ATTACHMENT_BYTES = 5 * 1024 * 1024


def off_day_warning(reason: str) -> str:
    return f"Event on {reason}. Please confirm to proceed."


def validate_required_fields(fields: dict[str, Any]) -> dict[str, str]:
    """Map every empty field (``None`` or ``""``) to a required-field error."""
    return {
        name: REQUIRED_FIELD for name, value in fields.items() if value in (None, "")
    }


def validate_date(
    date_string: str,
    holidays: Iterable[Holiday] = (),
    today: date | None = None,
) -> ValidationResult:
    """Check an event date.

    A past date is accepted with a warning that the event will be locked.
    Otherwise a weekend or holiday is accepted with a warning naming it.
    At most one warning is returned and the past-date one wins.
    """
    if not date_string:
        return ValidationResult(is_valid=False, error=REQUIRED_FIELD)

    parsed = parse_date(date_string)
    if parsed is None:
        return ValidationResult(is_valid=False, error=INVALID_DATE)

    today = today or date.today()
    if parsed < today:
        return ValidationResult(is_valid=True, warning=PAST_EVENT_WARNING)

    reason = off_day_reason(parsed, holidays)
    if reason is not None:
        return ValidationResult(is_valid=True, warning=off_day_warning(reason))

    return ValidationResult(is_valid=True)


def validate_time(
    start_time: str,
    end_time: str | None,
    event_type: EventType | str | None,
    date_string: str,
) -> TimeValidationResult:
    """Check start/end times for an event of *event_type* on *date_string*.

    Format problems are reported first and stop the remaining checks. The
    end time is ignored for types that don't take one. Business-hours
    warnings and the end-after-start rule only run when the date and both
    times parse. An ordering error replaces any business-hours warning.
    """
    result = TimeValidationResult()

    if not start_time:
        result.start_time_valid = False
        result.start_time_error = REQUIRED_FIELD
        return result

    if not is_valid_time_format(start_time):
        result.start_time_valid = False
        result.start_time_error = INVALID_START_TIME
        return result

    needs_end_time = rule_for(event_type).requires_end_time
    if needs_end_time:
        if not end_time:
            result.end_time_valid = False
            result.end_time_error = END_TIME_REQUIRED
            return result
        if not is_valid_time_format(end_time):
            result.end_time_valid = False
            result.end_time_error = INVALID_END_TIME
            return result

    day = parse_date(date_string)
    if day is None:
        return result

    start = parse_time(start_time, day)
    if not is_business_hours(start):
        result.warning = OUTSIDE_BUSINESS_HOURS

    if needs_end_time:
        end = parse_time(end_time, day)
        if not is_business_hours(end) and result.warning is None:
            result.warning = OUTSIDE_BUSINESS_HOURS
        if end <= start:
            result.end_time_valid = False
            result.end_time_error = END_BEFORE_START
            result.warning = None

    return result


def validate_attachment(
    content_type: str | None,
    size: int,
    max_bytes: int = MAX_ATTACHMENT_BYTES,
) -> ValidationResult:
    """Only PDF, JPEG and PNG files up to *max_bytes* may be attached."""
    if content_type not in ALLOWED_ATTACHMENT_TYPES:
        return ValidationResult(is_valid=False, error=INVALID_ATTACHMENT_TYPE)
    if size > max_bytes:
        limit_mb = max_bytes // (1024 * 1024)
        return ValidationResult(
            is_valid=False, error=ATTACHMENT_TOO_LARGE.format(limit_mb=limit_mb)
        )
    return ValidationResult(is_valid=True)
