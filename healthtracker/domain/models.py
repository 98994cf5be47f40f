"""Domain models for the health timeline."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import StrEnum

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from healthtracker.services.datetimes import is_valid_time_format, parse_date


class EventType(StrEnum):
    CONSULTATION = "Consulta"
    EXAM = "Exame"
    SESSION = "Sessões"
    PRESCRIPTION = "Prescrição"


class FileType(StrEnum):
    REQUISITION = "Requisição"
    AUTHORIZATION = "Autorização"
    CERTIFICATE = "Atestado"
    PRESCRIPTION = "Prescrição"
    REPORT = "Laudo/Resultado"
    INVOICE = "Nota Fiscal"


class EventStatus(StrEnum):
    PAST = "past"
    ONGOING = "ongoing"
    TODAY = "today"
    FUTURE = "future"


class CalendarView(StrEnum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class HistoryEntryType(StrEnum):
    SCHEDULED = "scheduled"
    RESCHEDULED = "rescheduled"
    CANCELLED = "cancelled"
    CONFIRMED = "confirmed"
    ATTACHMENT_ADDED = "attachment_added"
    ATTACHMENT_REMOVED = "attachment_removed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Event type rules
# ---------------------------------------------------------------------------


class EventTypeRule(BaseModel):
    """Per-type scheduling rules.

    New event types only need an entry in ``EVENT_TYPE_RULES``.
    """

    model_config = ConfigDict(frozen=True)

    requires_end_time: bool = True
    checks_overlaps: bool = True


DEFAULT_RULE = EventTypeRule()

EVENT_TYPE_RULES: dict[EventType, EventTypeRule] = {
    EventType.CONSULTATION: DEFAULT_RULE,
    EventType.EXAM: DEFAULT_RULE,
    EventType.SESSION: DEFAULT_RULE,
    EventType.PRESCRIPTION: EventTypeRule(
        requires_end_time=False, checks_overlaps=False
    ),
}


def rule_for(event_type: EventType | str | None) -> EventTypeRule:
    """Return the rule for *event_type*; unknown or missing types get the default."""
    try:
        return EVENT_TYPE_RULES[EventType(event_type)]
    except ValueError:
        return DEFAULT_RULE


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class Holiday(BaseModel):
    id: str = Field(default_factory=_new_id)
    date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")  # YYYY-MM-DD
    name: str
    is_recurring: bool = False


class Professional(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str = Field(min_length=1)
    specialty_name: str = ""
    location_name: str = ""
    is_deleted: bool = False


class EventFile(BaseModel):
    id: str = Field(default_factory=_new_id)
    event_id: str
    type: FileType
    path: str
    content_type: str | None = None
    file_uuid: str = Field(default_factory=_new_id)
    is_deleted: bool = False


class Event(BaseModel):
    id: str = Field(default_factory=_new_id)
    type: EventType
    event_date: str  # DD/MM/YYYY
    start_time: str  # HH:MM
    end_time: str | None = None  # HH:MM, None for prescriptions
    professional_id: str | None = None
    professional_name: str = ""
    specialty_name: str = ""
    location_name: str = ""
    observation: str | None = None
    is_first_consultation: bool | None = None
    preparation: str | None = None
    is_confirmed: bool = False
    confirmation_deadline: datetime | None = None
    files: list[EventFile] = Field(default_factory=list)
    is_deleted: bool = False
    deleted_at: datetime | None = None

    @field_validator("event_date")
    @classmethod
    def _event_date_is_strict(cls, value: str) -> str:
        if parse_date(value) is None:
            raise ValueError("event_date must be a calendar date in DD/MM/YYYY")
        return value

    @field_validator("start_time")
    @classmethod
    def _start_time_is_strict(cls, value: str) -> str:
        if not is_valid_time_format(value):
            raise ValueError("start_time must be HH:MM")
        return value

    @model_validator(mode="after")
    def _end_time_matches_type(self) -> Event:
        rule = rule_for(self.type)
        if not rule.requires_end_time:
            self.end_time = None
            return self
        if not self.end_time:
            raise ValueError(f"end_time is required for {self.type.value}")
        if not is_valid_time_format(self.end_time):
            raise ValueError("end_time must be HH:MM")
        # Zero-padded HH:MM strings sort chronologically.
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class EventView(Event):
    """An Event as returned by the API, with its status at request time."""

    status: EventStatus
    locked: bool


class EventDraft(BaseModel):
    """An event as typed into a form; every field may still be missing."""

    id: str | None = None
    type: EventType | None = None
    event_date: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    professional_id: str | None = None
    professional_name: str = ""
    specialty_name: str = ""
    location_name: str = ""
    observation: str | None = None
    is_first_consultation: bool | None = None
    preparation: str | None = None
    confirmation_deadline: datetime | None = None


class HistoryEntry(BaseModel):
    id: str = Field(default_factory=_new_id)
    event_id: str
    timestamp: datetime = Field(default_factory=_utcnow)
    type: HistoryEntryType
    payload: dict = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Validation results
# ---------------------------------------------------------------------------


class ValidationResult(BaseModel):
    is_valid: bool
    error: str | None = None
    warning: str | None = None


class TimeValidationResult(BaseModel):
    start_time_valid: bool = True
    end_time_valid: bool = True
    start_time_error: str | None = None
    end_time_error: str | None = None
    warning: str | None = None


class OverlapResult(BaseModel):
    has_overlap: bool
    message: str | None = None


class SchedulingVerdict(BaseModel):
    """Field-keyed outcome of validating a whole draft.

    ``errors`` block saving; ``warnings`` need an explicit acknowledgment.
    Overlap conflicts are reported under the ``schedule`` key.
    """

    errors: dict[str, str] = Field(default_factory=dict)
    warnings: dict[str, str] = Field(default_factory=dict)

    @computed_field
    @property
    def is_blocked(self) -> bool:
        return bool(self.errors)

    @computed_field
    @property
    def needs_acknowledgment(self) -> bool:
        return bool(self.warnings)


class DayGroup(BaseModel):
    """Timeline section: one calendar day and its events in start order."""

    event_date: str
    weekday: str
    holiday_name: str | None = None
    events: list[Event] = Field(default_factory=list)


class EventAttachments(BaseModel):
    """File repository entry: one event and the documents still attached to it.

    Soft-deleted events are listed too, so their documents stay reachable.
    """

    event_id: str
    title: str
    event_date: str
    weekday: str
    holiday_name: str | None = None
    is_deleted: bool = False
    deleted_at: datetime | None = None
    files: list[EventFile] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class DateValidationRequest(BaseModel):
    event_date: str = ""


class TimeValidationRequest(BaseModel):
    start_time: str = ""
    end_time: str | None = None
    type: str = EventType.CONSULTATION.value
    event_date: str = ""


class EventWriteRequest(EventDraft):
    acknowledge_warnings: bool = False


class ProfessionalRequest(BaseModel):
    name: str = Field(min_length=1)
    specialty_name: str = ""
    location_name: str = ""


class HolidayRequest(BaseModel):
    date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")
    name: str = Field(min_length=1)
    is_recurring: bool = False


class AttachmentRequest(BaseModel):
    type: FileType
    path: str = Field(min_length=1)
    content_type: str
    size: int = Field(ge=0)


class CalendarResponse(BaseModel):
    view: CalendarView
    first_day: str
    last_day: str
    event_dates: list[str] = Field(default_factory=list)
    events: list[EventView] = Field(default_factory=list)


class BackupPayload(BaseModel):
    version: int = 1
    exported_at: datetime = Field(default_factory=_utcnow)
    events: list[Event] = Field(default_factory=list)
    professionals: list[Professional] = Field(default_factory=list)
    holidays: list[Holiday] = Field(default_factory=list)


class ImportSummary(BaseModel):
    imported_events: int = 0
    imported_professionals: int = 0
    imported_holidays: int = 0
    skipped: int = 0
    message: str = ""
