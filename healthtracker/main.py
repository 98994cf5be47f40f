"""FastAPI entry point for the health timeline service."""

from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import structlog
from fastapi import Depends, FastAPI, HTTPException, Request, Response

from healthtracker.config import get_settings
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
from healthtracker.domain.models import (
    AttachmentRequest,
    CalendarResponse,
    CalendarView,
    DateValidationRequest,
    DayGroup,
    Event,
    EventAttachments,
    EventDraft,
    EventFile,
    EventView,
    EventWriteRequest,
    HistoryEntry,
    Holiday,
    HolidayRequest,
    ImportSummary,
    OverlapResult,
    Professional,
    ProfessionalRequest,
    SchedulingVerdict,
    TimeValidationRequest,
    TimeValidationResult,
    ValidationResult,
)
from healthtracker.errors import (
    BackupFormatError,
    EventLockedError,
    ProfessionalNotFoundError,
)
from healthtracker.logging_config import setup_logging
from healthtracker.repos.memory import (
    EventRepository,
    HistoryRepository,
    HolidayRepository,
    create_professional_repository,
)
from healthtracker.services.backup import backup_filename, export_backup, import_backup
from healthtracker.services.calendar import (
    attachments_by_event,
    calendar_window,
    event_dates,
    events_in_window,
    group_by_date,
)
from healthtracker.services.conflicts import check_event_overlaps
from healthtracker.services.datetimes import format_date, parse_date
from healthtracker.services.holidays import merge_holidays
from healthtracker.services.scheduling import evaluate_draft
from healthtracker.services.status import LOCKED_STATUSES, ensure_mutable, event_status
from healthtracker.services.validation import (
    INVALID_DATE,
    validate_attachment,
    validate_date,
    validate_time,
)

settings = get_settings()
setup_logging(settings.log_level)
logger = structlog.get_logger(__name__)

app = FastAPI(title=settings.app_name)

# ── Singletons (created at import time for simplicity) ────────────────
event_bus = EventBus()
event_repo = EventRepository()
professional_repo = create_professional_repository(seed=settings.seed_demo_data)
holiday_repo = HolidayRepository()
history_repo = HistoryRepository()

handler_registry = HandlerRegistry(
    bus=event_bus,
    event_repo=event_repo,
    history_repo=history_repo,
)


def current_time() -> datetime:
    """Naive wall-clock time in the configured timezone."""
    return datetime.now(ZoneInfo(settings.timezone)).replace(tzinfo=None)


# ── Helpers ───────────────────────────────────────────────────────────


def _view(event: Event, now: datetime) -> EventView:
    status = event_status(event, now)
    return EventView(
        **event.model_dump(),
        status=status,
        locked=status in LOCKED_STATUSES,
    )


def _get_event_or_404(event_id: str) -> Event:
    event = event_repo.get(event_id)
    if event is None or event.is_deleted:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


def _ensure_mutable_or_409(event: Event, now: datetime) -> None:
    try:
        ensure_mutable(event, now)
    except EventLockedError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc


def _resolve_professional(draft: EventDraft) -> EventDraft:
    """Fill professional, specialty and location from the chosen professional."""
    if draft.professional_id is None:
        return draft

    professional = professional_repo.get(draft.professional_id)
    if professional is None or professional.is_deleted:
        raise HTTPException(status_code=404, detail="Professional not found")
    draft.professional_name = draft.professional_name or professional.name
    draft.specialty_name = draft.specialty_name or professional.specialty_name
    draft.location_name = draft.location_name or professional.location_name
    return draft


def _enforce_verdict(verdict: SchedulingVerdict, acknowledged: bool) -> None:
    """Errors always block; warnings block until the user acknowledges them."""
    if verdict.is_blocked:
        raise HTTPException(status_code=422, detail=verdict.model_dump())
    if verdict.needs_acknowledgment and not acknowledged:
        raise HTTPException(status_code=409, detail=verdict.model_dump())


# ── Routes: validation ────────────────────────────────────────────────


@app.post("/validate/date", response_model=ValidationResult)
def validate_event_date(
    payload: DateValidationRequest, now: datetime = Depends(current_time)
) -> ValidationResult:
    return validate_date(payload.event_date, holiday_repo.list_all(), today=now.date())


@app.post("/validate/time", response_model=TimeValidationResult)
def validate_event_time(payload: TimeValidationRequest) -> TimeValidationResult:
    return validate_time(
        payload.start_time, payload.end_time, payload.type, payload.event_date
    )


@app.post("/validate/overlaps", response_model=OverlapResult)
def validate_event_overlaps(payload: EventDraft) -> OverlapResult:
    return check_event_overlaps(payload, event_repo.list_all())


@app.post("/validate/event", response_model=SchedulingVerdict)
def validate_event(
    payload: EventDraft, now: datetime = Depends(current_time)
) -> SchedulingVerdict:
    return evaluate_draft(
        payload, event_repo.list_all(), holiday_repo.list_all(), today=now.date()
    )


# ── Routes: events ────────────────────────────────────────────────────


@app.get("/events", response_model=list[EventView])
def list_events(
    include_deleted: bool = False, now: datetime = Depends(current_time)
) -> list[EventView]:
    """Return stored events; soft-deleted ones only when asked for."""
    events = event_repo.list_all() if include_deleted else event_repo.list_active()
    return [_view(e, now) for e in events]


@app.get("/events/{event_id}", response_model=EventView)
def get_event(event_id: str, now: datetime = Depends(current_time)) -> EventView:
    return _view(_get_event_or_404(event_id), now)


@app.post("/events", response_model=EventView, status_code=201)
def create_event(
    body: EventWriteRequest, now: datetime = Depends(current_time)
) -> EventView:
    """Validate a draft and store it as a new event."""
    draft = _resolve_professional(
        EventDraft(**body.model_dump(exclude={"acknowledge_warnings"}))
    )
    draft.id = None
    verdict = evaluate_draft(
        draft, event_repo.list_all(), holiday_repo.list_all(), today=now.date()
    )
    _enforce_verdict(verdict, body.acknowledge_warnings)

    event = Event(**draft.model_dump(exclude={"id"}))
    event_repo.upsert(event)
    event_bus.publish(EventScheduled(event_id=event.id))
    return _view(event, now)


@app.put("/events/{event_id}", response_model=EventView)
def update_event(
    event_id: str, body: EventWriteRequest, now: datetime = Depends(current_time)
) -> EventView:
    """Re-validate an event with the fields present in the request applied.

    Fields the client leaves out keep their stored values.
    """
    stored = _get_event_or_404(event_id)
    _ensure_mutable_or_409(stored, now)

    sent = body.model_dump(exclude_unset=True, exclude={"acknowledge_warnings"})
    current = stored.model_dump(include=set(EventDraft.model_fields))
    draft = _resolve_professional(EventDraft(**{**current, **sent}))
    draft.id = event_id
    verdict = evaluate_draft(
        draft, event_repo.list_all(), holiday_repo.list_all(), today=now.date()
    )
    _enforce_verdict(verdict, body.acknowledge_warnings)

    changes = draft.model_dump(exclude={"id"})
    updated = Event(**{**stored.model_dump(), **changes})
    changed_fields = sorted(
        name for name in changes if getattr(stored, name) != getattr(updated, name)
    )
    event_repo.upsert(updated)
    event_bus.publish(EventRescheduled(event_id=event_id, changed_fields=changed_fields))
    return _view(updated, now)


@app.delete("/events/{event_id}", response_model=EventView)
def delete_event(event_id: str, now: datetime = Depends(current_time)) -> EventView:
    """Soft-delete an event that has not started yet."""
    stored = _get_event_or_404(event_id)
    _ensure_mutable_or_409(stored, now)

    deleted = event_repo.soft_delete(event_id, datetime.now(timezone.utc))
    event_bus.publish(EventCancelled(event_id=event_id, deleted_at=deleted.deleted_at))
    return _view(deleted, now)


@app.post("/events/{event_id}/confirm", response_model=EventView)
def confirm_event(event_id: str, now: datetime = Depends(current_time)) -> EventView:
    stored = _get_event_or_404(event_id)
    event_bus.publish(EventConfirmed(event_id=event_id))
    return _view(stored, now)


@app.get("/events/{event_id}/history", response_model=list[HistoryEntry])
def get_event_history(event_id: str) -> list[HistoryEntry]:
    if event_repo.get(event_id) is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return history_repo.list_for_event(event_id)


@app.post("/events/{event_id}/files", response_model=EventFile, status_code=201)
def add_event_file(event_id: str, body: AttachmentRequest) -> EventFile:
    """Attach a document reference after checking its type and size."""
    _get_event_or_404(event_id)
    result = validate_attachment(
        body.content_type, body.size, max_bytes=settings.max_attachment_bytes
    )
    if not result.is_valid:
        raise HTTPException(status_code=422, detail=result.error)

    file = EventFile(
        event_id=event_id,
        type=body.type,
        path=body.path,
        content_type=body.content_type,
    )
    event_repo.add_file(event_id, file)
    event_bus.publish(AttachmentAdded(event_id=event_id, file_id=file.id))
    return file


@app.delete("/events/{event_id}/files/{file_id}", response_model=EventFile)
def remove_event_file(event_id: str, file_id: str) -> EventFile:
    _get_event_or_404(event_id)
    file = event_repo.remove_file(event_id, file_id)
    if file is None:
        raise HTTPException(status_code=404, detail="File not found")
    event_bus.publish(AttachmentRemoved(event_id=event_id, file_id=file_id))
    return file


@app.get("/files", response_model=list[EventAttachments])
def list_files() -> list[EventAttachments]:
    """Every event with attached documents, deleted events included."""
    return attachments_by_event(event_repo.list_all(), holiday_repo.list_all())


# ── Routes: timeline & calendar ───────────────────────────────────────


@app.get("/timeline", response_model=list[DayGroup])
def get_timeline() -> list[DayGroup]:
    """Events grouped by day, oldest day first."""
    return group_by_date(event_repo.list_all(), holiday_repo.list_all())


@app.get("/calendar", response_model=CalendarResponse)
def get_calendar(
    date: str | None = None,
    view: CalendarView = CalendarView.MONTH,
    now: datetime = Depends(current_time),
) -> CalendarResponse:
    """Events in the day, week or month around *date* (defaults to today)."""
    anchor = parse_date(date) if date else now.date()
    if anchor is None:
        raise HTTPException(status_code=422, detail=INVALID_DATE)

    first, last = calendar_window(anchor, view)
    events = event_repo.list_all()
    return CalendarResponse(
        view=view,
        first_day=format_date(first),
        last_day=format_date(last),
        event_dates=[format_date(d) for d in event_dates(events)],
        events=[_view(e, now) for e in events_in_window(events, first, last)],
    )


# ── Routes: professionals ─────────────────────────────────────────────


@app.get("/professionals", response_model=list[Professional])
def list_professionals() -> list[Professional]:
    return professional_repo.list_all()


@app.post("/professionals", response_model=Professional, status_code=201)
def create_professional(body: ProfessionalRequest) -> Professional:
    return professional_repo.upsert(Professional(**body.model_dump()))


@app.put("/professionals/{professional_id}", response_model=Professional)
def update_professional(
    professional_id: str, body: ProfessionalRequest
) -> Professional:
    """Update a professional and carry a new name over to their events."""
    stored = professional_repo.get(professional_id)
    if stored is None or stored.is_deleted:
        raise HTTPException(status_code=404, detail="Professional not found")

    updated = professional_repo.upsert(
        Professional(id=professional_id, **body.model_dump())
    )
    if updated.name != stored.name:
        renamed = event_repo.rename_professional(professional_id, updated.name)
        logger.info(
            "professional_renamed", professional_id=professional_id, events=renamed
        )
    return updated


@app.delete("/professionals/{professional_id}", response_model=Professional)
def delete_professional(professional_id: str) -> Professional:
    try:
        return professional_repo.soft_delete(professional_id)
    except ProfessionalNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Professional not found") from exc


# ── Routes: holidays ──────────────────────────────────────────────────


@app.get("/holidays", response_model=list[Holiday])
def list_holidays() -> list[Holiday]:
    """Built-in national holidays followed by the user's own."""
    return merge_holidays(holiday_repo.list_all())


@app.post("/holidays", response_model=Holiday, status_code=201)
def create_holiday(body: HolidayRequest) -> Holiday:
    holiday = Holiday(**body.model_dump())
    holiday_repo.add(holiday)
    return holiday


# ── Routes: backup ────────────────────────────────────────────────────


@app.get("/backup")
def download_backup(now: datetime = Depends(current_time)) -> Response:
    """Export everything as a downloadable JSON file."""
    payload = export_backup(
        event_repo.list_all(),
        professional_repo.list_all(include_deleted=True),
        holiday_repo.list_all(),
        exported_at=datetime.now(timezone.utc),
    )
    return Response(
        content=payload.model_dump_json(indent=2),
        media_type="application/json",
        headers={
            "Content-Disposition": (
                f'attachment; filename="{backup_filename(now.date())}"'
            )
        },
    )


@app.post("/backup", response_model=ImportSummary)
async def restore_backup(request: Request) -> ImportSummary:
    """Merge a JSON backup into the current data without replacing records."""
    raw = await request.body()
    try:
        return import_backup(raw, event_repo, professional_repo, holiday_repo)
    except BackupFormatError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
