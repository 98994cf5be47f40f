"""Service for exporting and importing JSON backups."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime

import structlog
from pydantic import ValidationError

from healthtracker.domain.models import (
    BackupPayload,
    Event,
    Holiday,
    ImportSummary,
    Professional,
)
from healthtracker.errors import BackupFormatError
from healthtracker.repos.memory import (
    EventRepository,
    HolidayRepository,
    ProfessionalRepository,
)

logger = structlog.get_logger(__name__)


def backup_filename(day: date) -> str:
    return f"health-timeline-backup-{day.isoformat()}.json"


def export_backup(
    events: Iterable[Event],
    professionals: Iterable[Professional],
    holidays: Iterable[Holiday],
    exported_at: datetime,
) -> BackupPayload:
    """Snapshot every record, soft-deleted ones included."""
    payload = BackupPayload(
        exported_at=exported_at,
        events=list(events),
        professionals=list(professionals),
        holidays=list(holidays),
    )
    logger.info(
        "backup_exported",
        events=len(payload.events),
        professionals=len(payload.professionals),
        holidays=len(payload.holidays),
    )
    return payload


def import_backup(
    raw: str | bytes,
    event_repo: EventRepository,
    professional_repo: ProfessionalRepository,
    holiday_repo: HolidayRepository,
) -> ImportSummary:
    """Merge a backup into the repositories without replacing anything.

    Records whose id already exists are skipped. Raises ``BackupFormatError``
    if *raw* is not valid JSON or not a backup.
    """
    try:
        payload = BackupPayload.model_validate_json(raw)
    except ValidationError as exc:
        logger.warning("backup_import_failed", error_count=exc.error_count())
        raise BackupFormatError("The selected file is not a valid backup") from exc

    summary = ImportSummary()

    for professional in payload.professionals:
        if professional_repo.get(professional.id) is not None:
            summary.skipped += 1
            continue
        professional_repo.upsert(professional)
        summary.imported_professionals += 1

    for event in payload.events:
        if event_repo.get(event.id) is not None:
            summary.skipped += 1
            continue
        event_repo.upsert(event)
        summary.imported_events += 1

    for holiday in payload.holidays:
        if holiday_repo.get(holiday.id) is not None:
            summary.skipped += 1
            continue
        holiday_repo.add(holiday)
        summary.imported_holidays += 1

    summary.message = (
        f"Imported {summary.imported_events} events, "
        f"{summary.imported_professionals} professionals and "
        f"{summary.imported_holidays} holidays; {summary.skipped} already present"
    )
    logger.info("backup_imported", **summary.model_dump(exclude={"message"}))
    return summary
