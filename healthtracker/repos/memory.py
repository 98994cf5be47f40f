"""In-memory repositories for events, professionals and holidays."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

from healthtracker.domain.models import (
    Event,
    EventFile,
    HistoryEntry,
    Holiday,
    Professional,
)
from healthtracker.errors import EventNotFoundError, ProfessionalNotFoundError

EventFilter = Callable[[Event], bool]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EventRepository:
    """Dict-backed store for Event instances, keyed by id.

    Deletion is soft: deleted events stay listed with ``is_deleted`` set.
    """

    def __init__(self) -> None:
        self._store: dict[str, Event] = {}

    def upsert(self, event: Event) -> Event:
        self._store[event.id] = event
        return event

    def get(self, event_id: str) -> Event | None:
        return self._store.get(event_id)

    def list_all(self, event_filter: EventFilter | None = None) -> list[Event]:
        """Return events in insertion order, optionally narrowed by *event_filter*."""
        events = list(self._store.values())
        if event_filter is None:
            return events
        return [e for e in events if event_filter(e)]

    def list_active(self) -> list[Event]:
        return self.list_all(lambda e: not e.is_deleted)

    def soft_delete(self, event_id: str, deleted_at: datetime | None = None) -> Event:
        event = self._require(event_id)
        event.is_deleted = True
        event.deleted_at = deleted_at or _utcnow()
        return event

    def rename_professional(self, professional_id: str, name: str) -> int:
        """Propagate a professional's new name to their events."""
        renamed = 0
        for event in self._store.values():
            if event.professional_id == professional_id:
                event.professional_name = name
                renamed += 1
        return renamed

    def add_file(self, event_id: str, file: EventFile) -> EventFile:
        self._require(event_id).files.append(file)
        return file

    def remove_file(self, event_id: str, file_id: str) -> EventFile | None:
        for file in self._require(event_id).files:
            if file.id == file_id:
                file.is_deleted = True
                return file
        return None

    def _require(self, event_id: str) -> Event:
        event = self._store.get(event_id)
        if event is None:
            raise EventNotFoundError(event_id)
        return event


class ProfessionalRepository:
    """Dict-backed store for Professional instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[str, Professional] = {}

    def upsert(self, professional: Professional) -> Professional:
        self._store[professional.id] = professional
        return professional

    def get(self, professional_id: str) -> Professional | None:
        return self._store.get(professional_id)

    def list_all(self, include_deleted: bool = False) -> list[Professional]:
        return [
            p for p in self._store.values() if include_deleted or not p.is_deleted
        ]

    def soft_delete(self, professional_id: str) -> Professional:
        professional = self._store.get(professional_id)
        if professional is None:
            raise ProfessionalNotFoundError(professional_id)
        professional.is_deleted = True
        return professional


class HolidayRepository:
    """List-backed store for user-defined holidays."""

    def __init__(self) -> None:
        self._holidays: list[Holiday] = []

    def add(self, holiday: Holiday) -> None:
        self._holidays.append(holiday)

    def get(self, holiday_id: str) -> Holiday | None:
        return next((h for h in self._holidays if h.id == holiday_id), None)

    def list_all(self) -> list[Holiday]:
        return list(self._holidays)


class HistoryRepository:
    """List-backed store for HistoryEntry instances."""

    def __init__(self) -> None:
        self._entries: list[HistoryEntry] = []

    def add(self, entry: HistoryEntry) -> None:
        self._entries.append(entry)

    def list_for_event(self, event_id: str) -> list[HistoryEntry]:
        return sorted(
            [e for e in self._entries if e.event_id == event_id],
            key=lambda e: e.timestamp,
        )


# ---------------------------------------------------------------------------
# Seed data – the demo professionals the app starts with
# ---------------------------------------------------------------------------


def _seed_professionals(repo: ProfessionalRepository) -> None:
    repo.upsert(
        Professional(
            name="Dr. João Silva",
            specialty_name="Cardiologia",
            location_name="Hospital São Lucas",
        )
    )
    repo.upsert(
        Professional(
            name="Dra. Maria Souza",
            specialty_name="Neurologia",
            location_name="Clínica Vida",
        )
    )


def create_professional_repository(seed: bool = True) -> ProfessionalRepository:
    """Return a ProfessionalRepository, pre-loaded with demo data when *seed*."""
    repo = ProfessionalRepository()
    if seed:
        _seed_professionals(repo)
    return repo
