"""Domain event handlers, wired up at application startup."""

from __future__ import annotations

import structlog

from healthtracker.domain.bus import EventBus
from healthtracker.domain.events import (
    AttachmentAdded,
    AttachmentRemoved,
    EventCancelled,
    EventConfirmed,
    EventRescheduled,
    EventScheduled,
)
from healthtracker.domain.models import HistoryEntry, HistoryEntryType
from healthtracker.repos.memory import EventRepository, HistoryRepository

logger = structlog.get_logger(__name__)


class HandlerRegistry:
    """Wires domain-event handlers to the bus with access to the repositories."""

    def __init__(
        self,
        bus: EventBus,
        event_repo: EventRepository,
        history_repo: HistoryRepository,
    ) -> None:
        self.bus = bus
        self.event_repo = event_repo
        self.history_repo = history_repo
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(EventScheduled, self.on_event_scheduled)
        self.bus.subscribe(EventRescheduled, self.on_event_rescheduled)
        self.bus.subscribe(EventCancelled, self.on_event_cancelled)
        self.bus.subscribe(EventConfirmed, self.on_event_confirmed)
        self.bus.subscribe(AttachmentAdded, self.on_attachment_added)
        self.bus.subscribe(AttachmentRemoved, self.on_attachment_removed)

    def _record(
        self, event_id: str, entry_type: HistoryEntryType, payload: dict | None = None
    ) -> None:
        self.history_repo.add(
            HistoryEntry(event_id=event_id, type=entry_type, payload=payload or {})
        )
        logger.info("event_history", event_id=event_id, entry=entry_type.value)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_event_scheduled(self, event: EventScheduled) -> None:
        stored = self.event_repo.get(event.event_id)
        if stored is None:
            return

        self._record(
            event.event_id,
            HistoryEntryType.SCHEDULED,
            {
                "type": stored.type.value,
                "event_date": stored.event_date,
                "start_time": stored.start_time,
                "location_name": stored.location_name,
            },
        )

    def on_event_rescheduled(self, event: EventRescheduled) -> None:
        if self.event_repo.get(event.event_id) is None:
            return
        self._record(
            event.event_id,
            HistoryEntryType.RESCHEDULED,
            {"changed_fields": event.changed_fields},
        )

    def on_event_cancelled(self, event: EventCancelled) -> None:
        if self.event_repo.get(event.event_id) is None:
            return
        self._record(
            event.event_id,
            HistoryEntryType.CANCELLED,
            {"deleted_at": event.deleted_at.isoformat()},
        )

    def on_event_confirmed(self, event: EventConfirmed) -> None:
        stored = self.event_repo.get(event.event_id)
        if stored is None:
            return

        stored.is_confirmed = True
        self._record(event.event_id, HistoryEntryType.CONFIRMED)

    def on_attachment_added(self, event: AttachmentAdded) -> None:
        self._record(
            event.event_id,
            HistoryEntryType.ATTACHMENT_ADDED,
            {"file_id": event.file_id},
        )

    def on_attachment_removed(self, event: AttachmentRemoved) -> None:
        self._record(
            event.event_id,
            HistoryEntryType.ATTACHMENT_REMOVED,
            {"file_id": event.file_id},
        )
