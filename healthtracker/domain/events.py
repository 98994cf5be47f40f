"""Domain events emitted when scheduled events change."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class EventScheduled(BaseModel):
    """Fired when a new Event is stored."""

    event_id: str


class EventRescheduled(BaseModel):
    """Fired when an existing Event is edited."""

    event_id: str
    changed_fields: list[str]


class EventCancelled(BaseModel):
    """Fired when an Event is soft-deleted."""

    event_id: str
    deleted_at: datetime


class EventConfirmed(BaseModel):
    """Fired when the user confirms attendance of an Event."""

    event_id: str


class AttachmentAdded(BaseModel):
    event_id: str
    file_id: str


class AttachmentRemoved(BaseModel):
    event_id: str
    file_id: str
