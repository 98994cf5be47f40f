"""Exceptions raised by repositories and services.

Expected invalid input (bad dates, overlapping events) is reported through
result objects, not exceptions. These cover the remaining cases the HTTP
layer translates into error responses.
"""

from __future__ import annotations


class HealthTrackerError(Exception):
    """Base class for domain errors."""


class EventNotFoundError(HealthTrackerError, LookupError):
    def __init__(self, event_id: str) -> None:
        super().__init__(f"Event {event_id} not found")
        self.event_id = event_id


class ProfessionalNotFoundError(HealthTrackerError, LookupError):
    def __init__(self, professional_id: str) -> None:
        super().__init__(f"Professional {professional_id} not found")
        self.professional_id = professional_id


class EventLockedError(HealthTrackerError):
    """Past and ongoing events can no longer be edited or deleted."""

    def __init__(self, event_id: str, status: str) -> None:
        super().__init__(f"Event {event_id} is {status} and cannot be changed")
        self.event_id = event_id
        self.status = status


class BackupFormatError(HealthTrackerError, ValueError):
    """The imported payload is not a valid backup."""
