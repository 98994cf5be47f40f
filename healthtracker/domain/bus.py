"""Synchronous in-process bus for lifecycle events of scheduled events."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable

import structlog
from pydantic import BaseModel

logger = structlog.get_logger(__name__)

DomainEventHandler = Callable[[BaseModel], None]


class EventBus:
    """Routes each published domain event to the handlers of its class.

    Handlers run in the caller's thread, in the order they subscribed, so a
    route sees their effects (history entries, confirmation) once ``publish``
    returns.
    """

    def __init__(self) -> None:
        self._handlers: defaultdict[type[BaseModel], list[DomainEventHandler]] = (
            defaultdict(list)
        )

    def subscribe(
        self, domain_event: type[BaseModel], handler: DomainEventHandler
    ) -> None:
        self._handlers[domain_event].append(handler)

    def publish(self, domain_event: BaseModel) -> int:
        """Dispatch *domain_event* and return how many handlers received it."""
        handlers = list(self._handlers.get(type(domain_event), ()))
        logger.debug(
            "domain_event_published",
            domain_event=type(domain_event).__name__,
            event_id=getattr(domain_event, "event_id", None),
            handlers=len(handlers),
        )
        for handler in handlers:
            handler(domain_event)
        return len(handlers)
