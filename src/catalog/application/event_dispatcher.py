"""In-process registry of domain-event subscribers.

Delivery is best effort: a subscriber that raises is logged and the
remaining subscribers still run. Nothing is persisted or retried.
"""

from __future__ import annotations

import inspect
from collections import defaultdict
from typing import Any, Awaitable, Callable, Union

import structlog

from catalog.domain.model.events import DomainEvent

log = structlog.get_logger(__name__)

Subscriber = Callable[[DomainEvent], Union[Awaitable[Any], Any]]


class EventDispatcher:

    def __init__(self) -> None:
        self._subscribers: dict[type[DomainEvent], list[Subscriber]] = defaultdict(list)

    def subscribe(self, event_type: type[DomainEvent], subscriber: Subscriber) -> None:
        """Call *subscriber* for every event of *event_type* or a subclass."""
        self._subscribers[event_type].append(subscriber)

    async def publish(self, event: DomainEvent) -> int:
        """Deliver *event*; return how many subscribers handled it."""
        delivered = 0
        for event_type, subscribers in list(self._subscribers.items()):
            if not isinstance(event, event_type):
                continue
            for subscriber in subscribers:
                try:
                    outcome = subscriber(event)
                    if inspect.isawaitable(outcome):
                        await outcome
                except Exception:
                    log.exception(
                        "event.subscriber_failed",
                        event_type=type(event).__name__,
                        event_id=event.event_id,
                    )
                    continue
                delivered += 1
        log.debug(
            "event.published",
            event_type=type(event).__name__,
            event_id=event.event_id,
            subscribers=delivered,
        )
        return delivered
