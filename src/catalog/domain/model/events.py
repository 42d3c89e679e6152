"""Domain events raised by the Product aggregate.

Events are immutable records. Aggregates collect them in an EventBuffer
until the unit of work drains and dispatches them after a successful
flush.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterator, Protocol


@dataclass(frozen=True)
class DomainEvent:
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()), kw_only=True)
    occurred_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc), kw_only=True
    )


@dataclass(frozen=True)
class ProductCreated(DomainEvent):
    product_id: str
    sku: str
    name: str
    price_amount: Decimal
    price_currency: str


@dataclass(frozen=True)
class ProductPriceChanged(DomainEvent):
    product_id: str
    old_price_amount: Decimal
    old_price_currency: str
    new_price_amount: Decimal
    new_price_currency: str


class EventBuffer:
    """Ordered list of events waiting to be dispatched."""

    def __init__(self) -> None:
        self._events: list[DomainEvent] = []

    def emit(self, event: DomainEvent) -> None:
        self._events.append(event)

    def drain(self) -> list[DomainEvent]:
        """Return every buffered event and empty the buffer."""
        events, self._events = self._events, []
        return events

    def __iter__(self) -> Iterator[DomainEvent]:
        return iter(list(self._events))

    def __len__(self) -> int:
        return len(self._events)


class HasDomainEvents(Protocol):
    """Anything the unit of work can collect events from."""

    @property
    def pending_events(self) -> tuple[DomainEvent, ...]: ...

    def drain_events(self) -> list[DomainEvent]: ...
