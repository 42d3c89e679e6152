"""Composition root: wires concrete implementations to the abstractions.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog.application.event_dispatcher import EventDispatcher
from catalog.domain.model.events import DomainEvent
from catalog.infrastructure.config import Settings
from catalog.infrastructure.persistence.database import (
    build_engine,
    build_session_factory,
)
from catalog.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork
from catalog.infrastructure.system import StaticActor, SystemClock

log = structlog.get_logger(__name__)


def event_dispatcher() -> EventDispatcher:
    dispatcher = EventDispatcher()
    dispatcher.subscribe(DomainEvent, _log_event)
    return dispatcher


def unit_of_work(
    session_factory: async_sessionmaker[AsyncSession],
    settings: Settings,
    dispatcher: EventDispatcher | None = None,
) -> SqlAlchemyUnitOfWork:
    return SqlAlchemyUnitOfWork(
        session_factory,
        clock=SystemClock(),
        actor=StaticActor(settings.actor_id),
        dispatcher=dispatcher if dispatcher is not None else event_dispatcher(),
    )


@asynccontextmanager
async def open_unit_of_work(settings: Settings) -> AsyncIterator[SqlAlchemyUnitOfWork]:
    """One engine, one session, one unit of work; all released on exit."""
    engine = build_engine(settings.database_url, echo=settings.echo_sql)
    try:
        async with unit_of_work(build_session_factory(engine), settings) as uow:
            yield uow
    finally:
        await engine.dispose()


def _log_event(event: DomainEvent) -> None:
    log.info("domain_event", event_type=type(event).__name__, event_id=event.event_id)
