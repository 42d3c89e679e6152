"""Fixtures backed by a real SQLite database file, one per test."""

from __future__ import annotations

import pytest

from catalog.infrastructure.persistence.database import (
    build_engine,
    build_session_factory,
    create_schema,
)
from catalog.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork
from tests.fakes import FakeActor, FixedClock


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}"


@pytest.fixture
async def engine(database_url):
    engine = build_engine(database_url)
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def make_uow(session_factory, clock):
    def factory(actor_id: str | None = "tester", dispatcher=None) -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork(
            session_factory, clock=clock, actor=FakeActor(actor_id), dispatcher=dispatcher
        )

    return factory
