"""Unit of work over one SQLAlchemy AsyncSession.

One instance serves one logical request: ``async with`` opens the
session, leaving the block closes it and rolls back anything still open.
"""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog.application.event_dispatcher import EventDispatcher
from catalog.application.ports import ActorProvider, Clock
from catalog.application.unit_of_work import AbstractUnitOfWork
from catalog.domain.exceptions import DuplicateSkuError, UnitOfWorkError
from catalog.domain.repository.product_repository import ChangeState, PendingChange
from catalog.infrastructure.persistence.sqlalchemy_product_repository import (
    SqlAlchemyProductRepository,
)


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        clock: Clock,
        actor: ActorProvider,
        dispatcher: EventDispatcher | None = None,
    ) -> None:
        super().__init__(clock=clock, actor=actor, dispatcher=dispatcher)
        self._session_factory = session_factory
        self._session: AsyncSession | None = None

    async def __aenter__(self) -> SqlAlchemyUnitOfWork:
        self._session = self._session_factory()
        self.products = SqlAlchemyProductRepository(self._session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            await super().__aexit__(exc_type, exc, tb)
        finally:
            await self.session.close()
            self._session = None

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise UnitOfWorkError("Unit of work is not open; use 'async with uow'")
        return self._session

    # --- Backend hooks --------------------------------------------------------

    async def _begin(self) -> None:
        if not self.session.in_transaction():
            await self.session.begin()

    async def _flush(self, changes: list[PendingChange]) -> int:
        await self.products.write(changes)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            added = [c.product for c in changes if c.state is ChangeState.ADDED]
            if added:
                raise DuplicateSkuError(added[0].sku.value) from exc
            raise
        return len(changes)

    async def _commit(self) -> None:
        await self.session.commit()

    async def _rollback(self) -> None:
        await self.session.rollback()
