"""Unit of Work: the transactional boundary of one logical request.

The protocol (audit stamping, event dispatch, transaction bookkeeping)
lives here; a storage backend subclasses it and supplies the session
operations ``_begin``, ``_flush``, ``_commit`` and ``_rollback``.

Typical use from a handler::

    async with uow:
        product = await uow.products.get_by_id(product_id)
        product.publish(uow.actor.user_id)
        await uow.products.update(product)
        await uow.save_changes()

Outside an explicit transaction ``save_changes`` is atomic on its own.
Inside one (``begin_transaction`` / ``execute_in_transaction``) it only
flushes and the commit happens at ``commit_transaction``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, TypeVar

import structlog

from catalog.application.event_dispatcher import EventDispatcher
from catalog.application.ports import ActorProvider, Clock
from catalog.domain.exceptions import NoActiveTransactionError
from catalog.domain.repository.product_repository import (
    ChangeState,
    PendingChange,
    ProductRepository,
)

log = structlog.get_logger(__name__)

T = TypeVar("T")


class AbstractUnitOfWork(ABC):

    products: ProductRepository

    def __init__(
        self,
        *,
        clock: Clock,
        actor: ActorProvider,
        dispatcher: EventDispatcher | None = None,
    ) -> None:
        self.clock = clock
        self.actor = actor
        self._dispatcher = dispatcher
        self._in_transaction = False

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    async def __aenter__(self) -> AbstractUnitOfWork:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._in_transaction:
            log.warning(
                "unit_of_work.closed_with_open_transaction",
                error=type(exc).__name__ if exc else None,
            )
            await self._rollback_after_failure()

    # --- Persistence ----------------------------------------------------------

    async def save_changes(self) -> int:
        """Stamp, flush and (outside a transaction) commit pending changes.

        Returns the number of products written. Events of the written
        products are dispatched once the flush succeeded.
        """
        changes = self.products.pending_changes()
        self._stamp_audit(changes)
        try:
            affected = await self._flush(changes)
            if not self._in_transaction:
                await self._commit()
        except BaseException:
            if not self._in_transaction:
                await self._rollback_after_failure()
            raise
        self.products.mark_persisted()
        log.debug("unit_of_work.saved", affected=affected)
        await self._dispatch_events(changes)
        return affected

    # --- Transactions ---------------------------------------------------------

    async def begin_transaction(self) -> None:
        if self._in_transaction:
            log.warning("unit_of_work.transaction_already_open")
            return
        log.debug("unit_of_work.begin")
        await self._begin()
        self._in_transaction = True

    async def commit_transaction(self) -> None:
        if not self._in_transaction:
            raise NoActiveTransactionError("No active transaction to commit")
        try:
            await self.save_changes()
            await self._commit()
            log.debug("unit_of_work.committed")
        except BaseException as exc:
            log.error("unit_of_work.commit_failed", error=repr(exc))
            await self._rollback_after_failure()
            raise
        finally:
            self._in_transaction = False

    async def rollback_transaction(self) -> None:
        if not self._in_transaction:
            log.warning("unit_of_work.no_transaction_to_rollback")
            return
        try:
            await self._rollback()
            log.debug("unit_of_work.rolled_back")
        except Exception:
            log.exception("unit_of_work.rollback_failed")
            raise
        finally:
            self.products.reset()
            self._in_transaction = False

    async def execute_in_transaction(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run *operation* atomically.

        Inside an already open transaction the operation simply joins it.
        Otherwise a new transaction is opened, committed on success and
        rolled back on any failure, cancellation included.
        """
        if self._in_transaction:
            return await operation()

        await self.begin_transaction()
        try:
            result = await operation()
        except BaseException as exc:
            log.error("unit_of_work.operation_failed", error=repr(exc))
            await self._rollback_after_failure()
            raise
        await self.commit_transaction()
        return result

    # --- Backend hooks --------------------------------------------------------

    @abstractmethod
    async def _begin(self) -> None: ...

    @abstractmethod
    async def _flush(self, changes: list[PendingChange]) -> int: ...

    @abstractmethod
    async def _commit(self) -> None: ...

    @abstractmethod
    async def _rollback(self) -> None: ...

    # --- Internal helpers -----------------------------------------------------

    def _stamp_audit(self, changes: list[PendingChange]) -> None:
        now = self.clock.now()
        user_id = self.actor.user_id
        for change in changes:
            if change.state is ChangeState.ADDED:
                change.product.created_at = now
                change.product.created_by = user_id
            else:
                change.product.updated_at = now
                change.product.updated_by = user_id

    async def _dispatch_events(self, changes: list[PendingChange]) -> None:
        events = [event for change in changes for event in change.product.drain_events()]
        if not events:
            return
        if self._dispatcher is None:
            log.debug("unit_of_work.events_dropped", count=len(events))
            return
        for event in events:
            await self._dispatcher.publish(event)

    async def _rollback_after_failure(self) -> None:
        """Roll back without letting a rollback error hide the original one."""
        try:
            await self._rollback()
        except Exception:
            log.exception("unit_of_work.rollback_failed")
        finally:
            self.products.reset()
            self._in_transaction = False
