"""Application service: Delete Product use case.

Deletion is soft: the row stays in storage flagged as deleted and
disappears from every read. Deleting the same ID twice fails the second
time with NOT_FOUND.
"""

from __future__ import annotations

import structlog

from catalog.application.behaviors import use_case
from catalog.application.dto import DeleteProduct
from catalog.application.result import Result, capture
from catalog.application.unit_of_work import AbstractUnitOfWork
from catalog.domain.exceptions import NotFoundError

log = structlog.get_logger(__name__)


class DeleteProductHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    @use_case("delete_product")
    async def handle(self, command: DeleteProduct) -> Result[None]:
        return await capture(self._uow.execute_in_transaction(lambda: self._delete(command)))

    async def _delete(self, command: DeleteProduct) -> None:
        product = await self._uow.products.get_by_id(command.id)
        if product is None:
            raise NotFoundError("Product", command.id)

        await self._uow.products.delete(product)
        await self._uow.save_changes()
        log.info("product.deleted", product_id=product.id)
