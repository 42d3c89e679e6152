"""Application services: Publish / Discontinue Product use cases.

Both move the product forward along Draft -> Published -> Discontinued;
the aggregate rejects any other move.
"""

from __future__ import annotations

from typing import Callable

import structlog

from catalog.application.behaviors import use_case
from catalog.application.dto import DiscontinueProduct, ProductView, PublishProduct
from catalog.application.result import Result, capture
from catalog.application.unit_of_work import AbstractUnitOfWork
from catalog.domain.exceptions import NotFoundError
from catalog.domain.model.product import Product

log = structlog.get_logger(__name__)


class PublishProductHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    @use_case("publish_product")
    async def handle(self, command: PublishProduct) -> Result[ProductView]:
        return await capture(
            _transition(self._uow, command.id, lambda p, actor: p.publish(actor))
        )


class DiscontinueProductHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    @use_case("discontinue_product")
    async def handle(self, command: DiscontinueProduct) -> Result[ProductView]:
        return await capture(
            _transition(self._uow, command.id, lambda p, actor: p.discontinue(actor))
        )


async def _transition(
    uow: AbstractUnitOfWork,
    product_id: str,
    apply: Callable[[Product, str | None], None],
) -> ProductView:

    async def operation() -> ProductView:
        product: Product | None = await uow.products.get_by_id(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)

        apply(product, uow.actor.user_id)
        await uow.products.update(product)
        await uow.save_changes()

        log.info(
            "product.status_changed", product_id=product.id, status=product.status.value
        )
        return ProductView.from_product(product)

    return await uow.execute_in_transaction(operation)
