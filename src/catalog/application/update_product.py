"""Application service: Update Product use case."""

from __future__ import annotations

import structlog

from catalog.application.behaviors import use_case
from catalog.application.create_product import ensure_category_exists
from catalog.application.dto import ProductView, UpdateProduct
from catalog.application.ports import CategoryDirectory
from catalog.application.result import Result, capture
from catalog.application.unit_of_work import AbstractUnitOfWork
from catalog.application.validation import validate_update
from catalog.domain.exceptions import NotFoundError
from catalog.domain.model.value_objects import Money

log = structlog.get_logger(__name__)


class UpdateProductHandler:

    def __init__(
        self,
        uow: AbstractUnitOfWork,
        categories: CategoryDirectory | None = None,
    ) -> None:
        self._uow = uow
        self._categories = categories

    @use_case("update_product")
    async def handle(self, command: UpdateProduct) -> Result[ProductView]:
        return await capture(self._uow.execute_in_transaction(lambda: self._update(command)))

    async def _update(self, command: UpdateProduct) -> ProductView:
        """Apply details, price (if given) and category to a product.

        Each applied mutation bumps the version, so one update usually
        moves the version by two or three.
        """
        validate_update(command)

        product = await self._uow.products.get_by_id(command.id)
        if product is None:
            raise NotFoundError("Product", command.id)

        actor_id = self._uow.actor.user_id
        product.update_details(command.name, command.description, actor_id)

        if command.price is not None and command.currency is not None:
            product.update_price(Money.of(command.price, command.currency), actor_id)

        if command.category_id != product.category_id:
            await ensure_category_exists(self._categories, command.category_id)
        product.change_category(command.category_id, actor_id)

        await self._uow.products.update(product)
        await self._uow.save_changes()

        log.info("product.updated", product_id=product.id, version=product.version)
        return ProductView.from_product(product)
