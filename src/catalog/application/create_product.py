"""Application service: Create Product use case."""

from __future__ import annotations

import structlog

from catalog.application.behaviors import use_case
from catalog.application.dto import CreateProduct, ProductView
from catalog.application.ports import CategoryDirectory
from catalog.application.result import Result, capture
from catalog.application.unit_of_work import AbstractUnitOfWork
from catalog.application.validation import validate_create
from catalog.domain.exceptions import DuplicateSkuError, NotFoundError
from catalog.domain.model.product import Product
from catalog.domain.model.value_objects import Money, Sku

log = structlog.get_logger(__name__)


class CreateProductHandler:

    def __init__(
        self,
        uow: AbstractUnitOfWork,
        categories: CategoryDirectory | None = None,
    ) -> None:
        self._uow = uow
        self._categories = categories

    @use_case("create_product")
    async def handle(self, command: CreateProduct) -> Result[ProductView]:
        return await capture(self._uow.execute_in_transaction(lambda: self._create(command)))

    async def _create(self, command: CreateProduct) -> ProductView:
        """Add a new draft product to the catalog.

        Steps:
        1. Validate the command as a whole.
        2. Reject a SKU that is already taken.
        3. Let the Product aggregate enforce its own invariants.
        4. Persist; audit fields are stamped by the unit of work.
        """
        validate_create(command)

        sku = Sku(command.sku)
        if await self._uow.products.sku_exists(sku):
            raise DuplicateSkuError(sku.value)
        await ensure_category_exists(self._categories, command.category_id)

        product = Product.create(
            sku=sku,
            name=command.name,
            price=Money.of(command.price, command.currency),
            description=command.description,
            category_id=command.category_id,
        )
        await self._uow.products.add(product)
        await self._uow.save_changes()

        log.info("product.created", product_id=product.id, sku=product.sku.value)
        return ProductView.from_product(product)


async def ensure_category_exists(
    categories: CategoryDirectory | None, category_id: str | None
) -> None:
    if categories is None or category_id is None:
        return
    if not await categories.exists(category_id):
        raise NotFoundError("Category", category_id)
