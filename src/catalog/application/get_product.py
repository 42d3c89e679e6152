"""Application service: Get Product By ID use case (query).

A missing product is a valid answer (``Success(None)``), not a failure;
the caller decides how to present it.
"""

from __future__ import annotations

from catalog.application.behaviors import use_case
from catalog.application.dto import GetProductById, ProductView
from catalog.application.result import Result, capture
from catalog.application.unit_of_work import AbstractUnitOfWork


class GetProductByIdHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    @use_case("get_product_by_id")
    async def handle(self, query: GetProductById) -> Result[ProductView | None]:
        return await capture(self._find(query))

    async def _find(self, query: GetProductById) -> ProductView | None:
        product = await self._uow.products.get_by_id(query.id)
        return ProductView.from_product(product) if product is not None else None
