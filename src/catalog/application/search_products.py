"""Application service: Search Products use case (query)."""

from __future__ import annotations

from catalog.application.behaviors import use_case
from catalog.application.dto import (
    PaginatedResult,
    ProductView,
    SearchProducts,
    page_offset,
)
from catalog.application.result import Result, capture
from catalog.application.unit_of_work import AbstractUnitOfWork
from catalog.application.validation import parse_status, validate_search
from catalog.domain.specification import ProductSpecification

DEFAULT_MAX_PAGE_SIZE = 100


class SearchProductsHandler:

    def __init__(
        self, uow: AbstractUnitOfWork, max_page_size: int = DEFAULT_MAX_PAGE_SIZE
    ) -> None:
        self._uow = uow
        self._max_page_size = max_page_size

    @use_case("search_products")
    async def handle(self, query: SearchProducts) -> Result[PaginatedResult[ProductView]]:
        return await capture(self._search(query))

    async def _search(self, query: SearchProducts) -> PaginatedResult[ProductView]:
        validate_search(query, self._max_page_size)

        spec = ProductSpecification.search(
            term=query.term,
            status=parse_status(query.status) if query.status is not None else None,
            category_id=query.category_id,
            min_price=query.min_price,
            max_price=query.max_price,
            skip=page_offset(query.page_number, query.page_size),
            take=query.page_size,
            order_by_price_descending=query.order_by_price_descending,
        )
        products, total_count = await self._uow.products.search(spec)

        return PaginatedResult(
            items=[ProductView.from_product(p) for p in products],
            total_count=total_count,
            page_number=query.page_number,
            page_size=query.page_size,
        )
