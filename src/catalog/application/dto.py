"""Data Transfer Objects: plain containers that cross layer boundaries.

Commands and queries carry caller input into the handlers; views carry
product state out without exposing the aggregate itself.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Generic, TypeVar

from catalog.domain.model.product import Product

T = TypeVar("T")


# --- Input --------------------------------------------------------------------


@dataclass(frozen=True)
class CreateProduct:
    sku: str
    name: str
    price: Decimal
    currency: str
    description: str | None = None
    category_id: str | None = None


@dataclass(frozen=True)
class UpdateProduct:
    """Replace details of an existing product.

    ``price`` and ``currency`` travel together; ``category_id`` replaces
    the current category (None clears it).
    """

    id: str
    name: str
    description: str | None = None
    price: Decimal | None = None
    currency: str | None = None
    category_id: str | None = None


@dataclass(frozen=True)
class DeleteProduct:
    id: str


@dataclass(frozen=True)
class PublishProduct:
    id: str


@dataclass(frozen=True)
class DiscontinueProduct:
    id: str


@dataclass(frozen=True)
class GetProductById:
    id: str


@dataclass(frozen=True)
class SearchProducts:
    term: str | None = None
    status: str | None = None
    category_id: str | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    page_number: int = 1
    page_size: int = 20
    order_by_price_descending: bool = False


# --- Output -------------------------------------------------------------------


@dataclass(frozen=True)
class ProductView:
    id: str
    sku: str
    name: str
    description: str | None
    price: Decimal
    currency: str
    status: str
    category_id: str | None
    is_available: bool
    version: int
    created_at: datetime | None
    created_by: str | None
    updated_at: datetime | None
    updated_by: str | None

    @staticmethod
    def from_product(product: Product) -> ProductView:
        return ProductView(
            id=product.id,
            sku=product.sku.value,
            name=product.name,
            description=product.description,
            price=product.price.amount,
            currency=product.price.currency,
            status=product.status.value,
            category_id=product.category_id,
            is_available=product.is_available,
            version=product.version,
            created_at=product.created_at,
            created_by=product.created_by,
            updated_at=product.updated_at,
            updated_by=product.updated_by,
        )


@dataclass(frozen=True)
class PaginatedResult(Generic[T]):
    """One page of a larger result set. ``page_number`` is 1-based."""

    items: list[T]
    total_count: int
    page_number: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size)

    @property
    def has_previous_page(self) -> bool:
        return self.page_number > 1

    @property
    def has_next_page(self) -> bool:
        return self.page_number < self.total_pages


def page_offset(page_number: int, page_size: int) -> int:
    """Rows to skip to reach *page_number*."""
    return (page_number - 1) * page_size
