"""Product specifications: declarative filter / sort / page descriptors.

A specification only describes a query. It holds a conjunction of filter
clauses, at most one sort key and an optional page window. Each storage
backend owns a single function that translates it (see
``catalog.infrastructure.persistence.query``); ``is_satisfied_by``
evaluates the same predicate in memory.

Every builder method returns a new specification, so a specification can
be shared and extended freely.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Union

from catalog.domain.model.product import Product, ProductStatus


# --- Filter clauses -----------------------------------------------------------


@dataclass(frozen=True)
class TermMatch:
    """Case-insensitive substring match on the name OR the SKU."""

    term: str


@dataclass(frozen=True)
class SkuIs:
    sku: str


@dataclass(frozen=True)
class StatusIs:
    status: ProductStatus


@dataclass(frozen=True)
class CategoryIs:
    category_id: str


@dataclass(frozen=True)
class PriceAtLeast:
    amount: Decimal


@dataclass(frozen=True)
class PriceAtMost:
    amount: Decimal


Clause = Union[TermMatch, SkuIs, StatusIs, CategoryIs, PriceAtLeast, PriceAtMost]


# --- Sorting and paging -------------------------------------------------------


class SortField(Enum):
    NAME = "name"
    PRICE = "price"


@dataclass(frozen=True)
class Ordering:
    field: SortField
    descending: bool = False


@dataclass(frozen=True)
class PageWindow:
    skip: int
    take: int


DEFAULT_ORDERING = Ordering(SortField.NAME)


@dataclass(frozen=True)
class ProductSpecification:
    criteria: tuple[Clause, ...] = ()
    ordering: Ordering | None = None
    page: PageWindow | None = None

    # --- Builders -------------------------------------------------------------

    def where(self, *clauses: Clause) -> ProductSpecification:
        """Replace the filter with the conjunction of *clauses*."""
        return replace(self, criteria=tuple(clauses))

    def and_(self, other: ProductSpecification) -> ProductSpecification:
        """Conjoin both filters; sort and page come from self unless unset."""
        return ProductSpecification(
            criteria=self.criteria + other.criteria,
            ordering=self.ordering or other.ordering,
            page=self.page or other.page,
        )

    def order_by(self, sort_field: SortField) -> ProductSpecification:
        return replace(self, ordering=Ordering(sort_field))

    def order_by_descending(self, sort_field: SortField) -> ProductSpecification:
        return replace(self, ordering=Ordering(sort_field, descending=True))

    def paged(self, skip: int, take: int) -> ProductSpecification:
        return replace(self, page=PageWindow(skip=skip, take=take))

    @property
    def effective_ordering(self) -> Ordering:
        return self.ordering or DEFAULT_ORDERING

    # --- In-memory evaluation -------------------------------------------------

    def is_satisfied_by(self, product: Product) -> bool:
        return all(_clause_matches(clause, product) for clause in self.criteria)

    # --- Factories ------------------------------------------------------------

    @staticmethod
    def by_term(term: str) -> ProductSpecification:
        return ProductSpecification().where(*_term_clauses(term))

    @staticmethod
    def by_sku(sku: str) -> ProductSpecification:
        return ProductSpecification().where(SkuIs(sku.strip().upper()))

    @staticmethod
    def by_status(status: ProductStatus) -> ProductSpecification:
        return ProductSpecification().where(StatusIs(status))

    @staticmethod
    def by_category(category_id: str) -> ProductSpecification:
        return ProductSpecification().where(CategoryIs(category_id))

    @staticmethod
    def by_price_range(
        min_price: Decimal | None = None, max_price: Decimal | None = None
    ) -> ProductSpecification:
        clauses: list[Clause] = []
        if min_price is not None:
            clauses.append(PriceAtLeast(min_price))
        if max_price is not None:
            clauses.append(PriceAtMost(max_price))
        return ProductSpecification().where(*clauses)

    @staticmethod
    def search(
        term: str | None = None,
        status: ProductStatus | None = None,
        category_id: str | None = None,
        min_price: Decimal | None = None,
        max_price: Decimal | None = None,
        skip: int = 0,
        take: int = 20,
        order_by_price_descending: bool = False,
    ) -> ProductSpecification:
        """Combined search: every supplied argument adds one AND-ed clause."""
        spec = ProductSpecification.by_term(term or "")
        if status is not None:
            spec = spec.and_(ProductSpecification.by_status(status))
        if category_id is not None:
            spec = spec.and_(ProductSpecification.by_category(category_id))
        spec = spec.and_(ProductSpecification.by_price_range(min_price, max_price))

        if order_by_price_descending:
            spec = spec.order_by_descending(SortField.PRICE)
        else:
            spec = spec.order_by(SortField.NAME)
        return spec.paged(skip, take)


def _term_clauses(term: str) -> list[Clause]:
    normalized = term.strip()
    return [TermMatch(normalized)] if normalized else []


def _clause_matches(clause: Clause, product: Product) -> bool:
    if isinstance(clause, TermMatch):
        needle = clause.term.lower()
        return needle in product.name.lower() or needle in product.sku.value.lower()
    if isinstance(clause, SkuIs):
        return product.sku.value == clause.sku
    if isinstance(clause, StatusIs):
        return product.status is clause.status
    if isinstance(clause, CategoryIs):
        return product.category_id == clause.category_id
    if isinstance(clause, PriceAtLeast):
        return product.price.amount >= clause.amount
    if isinstance(clause, PriceAtMost):
        return product.price.amount <= clause.amount
    raise TypeError(f"Unsupported clause: {clause!r}")
