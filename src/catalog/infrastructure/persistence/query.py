"""Translation of a ProductSpecification into SQL.

This is the only place that knows how each clause maps onto the
``products`` table. Soft-deleted rows never match.
"""

from __future__ import annotations

from sqlalchemy import ColumnElement, Select, func, or_, select

from catalog.domain.specification import (
    CategoryIs,
    Clause,
    PriceAtLeast,
    PriceAtMost,
    ProductSpecification,
    SkuIs,
    SortField,
    StatusIs,
    TermMatch,
)
from catalog.infrastructure.persistence.tables import ProductRecord

_SORT_COLUMNS = {
    SortField.NAME: ProductRecord.name,
    SortField.PRICE: ProductRecord.price_amount,
}


def to_select(spec: ProductSpecification) -> Select[tuple[ProductRecord]]:
    """Filtered, ordered and (when a page window is set) paged row query."""
    stmt = select(ProductRecord).where(*_conditions(spec))

    ordering = spec.effective_ordering
    column = _SORT_COLUMNS[ordering.field]
    # id breaks ties so that pages never overlap.
    stmt = stmt.order_by(
        column.desc() if ordering.descending else column.asc(), ProductRecord.id.asc()
    )

    if spec.page is not None:
        stmt = stmt.offset(spec.page.skip).limit(spec.page.take)
    return stmt


def to_count(spec: ProductSpecification) -> Select[tuple[int]]:
    """Size of the whole filtered set, ignoring sort and page window."""
    return (
        select(func.count())
        .select_from(ProductRecord)
        .where(*_conditions(spec))
    )


def _conditions(spec: ProductSpecification) -> list[ColumnElement[bool]]:
    return [ProductRecord.is_deleted.is_(False)] + [
        _clause_condition(clause) for clause in spec.criteria
    ]


def _clause_condition(clause: Clause) -> ColumnElement[bool]:
    if isinstance(clause, TermMatch):
        return or_(
            ProductRecord.name.icontains(clause.term, autoescape=True),
            ProductRecord.sku.icontains(clause.term, autoescape=True),
        )
    if isinstance(clause, SkuIs):
        return ProductRecord.sku == clause.sku
    if isinstance(clause, StatusIs):
        return ProductRecord.status == clause.status.value
    if isinstance(clause, CategoryIs):
        return ProductRecord.category_id == clause.category_id
    if isinstance(clause, PriceAtLeast):
        return ProductRecord.price_amount >= clause.amount
    if isinstance(clause, PriceAtMost):
        return ProductRecord.price_amount <= clause.amount
    raise TypeError(f"Unsupported clause: {clause!r}")
