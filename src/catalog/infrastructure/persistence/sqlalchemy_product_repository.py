"""SQLAlchemy-backed implementation of ProductRepository."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import exists, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.domain.exceptions import ConcurrencyError
from catalog.domain.model.product import Product, ProductStatus
from catalog.domain.model.value_objects import Money, Sku
from catalog.domain.repository.product_repository import (
    ChangeState,
    PendingChange,
    ProductRepository,
)
from catalog.domain.specification import ProductSpecification
from catalog.infrastructure.persistence.query import to_count, to_select
from catalog.infrastructure.persistence.tables import ProductRecord


class SqlAlchemyProductRepository(ProductRepository):

    def __init__(self, session: AsyncSession) -> None:
        super().__init__()
        self._session = session

    # --- ProductRepository interface ------------------------------------------

    async def sku_exists(self, sku: Sku) -> bool:
        # Deleted rows count: a SKU is never handed out twice.
        stmt = select(exists().where(ProductRecord.sku == sku.value))
        return bool(await self._session.scalar(stmt))

    async def write(self, changes: list[PendingChange]) -> None:
        for change in changes:
            product = change.product
            if change.state is ChangeState.ADDED:
                self._session.add(_to_record(product))
                continue

            if change.state is ChangeState.MODIFIED:
                values = _row_values(product)
            else:
                values = {
                    "is_deleted": True,
                    "deleted_at": product.updated_at,
                    "deleted_by": product.updated_by,
                    "version": ProductRecord.version + 1,
                }
            await self._write_if_unchanged(product.id, values)

    async def _get(self, product_id: str) -> Product | None:
        stmt = (
            select(ProductRecord)
            .where(ProductRecord.id == product_id, ProductRecord.is_deleted.is_(False))
            .execution_options(populate_existing=True)
        )
        record = await self._session.scalar(stmt)
        return _to_product(record) if record is not None else None

    async def _stored_version(self, product_id: str) -> int | None:
        stmt = select(ProductRecord.version).where(
            ProductRecord.id == product_id, ProductRecord.is_deleted.is_(False)
        )
        return await self._session.scalar(stmt)

    async def _search(self, spec: ProductSpecification) -> tuple[list[Product], int]:
        total = await self._session.scalar(to_count(spec))
        records = await self._session.scalars(
            to_select(spec).execution_options(populate_existing=True)
        )
        return [_to_product(r) for r in records], total or 0

    # --- Internal helpers -----------------------------------------------------

    async def _write_if_unchanged(self, product_id: str, values: dict) -> None:
        expected = self._loaded_versions[product_id]
        stmt = (
            update(ProductRecord)
            .where(
                ProductRecord.id == product_id,
                ProductRecord.version == expected,
                ProductRecord.is_deleted.is_(False),
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        if result.rowcount != 1:
            raise ConcurrencyError(
                f"Product {product_id} was modified by another writer "
                f"since version {expected} was loaded"
            )


# --- Mapping helpers ------------------------------------------------------------


def _to_product(record: ProductRecord) -> Product:
    return Product(
        id=record.id,
        sku=Sku(record.sku),
        name=record.name,
        description=record.description,
        price=Money(record.price_amount, record.currency),
        status=ProductStatus(record.status),
        category_id=record.category_id,
        version=record.version,
        created_at=_as_utc(record.created_at),
        created_by=record.created_by,
        updated_at=_as_utc(record.updated_at),
        updated_by=record.updated_by,
    )


def _to_record(product: Product) -> ProductRecord:
    return ProductRecord(id=product.id, is_deleted=False, **_row_values(product))


def _row_values(product: Product) -> dict:
    return {
        "sku": product.sku.value,
        "name": product.name,
        "description": product.description,
        "price_amount": product.price.amount,
        "currency": product.price.currency,
        "status": product.status.value,
        "category_id": product.category_id,
        "version": product.version,
        "created_at": product.created_at,
        "created_by": product.created_by,
        "updated_at": product.updated_at,
        "updated_by": product.updated_by,
    }


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes; everything stored is UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
