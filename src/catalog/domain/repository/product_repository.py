"""Abstract repository for the Product aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations live in the infrastructure
layer and only provide the storage round trips (the ``_`` methods); the
bookkeeping the unit of work relies on lives here:

- every product handed out by ``get_by_id`` or ``search`` remembers the
  version it was loaded at, which is the expected prior version for
  ``update``/``delete``;
- ``add``/``update``/``delete`` record a pending change that the unit of
  work stamps, writes and drains events from on the next flush.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from catalog.domain.exceptions import (
    ConcurrencyError,
    InvalidArgumentError,
    NotFoundError,
)
from catalog.domain.model.product import Product
from catalog.domain.model.value_objects import Sku
from catalog.domain.specification import ProductSpecification


class ChangeState(Enum):
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"


@dataclass
class PendingChange:
    state: ChangeState
    product: Product


class ProductRepository(ABC):

    def __init__(self) -> None:
        self._loaded_versions: dict[str, int] = {}
        self._changes: dict[str, PendingChange] = {}

    # --- Queries --------------------------------------------------------------

    async def get_by_id(self, product_id: str) -> Product | None:
        """Return a live product by its ID, or None if not found."""
        product = await self._get(product_id)
        if product is not None:
            self._loaded_versions[product.id] = product.version
        return product

    async def search(self, spec: ProductSpecification) -> tuple[list[Product], int]:
        """Return the requested page and the size of the whole filtered set."""
        if spec.page is not None:
            if spec.page.skip < 0:
                raise InvalidArgumentError("skip must be greater than or equal to 0")
            if spec.page.take <= 0:
                raise InvalidArgumentError("take must be greater than 0")
        products, total = await self._search(spec)
        for product in products:
            self._loaded_versions[product.id] = product.version
        return products, total

    @abstractmethod
    async def sku_exists(self, sku: Sku) -> bool:
        """True if any product, deleted or not, already uses *sku*."""

    # --- Commands -------------------------------------------------------------

    async def add(self, product: Product) -> None:
        self._changes[product.id] = PendingChange(ChangeState.ADDED, product)

    async def update(self, product: Product) -> None:
        """Register *product* for writing after checking its version.

        Raises ConcurrencyError if another writer stored a newer version
        since this repository loaded the product.
        """
        pending = self._changes.get(product.id)
        if pending is not None and pending.state is ChangeState.ADDED:
            return
        await self._check_version(product)
        self._changes[product.id] = PendingChange(ChangeState.MODIFIED, product)

    async def delete(self, product: Product) -> None:
        """Register a soft delete of *product*."""
        pending = self._changes.get(product.id)
        if pending is not None and pending.state is ChangeState.ADDED:
            del self._changes[product.id]
            return
        await self._check_version(product)
        self._changes[product.id] = PendingChange(ChangeState.DELETED, product)

    # --- Unit-of-work bookkeeping ---------------------------------------------

    def pending_changes(self) -> list[PendingChange]:
        return list(self._changes.values())

    def mark_persisted(self) -> None:
        """Forget written changes; written products become the new baseline."""
        for change in self._changes.values():
            if change.state is ChangeState.DELETED:
                self._loaded_versions.pop(change.product.id, None)
            else:
                self._loaded_versions[change.product.id] = change.product.version
        self._changes.clear()

    def reset(self) -> None:
        """Drop all tracking, e.g. after a rollback."""
        self._loaded_versions.clear()
        self._changes.clear()

    @abstractmethod
    async def write(self, changes: list[PendingChange]) -> None:
        """Stage *changes* in the underlying storage session."""

    # --- Storage round trips --------------------------------------------------

    @abstractmethod
    async def _get(self, product_id: str) -> Product | None: ...

    @abstractmethod
    async def _stored_version(self, product_id: str) -> int | None:
        """Current version of a live product in storage, or None."""

    @abstractmethod
    async def _search(self, spec: ProductSpecification) -> tuple[list[Product], int]: ...

    # --- Internal helpers -----------------------------------------------------

    async def _check_version(self, product: Product) -> None:
        expected = self._loaded_versions.get(product.id)
        if expected is None:
            raise InvalidArgumentError(
                f"Product {product.id} was not loaded through this repository"
            )
        stored = await self._stored_version(product.id)
        if stored is None:
            raise NotFoundError("Product", product.id)
        if stored != expected:
            raise ConcurrencyError(
                f"Product {product.id} was modified by another writer "
                f"(expected version {expected}, found {stored})"
            )
