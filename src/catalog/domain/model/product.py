"""Product aggregate: the consistency boundary of the catalog.

The Product owns its value objects and its pending domain events. Every
named mutation validates first, then changes state, bumps ``version`` by
exactly one and optionally records an event.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from catalog.domain.exceptions import InvalidStateTransitionError, ValidationError
from catalog.domain.model.events import (
    DomainEvent,
    EventBuffer,
    ProductCreated,
    ProductPriceChanged,
)
from catalog.domain.model.value_objects import Money, Sku

MAX_NAME_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 2000


class ProductStatus(Enum):
    DRAFT = "Draft"
    PUBLISHED = "Published"
    DISCONTINUED = "Discontinued"


# Forward order of the lifecycle; a transition is legal only if it moves right.
_LIFECYCLE = (ProductStatus.DRAFT, ProductStatus.PUBLISHED, ProductStatus.DISCONTINUED)


@dataclass
class Product:
    """A product in the catalog.

    Use ``Product.create()`` for new products; it enforces all invariants
    and records ``ProductCreated``. The ``__init__`` stays simple so the
    repository can reconstitute persisted products without re-validating
    or re-emitting events.

    ``version`` and the audit fields are maintained by the mutations and
    the unit of work; callers never assign them.
    """

    id: str
    sku: Sku
    name: str
    price: Money
    description: str | None = None
    status: ProductStatus = ProductStatus.DRAFT
    category_id: str | None = None
    version: int = 0
    created_at: datetime | None = None
    created_by: str | None = None
    updated_at: datetime | None = None
    updated_by: str | None = None
    _events: EventBuffer = field(
        default_factory=EventBuffer, init=False, repr=False, compare=False
    )

    # --- Factory (used for NEW products only) ---------------------------------

    @staticmethod
    def create(
        sku: Sku,
        name: str,
        price: Money,
        description: str | None = None,
        category_id: str | None = None,
        product_id: str | None = None,
    ) -> Product:
        """Create a new draft product, enforcing all invariants."""
        _validate_name(name)
        _validate_description(description)
        _validate_price(price)

        product = Product(
            id=product_id or str(uuid.uuid4()),
            sku=sku,
            name=name.strip(),
            description=_clean(description),
            price=price,
            category_id=category_id,
        )
        product._events.emit(
            ProductCreated(
                product_id=product.id,
                sku=product.sku.value,
                name=product.name,
                price_amount=product.price.amount,
                price_currency=product.price.currency,
            )
        )
        return product

    # --- Mutations ------------------------------------------------------------

    def update_details(
        self, name: str, description: str | None, actor_id: str | None = None
    ) -> None:
        _validate_name(name)
        _validate_description(description)
        self.name = name.strip()
        self.description = _clean(description)
        self._touch(actor_id)

    def update_price(self, new_price: Money, actor_id: str | None = None) -> None:
        """Replace the price.

        The new price may use a different currency than the old one; the
        event carries both so subscribers can tell.
        """
        _validate_price(new_price)
        old_price = self.price
        self.price = new_price
        self._touch(actor_id)
        self._events.emit(
            ProductPriceChanged(
                product_id=self.id,
                old_price_amount=old_price.amount,
                old_price_currency=old_price.currency,
                new_price_amount=new_price.amount,
                new_price_currency=new_price.currency,
            )
        )

    def change_category(self, category_id: str | None, actor_id: str | None = None) -> None:
        self.category_id = category_id
        self._touch(actor_id)

    # --- State transitions ----------------------------------------------------

    def publish(self, actor_id: str | None = None) -> None:
        """Transition DRAFT -> PUBLISHED."""
        self._transition_to(ProductStatus.PUBLISHED, actor_id)

    def discontinue(self, actor_id: str | None = None) -> None:
        """Transition DRAFT|PUBLISHED -> DISCONTINUED (terminal)."""
        self._transition_to(ProductStatus.DISCONTINUED, actor_id)

    # --- Computed properties --------------------------------------------------

    @property
    def is_available(self) -> bool:
        return self.status is ProductStatus.PUBLISHED

    # --- Domain events --------------------------------------------------------

    @property
    def pending_events(self) -> tuple[DomainEvent, ...]:
        return tuple(self._events)

    def drain_events(self) -> list[DomainEvent]:
        return self._events.drain()

    # --- Internal helpers -----------------------------------------------------

    def _transition_to(self, target: ProductStatus, actor_id: str | None) -> None:
        if self.status is ProductStatus.DISCONTINUED:
            raise InvalidStateTransitionError(
                f"Product {self.id} is discontinued; its status can no longer change"
            )
        if _LIFECYCLE.index(target) <= _LIFECYCLE.index(self.status):
            raise InvalidStateTransitionError(
                f"Cannot move product {self.id} from {self.status.value} "
                f"to {target.value}"
            )
        self.status = target
        self._touch(actor_id)

    def _touch(self, actor_id: str | None) -> None:
        self.updated_by = actor_id
        self.version += 1


def _clean(description: str | None) -> str | None:
    return description.strip() if description is not None else None


def _validate_name(name: str) -> None:
    if not name or not name.strip():
        raise ValidationError("Product name cannot be empty")
    if len(name.strip()) > MAX_NAME_LENGTH:
        raise ValidationError(f"Product name cannot exceed {MAX_NAME_LENGTH} characters")


def _validate_description(description: str | None) -> None:
    if description is not None and len(description.strip()) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(
            f"Product description cannot exceed {MAX_DESCRIPTION_LENGTH} characters"
        )


def _validate_price(price: Money) -> None:
    if price.is_negative():
        raise ValidationError("Product price cannot be negative")
