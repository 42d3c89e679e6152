"""Boundary validation for commands and queries.

Each validator checks a whole command and reports every broken rule at
once, keyed by field, by raising a single ValidationError. The aggregate
still enforces its own invariants; these rules are the stricter input
contract of the use cases.
"""

from __future__ import annotations

import re
from decimal import Decimal

from catalog.application.dto import CreateProduct, SearchProducts, UpdateProduct
from catalog.domain.exceptions import ValidationError
from catalog.domain.model.product import (
    MAX_DESCRIPTION_LENGTH,
    MAX_NAME_LENGTH,
    ProductStatus,
)
from catalog.domain.model.value_objects import Sku

MIN_CREATE_NAME_LENGTH = 3
_CURRENCY_PATTERN = re.compile(r"^[A-Za-z]{3}$")
_SKU_PATTERN = re.compile(r"^[A-Z0-9\-]+$")


class _Errors:

    def __init__(self) -> None:
        self.by_field: dict[str, list[str]] = {}

    def add(self, field: str, message: str) -> None:
        self.by_field.setdefault(field, []).append(message)

    def raise_if_any(self, subject: str) -> None:
        if not self.by_field:
            return
        summary = "; ".join(
            f"{field}: {', '.join(messages)}" for field, messages in self.by_field.items()
        )
        raise ValidationError(f"Invalid {subject}: {summary}", errors=self.by_field)


def validate_create(command: CreateProduct) -> None:
    errors = _Errors()

    sku = (command.sku or "").strip().upper()
    if not sku:
        errors.add("sku", "SKU is required")
    elif len(sku) > Sku.MAX_LENGTH:
        errors.add("sku", f"SKU cannot exceed {Sku.MAX_LENGTH} characters")
    elif not _SKU_PATTERN.match(sku):
        errors.add("sku", "SKU must contain only letters, numbers, and hyphens")

    name = (command.name or "").strip()
    if not name:
        errors.add("name", "Product name is required")
    elif len(name) < MIN_CREATE_NAME_LENGTH:
        errors.add("name", f"Product name must be at least {MIN_CREATE_NAME_LENGTH} characters")
    elif len(name) > MAX_NAME_LENGTH:
        errors.add("name", f"Product name cannot exceed {MAX_NAME_LENGTH} characters")

    _check_description(errors, command.description)

    if command.price is not None and not command.price.is_finite():
        errors.add("price", "Price must be a number")
    elif command.price is None or command.price <= 0:
        errors.add("price", "Price must be greater than zero")
    elif _decimal_places(Decimal(str(command.price))) > 2:
        errors.add("price", "Price can have at most 2 decimal places")

    _check_currency(errors, command.currency, required=True)
    _check_reference(errors, "category_id", command.category_id)
    errors.raise_if_any("product")


def validate_update(command: UpdateProduct) -> None:
    errors = _Errors()

    if not command.id:
        errors.add("id", "Product ID is required")

    name = (command.name or "").strip()
    if not name:
        errors.add("name", "Name is required")
    elif len(name) > MAX_NAME_LENGTH:
        errors.add("name", f"Name cannot exceed {MAX_NAME_LENGTH} characters")

    _check_description(errors, command.description)

    if command.price is not None:
        if not command.price.is_finite():
            errors.add("price", "Price must be a number")
        elif command.price < 0:
            errors.add("price", "Price cannot be negative")
        if not command.currency:
            errors.add("currency", "Currency is required when updating price")
    if command.currency:
        _check_currency(errors, command.currency, required=False)

    _check_reference(errors, "category_id", command.category_id)
    errors.raise_if_any("product update")


def validate_search(query: SearchProducts, max_page_size: int) -> None:
    errors = _Errors()

    if query.page_number < 1:
        errors.add("page_number", "Page number must be greater than 0")
    if query.page_size < 1:
        errors.add("page_size", "Page size must be greater than 0")
    elif query.page_size > max_page_size:
        errors.add("page_size", f"Page size cannot exceed {max_page_size}")

    min_price = _check_bound(errors, "min_price", "Minimum", query.min_price)
    max_price = _check_bound(errors, "max_price", "Maximum", query.max_price)
    if min_price is not None and max_price is not None and min_price > max_price:
        errors.add("min_price", "Minimum price cannot be greater than maximum price")

    if query.status is not None and parse_status(query.status) is None:
        allowed = ", ".join(s.value for s in ProductStatus)
        errors.add("status", f"Status must be one of: {allowed}")

    errors.raise_if_any("search")


def parse_status(raw: str) -> ProductStatus | None:
    """Case-insensitive lookup of a status by its display value."""
    for status in ProductStatus:
        if status.value.lower() == raw.strip().lower():
            return status
    return None


# --- Internal helpers ---------------------------------------------------------


def _check_description(errors: _Errors, description: str | None) -> None:
    if description is not None and len(description.strip()) > MAX_DESCRIPTION_LENGTH:
        errors.add(
            "description", f"Description cannot exceed {MAX_DESCRIPTION_LENGTH} characters"
        )


def _check_currency(errors: _Errors, currency: str | None, *, required: bool) -> None:
    if not currency:
        if required:
            errors.add("currency", "Currency is required")
        return
    if not _CURRENCY_PATTERN.match(currency):
        errors.add("currency", "Currency must be a 3-letter ISO code")


def _check_bound(
    errors: _Errors, field: str, label: str, value: Decimal | None
) -> Decimal | None:
    """Return *value* if it is a usable price bound, else None."""
    if value is None:
        return None
    if not value.is_finite():
        errors.add(field, f"{label} price must be a number")
        return None
    if value < 0:
        errors.add(field, f"{label} price cannot be negative")
        return None
    return value


def _check_reference(errors: _Errors, field: str, value: str | None) -> None:
    if value is not None and not value.strip():
        errors.add(field, "Reference cannot be blank")


def _decimal_places(value: Decimal) -> int:
    exponent = value.normalize().as_tuple().exponent
    return -exponent if isinstance(exponent, int) and exponent < 0 else 0
