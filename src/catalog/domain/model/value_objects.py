"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from catalog.domain.exceptions import CurrencyMismatchError, InvalidValueError

_CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")
_SKU_PATTERN = re.compile(r"^[A-Z0-9\-]+$")


@dataclass(frozen=True)
class Money:
    """Monetary amount with an ISO 4217 currency code.

    Uses Decimal to avoid floating-point rounding errors that would be
    unacceptable in financial calculations. Amounts are signed; whether a
    negative amount is acceptable is decided by whoever holds the Money.
    """

    amount: Decimal
    currency: str

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise InvalidValueError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if not self.amount.is_finite():
            raise InvalidValueError(f"Money amount must be finite, got {self.amount}")
        if not isinstance(self.currency, str) or not self.currency.strip():
            raise InvalidValueError("Currency code is required")
        currency = self.currency.upper()
        if not _CURRENCY_PATTERN.match(currency):
            raise InvalidValueError(
                f"Currency code must be a 3-letter ISO code, got {self.currency!r}"
            )
        object.__setattr__(self, "currency", currency)

    # --- Arithmetic helpers ---------------------------------------------------

    def add(self, other: Money) -> Money:
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def subtract(self, other: Money) -> Money:
        self._assert_same_currency(other)
        return Money(self.amount - other.amount, self.currency)

    def multiply(self, factor: int | Decimal) -> Money:
        return Money(self.amount * _to_decimal(factor), self.currency)

    __add__ = add
    __sub__ = subtract
    __mul__ = multiply
    __rmul__ = multiply

    def is_positive(self) -> bool:
        return self.amount > 0

    def is_negative(self) -> bool:
        return self.amount < 0

    def is_zero(self) -> bool:
        return self.amount == 0

    # --- Display --------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.amount:,.2f} {self.currency}"

    # --- Internal helpers -----------------------------------------------------

    def _assert_same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchError(
                f"Cannot combine {self.currency} with {other.currency}"
            )

    # --- Factories ------------------------------------------------------------

    @staticmethod
    def of(amount: str | float | int | Decimal, currency: str = "USD") -> Money:
        """Convenient factory that coerces to Decimal safely."""
        try:
            return Money(_to_decimal(amount), currency)
        except (InvalidOperation, ValueError, TypeError) as exc:
            raise InvalidValueError(f"Invalid money amount: {amount!r}") from exc

    @staticmethod
    def zero(currency: str) -> Money:
        return Money(Decimal("0"), currency)


@dataclass(frozen=True)
class Sku:
    """A Stock Keeping Unit.

    Raw input is trimmed and upper-cased before validation, so " abc-1 "
    and "ABC-1" are the same SKU.
    """

    value: str

    MIN_LENGTH = 3
    MAX_LENGTH = 50

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value.strip():
            raise InvalidValueError("SKU cannot be empty")
        value = self.value.strip().upper()
        if len(value) < self.MIN_LENGTH:
            raise InvalidValueError(f"SKU must be at least {self.MIN_LENGTH} characters")
        if len(value) > self.MAX_LENGTH:
            raise InvalidValueError(f"SKU cannot exceed {self.MAX_LENGTH} characters")
        if not _SKU_PATTERN.match(value):
            raise InvalidValueError(
                "SKU can only contain letters, numbers, and hyphens"
            )
        object.__setattr__(self, "value", value)

    def __str__(self) -> str:
        return self.value


def _to_decimal(value: str | float | int | Decimal) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("bool is not a numeric amount")
    return Decimal(str(value))
