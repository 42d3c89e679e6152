"""Domain-level exceptions.

All business rule violations are expressed as subclasses of CatalogError.
Each class carries an ``ErrorKind`` so the application layer can turn them
into tagged results without inspecting messages.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    DUPLICATE_SKU = "duplicate_sku"
    CURRENCY_MISMATCH = "currency_mismatch"
    CONCURRENCY = "concurrency"
    INVALID_STATE_TRANSITION = "invalid_state_transition"


class CatalogError(Exception):
    """Base class for all domain errors."""

    kind: ErrorKind = ErrorKind.VALIDATION


class ValidationError(CatalogError):
    """A business rule or invariant was violated.

    ``errors`` maps a field name to the messages raised for it, when the
    failure came from boundary validation of a whole command.
    """

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, errors: dict[str, list[str]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or {}


class InvalidValueError(ValidationError):
    """A value object was constructed from malformed raw input."""


class InvalidArgumentError(ValidationError):
    """A caller broke an argument contract (e.g. a non-positive page size)."""


class NotFoundError(CatalogError):
    """A requested entity does not exist."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, entity: str, key: object) -> None:
        super().__init__(f"{entity} '{key}' was not found")
        self.entity = entity
        self.key = key


class DuplicateSkuError(CatalogError):
    kind = ErrorKind.DUPLICATE_SKU

    def __init__(self, sku: str) -> None:
        super().__init__(f"A product with SKU '{sku}' already exists")
        self.sku = sku


class CurrencyMismatchError(CatalogError):
    kind = ErrorKind.CURRENCY_MISMATCH


class ConcurrencyError(CatalogError):
    """The stored version moved on since the aggregate was loaded.

    Callers should reload and retry; the core never retries on its own.
    """

    kind = ErrorKind.CONCURRENCY


class InvalidStateTransitionError(CatalogError):
    kind = ErrorKind.INVALID_STATE_TRANSITION


# --- Transaction protocol misuse (programmer errors, never user-facing) -------


class UnitOfWorkError(Exception):
    """Base class for misuse of the unit-of-work protocol."""


class NoActiveTransactionError(UnitOfWorkError):
    """Commit was requested while no transaction was open."""
