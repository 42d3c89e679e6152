"""Tagged results returned by every handler.

A handler never lets a CatalogError escape: it returns ``Success`` or a
``Failure`` tagged with the error kind, so callers branch on the kind
instead of catching exceptions. Programmer errors (e.g. unit-of-work
misuse) and storage outages still propagate as exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Generic, TypeVar, Union

from catalog.domain.exceptions import CatalogError, ErrorKind

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    ok = True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure:
    kind: ErrorKind
    message: str
    error: CatalogError

    ok = False

    @staticmethod
    def from_error(error: CatalogError) -> Failure:
        return Failure(kind=error.kind, message=str(error), error=error)

    def unwrap(self):
        raise self.error


Result = Union[Success[T], Failure]


async def capture(operation: Awaitable[T]) -> Result[T]:
    """Await *operation*, turning a CatalogError into a Failure."""
    try:
        return Success(await operation)
    except CatalogError as exc:
        return Failure.from_error(exc)
