"""Capabilities the core consumes from the outside world.

They are handed to the unit of work and handlers explicitly, per request;
nothing here is looked up from global state.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        """Current time, timezone-aware UTC."""


class ActorProvider(Protocol):
    @property
    def user_id(self) -> str | None:
        """Identifier of whoever issued the current request."""


class CategoryDirectory(Protocol):
    async def exists(self, category_id: str) -> bool:
        """True if the referenced category exists."""
