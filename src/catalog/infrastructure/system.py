"""Process-level implementations of the application ports."""

from __future__ import annotations

from datetime import datetime, timezone


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class StaticActor:
    """The same identity for every request, e.g. from configuration."""

    def __init__(self, user_id: str | None) -> None:
        self._user_id = user_id

    @property
    def user_id(self) -> str | None:
        return self._user_id
