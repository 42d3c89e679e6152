"""Cross-cutting behaviour wrapped around every use case.

``use_case`` logs each handler call with its duration and outcome, and
escalates calls slower than ``SLOW_USE_CASE_MS`` to a warning.
"""

from __future__ import annotations

import time
from functools import wraps
from typing import Any, Awaitable, Callable, TypeVar

import structlog

from catalog.application.result import Failure

log = structlog.get_logger(__name__)

SLOW_USE_CASE_MS = 500

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def use_case(name: str) -> Callable[[F], F]:

    def decorator(func: F) -> F:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            bound = log.bind(use_case=name)
            bound.debug("use_case.started")
            started = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception:
                bound.exception(
                    "use_case.crashed", elapsed_ms=_elapsed_ms(started)
                )
                raise

            elapsed_ms = _elapsed_ms(started)
            if isinstance(result, Failure):
                bound.info(
                    "use_case.rejected",
                    kind=result.kind.value,
                    reason=result.message,
                    elapsed_ms=elapsed_ms,
                )
            else:
                bound.info("use_case.completed", elapsed_ms=elapsed_ms)
            if elapsed_ms > SLOW_USE_CASE_MS:
                bound.warning(
                    "use_case.slow", elapsed_ms=elapsed_ms, threshold_ms=SLOW_USE_CASE_MS
                )
            return result

        return wrapper  # type: ignore[return-value]

    return decorator


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)
