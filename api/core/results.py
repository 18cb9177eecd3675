"""
Explicit results for storage operations.

Repositories never raise database errors to their callers. They log the
failure and return a `StoreResult` whose `error` tells the caller *why* no
value came back, so the HTTP layer can answer 404, 409 or 503 accordingly.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, TypeVar

import asyncpg

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StoreErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"
    CONSTRAINT_VIOLATION = "constraint_violation"
    QUERY_FAILED = "query_failed"


@dataclass(frozen=True)
class StoreResult(Generic[T]):
    value: T | None = None
    error: StoreErrorKind | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "StoreResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: StoreErrorKind) -> "StoreResult[T]":
        return cls(error=kind)

    @classmethod
    def not_found(cls) -> "StoreResult[T]":
        return cls(error=StoreErrorKind.NOT_FOUND)

    def unwrap_or(self, default: T) -> T:
        return self.value if self.ok else default  # type: ignore[return-value]


_UNAVAILABLE_ERRORS: tuple[type[BaseException], ...] = (
    OSError,
    asyncio.TimeoutError,
    asyncpg.exceptions.PostgresConnectionError,
    asyncpg.exceptions.CannotConnectNowError,
    asyncpg.exceptions.TooManyConnectionsError,
)

# Errors a repository converts into a StoreResult. Anything else propagates.
STORE_ERRORS: tuple[type[BaseException], ...] = (
    asyncpg.PostgresError,
    asyncpg.exceptions.InterfaceError,
) + _UNAVAILABLE_ERRORS


def classify(exc: BaseException) -> StoreErrorKind:
    if isinstance(exc, asyncpg.exceptions.IntegrityConstraintViolationError):
        return StoreErrorKind.CONSTRAINT_VIOLATION
    if isinstance(exc, _UNAVAILABLE_ERRORS):
        return StoreErrorKind.UNAVAILABLE
    return StoreErrorKind.QUERY_FAILED


def guarded(event: str) -> Callable[
    [Callable[..., Awaitable[StoreResult[Any]]]],
    Callable[..., Awaitable[StoreResult[Any]]],
]:
    """
    Wrap a repository coroutine so database errors become failed results.

    The failure is logged as `<event>_failed kind=<kind>` with the traceback.
    """

    def decorator(fn: Callable[..., Awaitable[StoreResult[Any]]]):
        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> StoreResult[Any]:
            try:
                return await fn(*args, **kwargs)
            except STORE_ERRORS as exc:
                kind = classify(exc)
                logger.exception("%s_failed kind=%s", event, kind.value)
                return StoreResult.failure(kind)

        return wrapper

    return decorator
