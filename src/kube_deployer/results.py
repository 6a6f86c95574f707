"""Tagged outcomes for concurrent remote calls."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    """Either the value of a remote call or the exception it raised."""

    value: T | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


async def capture(awaitable: Awaitable[T]) -> FetchResult[T]:
    """Await ``awaitable`` and wrap its outcome; cancellation still propagates."""
    try:
        return FetchResult(value=await awaitable)
    except Exception as e:
        return FetchResult(error=e)


async def gather_results(*awaitables: Awaitable[T]) -> list[FetchResult[T]]:
    """Run all awaitables concurrently and return one result per input, in input order."""
    return list(await asyncio.gather(*(capture(a) for a in awaitables)))
