import asyncio
from typing import Any, Awaitable, Generic, List, Optional, TypeVar

from utils.logger_utils import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class Settled(Generic[T]):
    """Outcome of an awaitable that either produced a value or raised."""

    __slots__ = ("value", "error")

    def __init__(self, value: Optional[T] = None, error: Optional[BaseException] = None):
        self.value = value
        self.error = error

    @property
    def ok(self) -> bool:
        return self.error is None

    def __repr__(self) -> str:
        if self.ok:
            return f"Settled(value={self.value!r})"
        return f"Settled(error={self.error!r})"


async def settle(awaitable: Awaitable[T]) -> Settled[T]:
    """
    Awaits and captures the outcome instead of propagating it.
    Cancellation is not captured so the caller can still be cancelled.
    """
    try:
        return Settled(value=await awaitable)
    except asyncio.CancelledError:
        raise
    except Exception as e:
        return Settled(error=e)


async def gather_settled(*awaitables: Awaitable[Any]) -> List[Settled[Any]]:
    """
    Runs all awaitables concurrently and waits until every one has settled.
    Results keep the input order.
    """
    return await asyncio.gather(*(settle(awaitable) for awaitable in awaitables))

