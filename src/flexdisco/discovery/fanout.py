"""Concurrent per-container fan-out."""

import asyncio
import logging
from typing import AsyncIterator, Awaitable, Callable, Iterable, List, Optional, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def _guarded(unit: Callable[[T], Awaitable[R]], item: T) -> Optional[R]:
    try:
        return await unit(item)
    except Exception as e:
        logger.error(f"Discovery unit failed for {item!r}: {e}", exc_info=True)
        return None


async def fan_out(
    items: Iterable[T],
    unit: Callable[[T], Awaitable[R]],
) -> AsyncIterator[Optional[R]]:
    """Run one task per item and yield results in completion order.

    Exhausting the iterator is the join barrier. A unit that raises is
    logged and yields ``None``.
    """
    tasks = [asyncio.ensure_future(_guarded(unit, item)) for item in items]
    try:
        for next_done in asyncio.as_completed(tasks):
            yield await next_done
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()


async def fan_out_ordered(
    items: Iterable[T],
    unit: Callable[[T], Awaitable[R]],
) -> List[Optional[R]]:
    """Run one task per item and return results in item order."""
    return list(await asyncio.gather(*(_guarded(unit, item) for item in items)))
