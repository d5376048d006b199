"""Async helpers used by the promotion pass."""
import asyncio
from typing import Awaitable, Callable, Iterable, TypeVar

T = TypeVar("T")


async def filter_async(items: Iterable[T], predicate: Callable[[T], Awaitable[bool]]) -> list[T]:
    """
    Keep the items for which the async predicate returns True.

    Predicates are evaluated concurrently; the result keeps input order.
    The first predicate exception propagates.
    """
    items = list(items)
    results = await asyncio.gather(*(predicate(item) for item in items))
    return [item for item, keep in zip(items, results) if keep]
