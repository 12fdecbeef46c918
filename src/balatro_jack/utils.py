"""Small async helpers for front ends."""

import asyncio
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

T = TypeVar("T")


async def staggered(items: Iterable[T], callback: Callable[[T], Any], delay: float = 0.0) -> None:
    """Call ``callback`` on each item, waiting ``delay`` seconds before each call.

    Returns once the last item has been handed to the callback. Used to
    animate cards one after another (dealing, scoring popups).

    Example:
        asyncio.run(staggered(cards, ui.create_card_visual, delay=0.1))
    """
    for item in items:
        await asyncio.sleep(delay)
        callback(item)
