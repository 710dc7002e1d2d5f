"""
Async helpers shared by the probe and connection layers.
"""

import asyncio
from typing import Awaitable, TypeVar

T = TypeVar("T")


async def race_with_timeout(awaitable: Awaitable[T], timeout: float, fallback: T) -> T:
    """
    Await ``awaitable`` for at most ``timeout`` seconds.

    The single timeout path of the package: when the deadline passes the
    pending work is cancelled and ``fallback`` is returned. Exceptions raised
    by the awaitable itself propagate unchanged.

    Args:
        awaitable: Coroutine or future to wait for
        timeout: Deadline in seconds
        fallback: Value returned when the deadline passes

    Returns:
        The awaitable's result, or ``fallback`` on timeout

    Example:
        >>> reachable = await race_with_timeout(open_socket(), 2.0, False)
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError:
        return fallback
