"""
Duration logging for sweeps and other long awaits.
"""

import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict
import structlog

logger = structlog.get_logger()


@asynccontextmanager
async def timed_async_operation(operation_name: str, log_level: str = "info",
                                **context: Any) -> AsyncIterator[Dict[str, float]]:
    """
    Log how long the wrapped block took, even when it raises.

    Yields a dict that holds ``duration_ms`` once the block has exited.

    Usage:
        async with timed_async_operation("Subnet sweep", prefix="192.168.1") as timing:
            await scheduler.sweep_prefix("192.168.1", suffixes, candidates)
        timing["duration_ms"]
    """
    timing: Dict[str, float] = {}
    started = time.perf_counter()
    try:
        yield timing
    finally:
        elapsed = time.perf_counter() - started
        timing["duration_ms"] = round(elapsed * 1000, 2)
        log = getattr(logger, log_level, logger.info)
        log(f"⏱️  {operation_name}", duration_ms=timing["duration_ms"],
            duration_seconds=round(elapsed, 2), **context)
