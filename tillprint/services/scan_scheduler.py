"""
Batch scheduler for network sweeps.

Partitions the hosts of each subnet prefix into fixed-size batches, probes
each batch concurrently, waits for the whole batch to settle and pauses
before the next one. Batch settlement is the only backpressure in the sweep.
"""
import asyncio
import time
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple, TypeVar
import structlog

from tillprint.constants import DiscoveryConstants
from tillprint.models.printer import PortCandidate, PrinterDevice, SweepStats
from tillprint.utils.timing import timed_async_operation

logger = structlog.get_logger()

T = TypeVar("T")

HostProbe = Callable[[str, Sequence[PortCandidate]], Awaitable[Optional[PrinterDevice]]]


def partition_hosts(items: Sequence[T], batch_size: int) -> List[List[T]]:
    """Split ``items`` into consecutive batches of at most ``batch_size``."""
    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1, got {batch_size}")
    return [list(items[i:i + batch_size]) for i in range(0, len(items), batch_size)]


class BatchScheduler:
    """
    Run a host probe over every address of the configured prefixes.

    Peak outstanding host probes never exceed ``batch_size``; batch N+1 only
    starts after every probe of batch N has settled.
    """

    def __init__(
        self,
        probe: HostProbe,
        batch_size: int = DiscoveryConstants.BATCH_SIZE,
        batch_delay: float = DiscoveryConstants.BATCH_DELAY_MS / 1000.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize scheduler.

        Args:
            probe: Coroutine function ``probe(host, candidates)`` returning a device or None
            batch_size: Hosts probed concurrently per wave
            batch_delay: Pause between waves in seconds (none after the last wave)
            sleep: Awaitable sleep, replaceable in tests
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        self.probe = probe
        self.batch_size = batch_size
        self.batch_delay = batch_delay
        self._sleep = sleep

    async def sweep_prefix(
        self,
        prefix: str,
        suffixes: Sequence[int],
        candidates: Sequence[PortCandidate],
        stats: Optional[SweepStats] = None,
    ) -> List[PrinterDevice]:
        """
        Probe ``prefix.suffix`` for every suffix, batch by batch.

        Args:
            prefix: Subnet prefix, e.g. "192.168.1"
            suffixes: Host suffixes in priority order
            candidates: Ports in priority order
            stats: Counters updated in place

        Returns:
            Devices found, in batch order
        """
        stats = stats if stats is not None else SweepStats()
        hosts = [f"{prefix}.{suffix}" for suffix in suffixes]
        batches = partition_hosts(hosts, self.batch_size)
        found: List[PrinterDevice] = []

        for index, batch in enumerate(batches):
            results = await asyncio.gather(
                *(self.probe(host, candidates) for host in batch),
                return_exceptions=True
            )
            stats.batches += 1
            stats.hosts_probed += len(batch)

            for host, result in zip(batch, results):
                if isinstance(result, BaseException):
                    logger.debug("Host probe raised", host=host, error=str(result))
                elif result is not None:
                    found.append(result)

            if index < len(batches) - 1 and self.batch_delay > 0:
                await self._sleep(self.batch_delay)

        return found

    async def sweep(
        self,
        prefixes: Sequence[str],
        suffixes: Sequence[int],
        candidates: Sequence[PortCandidate],
    ) -> Tuple[List[PrinterDevice], SweepStats]:
        """Sweep every prefix in order. One sweep covers all prefixes."""
        stats = SweepStats(prefixes=len(prefixes))
        start = time.perf_counter()
        devices: List[PrinterDevice] = []

        for prefix in prefixes:
            async with timed_async_operation("Subnet sweep", log_level="debug", prefix=prefix) as timing:
                found = await self.sweep_prefix(prefix, suffixes, candidates, stats)
            if found:
                logger.info("Printers found on subnet", prefix=prefix, count=len(found),
                            duration_ms=timing["duration_ms"])
            devices.extend(found)

        stats.duration_ms = int((time.perf_counter() - start) * 1000)
        return devices, stats
