"""
Printer discovery service.

Combines the network sweep (topology tables, batch scheduler, prober) with
Bluetooth enumeration, deduplicates by host and caches the result for a
short TTL. Concurrent callers share one in-flight sweep.
"""
import asyncio
import time
from typing import List, Optional, Sequence
import structlog

from tillprint.config.topology import get_candidate_ports, get_host_suffixes, get_subnet_prefixes
from tillprint.models.printer import PortCandidate, PrinterDevice, ScanResult, SweepStats
from tillprint.services.bluetooth_service import BluetoothEnumerator
from tillprint.services.probe_service import Prober
from tillprint.services.scan_cache import ScanCache
from tillprint.services.scan_scheduler import BatchScheduler

logger = structlog.get_logger()


class DiscoveryService:
    """Service for discovering receipt printers on the local network and over Bluetooth."""

    def __init__(
        self,
        scheduler: BatchScheduler,
        cache: Optional[ScanCache] = None,
        bluetooth: Optional[BluetoothEnumerator] = None,
        prefixes: Optional[Sequence[str]] = None,
        suffixes: Optional[Sequence[int]] = None,
        candidates: Optional[Sequence[PortCandidate]] = None,
        prober: Optional[Prober] = None,
    ):
        """
        Initialize discovery service.

        Args:
            scheduler: Batch scheduler wrapping the per-host probe
            cache: TTL cache of the last successful sweep
            bluetooth: Bluetooth enumerator; None disables Bluetooth discovery
            prefixes: Subnet prefixes to sweep (default topology table)
            suffixes: Host suffixes per prefix (default 1-254 in priority order)
            candidates: Ports in priority order (default topology table)
            prober: Prober behind the scheduler, read for probe counts
        """
        self.scheduler = scheduler
        self.cache = cache or ScanCache()
        self.bluetooth = bluetooth
        self.prefixes = list(prefixes) if prefixes else get_subnet_prefixes()
        self.suffixes = list(suffixes) if suffixes else get_host_suffixes()
        self.candidates = list(candidates) if candidates else get_candidate_ports()
        self.prober = prober
        self._lock = asyncio.Lock()
        self._inflight: Optional["asyncio.Task[ScanResult]"] = None
        self.last_result: Optional[ScanResult] = None

    @classmethod
    def from_settings(cls, settings, bluetooth: Optional[BluetoothEnumerator] = None) -> "DiscoveryService":
        """Wire a discovery service from TillprintSettings."""
        capabilities = settings.capabilities()
        prober = Prober(
            capabilities=capabilities,
            handshake_timeout=settings.handshake_timeout,
            endpoint_timeout=settings.endpoint_timeout,
            raw_connect_timeout=settings.raw_connect_timeout,
        )
        scheduler = BatchScheduler(
            prober.probe_host,
            batch_size=settings.discovery_batch_size,
            batch_delay=settings.batch_delay_seconds,
        )
        if bluetooth is None:
            bluetooth = BluetoothEnumerator(capabilities, scan_timeout=settings.bluetooth_scan_timeout)
        return cls(
            scheduler,
            cache=ScanCache(ttl_seconds=settings.scan_cache_ttl_seconds),
            bluetooth=bluetooth,
            prefixes=get_subnet_prefixes(settings.subnet_prefix_list),
            candidates=get_candidate_ports(settings.scan_port_list),
            prober=prober,
        )

    async def discover_printers(self) -> List[PrinterDevice]:
        """
        Discover printers, serving a fresh non-empty cached sweep when available.

        A call arriving while a sweep is in flight awaits that sweep instead
        of starting another one. Never raises.

        Returns:
            Devices with unique hosts, first match per host first
        """
        try:
            result = await self.scan()
            return list(result.devices)
        except Exception as e:
            logger.error("Printer discovery failed", error=str(e), error_type=type(e).__name__)
            return []

    async def scan(self) -> ScanResult:
        """Cached or fresh ScanResult; shares the in-flight sweep."""
        async with self._lock:
            cached = self.cache.get()
            if cached is not None:
                logger.debug("Serving cached printer scan", devices=len(cached.devices),
                             age_seconds=round(self.cache.age_seconds or 0.0, 1))
                return cached

            if self._inflight is None or self._inflight.done():
                self._inflight = asyncio.ensure_future(self._sweep())
            task = self._inflight

        return await asyncio.shield(task)

    def clear_cache(self) -> None:
        """Force the next discovery call to sweep."""
        self.cache.clear()
        logger.info("Printer scan cache cleared")

    async def _sweep(self) -> ScanResult:
        logger.info("Starting printer sweep", prefixes=len(self.prefixes),
                    hosts_per_prefix=len(self.suffixes), ports=len(self.candidates))
        start_time = time.perf_counter()
        probes_before = self.prober.probes_issued if self.prober else 0

        network_task = self.scheduler.sweep(self.prefixes, self.suffixes, self.candidates)
        tasks = [network_task]
        if self.bluetooth is not None:
            tasks.append(self.bluetooth.discover())

        results = await asyncio.gather(*tasks, return_exceptions=True)

        devices: List[PrinterDevice] = []
        stats = SweepStats(prefixes=len(self.prefixes))
        network_result = results[0]
        if isinstance(network_result, BaseException):
            logger.error("Network sweep failed", error=str(network_result))
        else:
            network_devices, stats = network_result
            devices.extend(network_devices)

        if len(results) > 1:
            bluetooth_result = results[1]
            if isinstance(bluetooth_result, BaseException):
                logger.error("Bluetooth enumeration failed", error=str(bluetooth_result))
            else:
                devices.extend(bluetooth_result)

        stats.duration_ms = int((time.perf_counter() - start_time) * 1000)
        if self.prober is not None:
            stats.probes_issued = self.prober.probes_issued - probes_before
        result = ScanResult.from_devices(devices, stats)
        self.cache.put(result)
        self.last_result = result

        logger.info("Printer sweep complete", devices=len(result.devices),
                    batches=stats.batches, hosts_probed=stats.hosts_probed,
                    duration_ms=stats.duration_ms)
        return result
