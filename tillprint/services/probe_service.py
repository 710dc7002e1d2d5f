"""
Address prober for receipt printer discovery.

Tests one host:port with up to three strategies (HTTP handshake, status
endpoints, raw TCP connect) and classifies it reachable when any of them
sees evidence of a live listener. Probe failures never leave this module.
"""
import asyncio
from typing import List, NamedTuple, Optional, Sequence
import aiohttp
import structlog

from tillprint.config.topology import status_paths_for_port
from tillprint.constants import ProbeConstants
from tillprint.models.printer import (
    PortCandidate,
    PrinterDevice,
    ProbeEvidence,
    ProbeStrategy,
    TransportCapabilities,
)
from tillprint.services.identification_service import PrinterIdentifier
from tillprint.utils.async_helpers import race_with_timeout
from tillprint.utils.errors import ProbeError, ProbeTimeoutError, ProbeUnreachableError

logger = structlog.get_logger()

_TIMED_OUT = object()

HTTPS_PORTS = frozenset({443, 8443})
DUAL_SCHEME_PORTS = frozenset({631})


class ProbeHit(NamedTuple):
    """A strategy saw a listener. ``status`` is None when no HTTP status was parsed."""
    path: Optional[str] = None
    status: Optional[int] = None


class _ListenerDropped(ProbeError):
    """Something accepted the TCP connection and then broke the HTTP exchange."""


def schemes_for_port(port: int) -> List[str]:
    """HTTP schemes worth trying on ``port``, in order."""
    if port in HTTPS_PORTS:
        return ["https"]
    if port in DUAL_SCHEME_PORTS:
        return ["http", "https"]
    return ["http"]


class Prober:
    """
    Check whether a receipt printer listens on a host:port.

    Example:
        >>> prober = Prober(TransportCapabilities())
        >>> device = await prober.check_address("192.168.1.105", 9100)
        >>> device.name if device else None
        'ESC/POS Thermal Printer (192.168.1.105)'
    """

    def __init__(
        self,
        capabilities: Optional[TransportCapabilities] = None,
        identifier: Optional[PrinterIdentifier] = None,
        handshake_timeout: float = ProbeConstants.HANDSHAKE_TIMEOUT_SECONDS,
        endpoint_timeout: float = ProbeConstants.ENDPOINT_TIMEOUT_SECONDS,
        raw_connect_timeout: float = ProbeConstants.RAW_CONNECT_TIMEOUT_SECONDS,
    ):
        """
        Initialize prober.

        Args:
            capabilities: Enabled probe strategies come from here
            identifier: Labels reachable addresses (default PrinterIdentifier)
            handshake_timeout: Budget of the HTTP handshake strategy (seconds)
            endpoint_timeout: Budget of the status endpoint strategy (seconds)
            raw_connect_timeout: Budget of the raw TCP connect strategy (seconds)
        """
        self.capabilities = capabilities or TransportCapabilities()
        self.identifier = identifier or PrinterIdentifier()
        self.timeouts = {
            ProbeStrategy.HANDSHAKE: handshake_timeout,
            ProbeStrategy.ENDPOINTS: endpoint_timeout,
            ProbeStrategy.RAW_CONNECT: raw_connect_timeout,
        }
        self._runners = {
            ProbeStrategy.HANDSHAKE: self._handshake,
            ProbeStrategy.ENDPOINTS: self._endpoints,
            ProbeStrategy.RAW_CONNECT: self._raw_connect,
        }
        self.probes_issued = 0

    async def check_address(self, host: str, port: int) -> Optional[PrinterDevice]:
        """
        Probe one host:port.

        Returns:
            A labelled PrinterDevice when reachable, otherwise None. Never raises.
        """
        try:
            evidence = await self.gather_evidence(host, port)
        except Exception as e:
            logger.debug("Address check failed", host=host, port=port, error=str(e))
            return None

        if not evidence.reachable:
            return None

        name = self.identifier.identify(host, port, evidence)
        logger.info("Printer found", host=host, port=port, name=name,
                    strategies=[s.value for s in evidence.reachable_by])
        return PrinterDevice.network(host, port, name)

    async def probe_host(self, host: str, candidates: Sequence[PortCandidate]) -> Optional[PrinterDevice]:
        """Try ports in priority order; the first reachable port wins."""
        for candidate in candidates:
            device = await self.check_address(host, candidate.port)
            if device is not None:
                return device
        return None

    async def gather_evidence(self, host: str, port: int) -> ProbeEvidence:
        """Run every enabled strategy concurrently against host:port."""
        strategies = list(self.capabilities.probe_strategies)
        self.probes_issued += 1
        hits = await asyncio.gather(
            *(self._run_strategy(strategy, host, port) for strategy in strategies)
        )

        evidence = ProbeEvidence()
        for strategy, hit in zip(strategies, hits):
            if hit is None:
                continue
            evidence.reachable_by.append(strategy)
            if hit.path is not None and evidence.matched_path is None:
                evidence.matched_path = hit.path
                evidence.matched_status = hit.status
        return evidence

    async def _run_strategy(self, strategy: ProbeStrategy, host: str, port: int) -> Optional[ProbeHit]:
        timeout = self.timeouts[strategy]
        try:
            hit = await race_with_timeout(self._runners[strategy](host, port), timeout, _TIMED_OUT)
            if hit is _TIMED_OUT:
                raise ProbeTimeoutError(host, port, timeout)
            return hit
        except ProbeError as e:
            logger.debug("Probe strategy failed", strategy=strategy.value, host=host, port=port,
                         reason=e.details.get("reason"))
        except Exception as e:
            logger.debug("Probe strategy error", strategy=strategy.value, host=host, port=port,
                         error_type=type(e).__name__, error=str(e))
        return None

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------

    async def _handshake(self, host: str, port: int) -> ProbeHit:
        """HEAD / using the scheme(s) appropriate to the port."""
        last_error: Optional[ProbeError] = None
        for scheme in schemes_for_port(port):
            try:
                status = await self._head(f"{scheme}://{host}:{port}/", host, port)
                return ProbeHit(status=status)
            except _ListenerDropped:
                return ProbeHit()
            except ProbeError as e:
                last_error = e
        raise last_error

    async def _endpoints(self, host: str, port: int) -> ProbeHit:
        """
        HEAD the known status/info paths, vendor-hinted paths first.

        Stops at the first path answering 2xx/3xx/401/403. Any other status
        still proves a listener and is returned without a matched path.
        """
        scheme = schemes_for_port(port)[0]
        last_status: Optional[int] = None
        for path in status_paths_for_port(port):
            try:
                status = await self._head(f"{scheme}://{host}:{port}{path}", host, port)
            except _ListenerDropped:
                return ProbeHit()
            if 200 <= status < 400 or status in ProbeConstants.PRESENT_STATUS_CODES:
                return ProbeHit(path=path, status=status)
            last_status = status
        return ProbeHit(status=last_status)

    async def _raw_connect(self, host: str, port: int) -> ProbeHit:
        """Plain TCP connect."""
        try:
            _, writer = await asyncio.open_connection(host, port)
        except OSError as e:
            raise ProbeUnreachableError(host, port, e.strerror or type(e).__name__)
        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            pass
        return ProbeHit()

    async def _head(self, url: str, host: str, port: int) -> int:
        """
        Issue one HEAD request.

        Returns the HTTP status. A listener that accepted the connection and
        then dropped or garbled the exchange raises _ListenerDropped; refused
        or unreachable raises ProbeUnreachableError.
        """
        connector = aiohttp.TCPConnector(ssl=False, force_close=True)
        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.head(url, allow_redirects=False) as resp:
                    return resp.status
        except aiohttp.ClientSSLError:
            raise _ListenerDropped(host, port, "tls handshake rejected")
        except aiohttp.ClientConnectorError as e:
            raise ProbeUnreachableError(host, port, str(e.os_error) if e.os_error else "unreachable")
        except (aiohttp.ServerDisconnectedError, aiohttp.ClientOSError,
                aiohttp.ClientPayloadError, aiohttp.ClientResponseError):
            raise _ListenerDropped(host, port, "connection dropped by listener")
        except aiohttp.ClientError as e:
            raise ProbeUnreachableError(host, port, type(e).__name__)
