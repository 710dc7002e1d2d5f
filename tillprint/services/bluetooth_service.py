"""
Bluetooth printer enumeration.

Scans for nearby Bluetooth devices with bleak and keeps the ones whose
advertised name looks like a receipt printer.
"""
from typing import Any, Awaitable, Callable, List, Optional, Sequence
import structlog

from tillprint.constants import ConnectionConstants
from tillprint.models.printer import PrinterDevice, TransportCapabilities

logger = structlog.get_logger()

PRINTER_NAME_KEYWORDS = (
    "printer", "receipt", "pos", "star", "epson", "citizen", "bixolon",
    "tsp", "tm-", "rp-", "ct-", "srp-", "spp-",
)

Scanner = Callable[[float], Awaitable[Sequence[Any]]]


def looks_like_printer(name: Optional[str]) -> bool:
    """Case-insensitive keyword match on an advertised device name."""
    if not name:
        return False
    lowered = name.lower()
    return any(keyword in lowered for keyword in PRINTER_NAME_KEYWORDS)


async def bleak_scan(timeout: float) -> Sequence[Any]:
    """Default scanner: one bleak discovery pass."""
    from bleak import BleakScanner

    return await BleakScanner.discover(timeout=timeout)


class BluetoothEnumerator:
    """List Bluetooth receipt printers. Returns [] when Bluetooth is unavailable."""

    def __init__(
        self,
        capabilities: Optional[TransportCapabilities] = None,
        scan_timeout: float = ConnectionConstants.BLUETOOTH_SCAN_TIMEOUT_SECONDS,
        scanner: Optional[Scanner] = None,
    ):
        self.capabilities = capabilities or TransportCapabilities()
        self.scan_timeout = scan_timeout
        self._scanner = scanner or bleak_scan

    async def discover(self) -> List[PrinterDevice]:
        """
        Scan and filter by name.

        Never raises: scan failures are logged and produce an empty list.
        """
        if not self.capabilities.supports_bluetooth:
            logger.debug("Bluetooth not supported on this runtime, skipping scan")
            return []

        try:
            found = await self._scanner(self.scan_timeout)
        except Exception as e:
            logger.warning("Bluetooth scan failed", error=str(e), error_type=type(e).__name__)
            return []

        printers: List[PrinterDevice] = []
        seen = set()
        for device in found or []:
            name = getattr(device, "name", None)
            address = getattr(device, "address", None)
            if not address or address in seen or not looks_like_printer(name):
                continue
            seen.add(address)
            printers.append(PrinterDevice.bluetooth(address, name))

        logger.info("Bluetooth scan complete", scanned=len(found or []), printers=len(printers))
        return printers
