"""
Printer service facade.

The library surface used by the back-office UI: discovery, the single
printer connection, printing and receipt formatting.
"""
from datetime import datetime
from typing import List, Optional
import structlog

from tillprint.models.printer import PrinterDevice, ScanResult
from tillprint.models.report import NightlyReport
from tillprint.services.connection_service import ConnectionManager
from tillprint.services.discovery_service import DiscoveryService
from tillprint.services.receipt_service import format_receipt_content

logger = structlog.get_logger()


class PrinterService:
    """
    Service for finding, connecting to and printing on receipt printers.

    Example:
        >>> service = PrinterService.from_settings(get_settings())
        >>> printers = await service.discover_printers()
        >>> if printers and await service.connect_to_printer(printers[0]):
        ...     await service.print_receipt(service.format_receipt_content(report, "Dana", "manager"))
    """

    def __init__(self, discovery: DiscoveryService, connection: ConnectionManager):
        self.discovery = discovery
        self.connection = connection
        self._initialized = False

    @classmethod
    def from_settings(cls, settings) -> "PrinterService":
        """Build the service graph from TillprintSettings."""
        capabilities = settings.capabilities()
        connection = ConnectionManager(
            capabilities=capabilities,
            connect_timeout=settings.connect_timeout,
            print_timeout=settings.print_timeout,
            encoding=settings.payload_encoding,
            preview_dir=settings.preview_dir,
        )
        return cls(DiscoveryService.from_settings(settings), connection)

    async def initialize(self) -> None:
        if self._initialized:
            logger.debug("PrinterService already initialized")
            return
        self._initialized = True
        logger.info("Printer service initialized",
                    supports_bluetooth=self.connection.capabilities.supports_bluetooth,
                    preview_only=self.connection.capabilities.preview_only)

    async def shutdown(self) -> None:
        """Close the active connection."""
        await self.connection.disconnect()
        self._initialized = False
        logger.info("Printer service shutdown")

    async def discover_printers(self) -> List[PrinterDevice]:
        """Printers reachable now; cached for a short TTL. Never raises."""
        return await self.discovery.discover_printers()

    def clear_discovery_cache(self) -> None:
        self.discovery.clear_cache()

    @property
    def last_scan(self) -> Optional[ScanResult]:
        return self.discovery.last_result

    async def connect_to_printer(self, device: PrinterDevice) -> bool:
        return await self.connection.connect(device)

    async def print_receipt(self, content: str) -> bool:
        return await self.connection.print(content)

    async def disconnect_printer(self) -> None:
        await self.connection.disconnect()

    def get_connected_printer(self) -> Optional[PrinterDevice]:
        return self.connection.get_connected_printer()

    def format_receipt_content(
        self,
        report: NightlyReport,
        user_name: str,
        user_role: str,
        *,
        generated_at: Optional[datetime] = None,
        fee_percent: Optional[float] = None,
    ) -> str:
        return format_receipt_content(report, user_name, user_role,
                                      generated_at=generated_at, fee_percent=fee_percent)
