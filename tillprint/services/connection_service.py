"""
Connection manager for the single active receipt printer.

States: disconnected -> connecting -> connected -> disconnected.
Connect and disconnect are serialized by one lock; the last connect wins.
"""
import asyncio
from typing import Callable, Optional
import structlog

from tillprint.constants import ConnectionConstants, ReceiptConstants
from tillprint.models.printer import ConnectionState, PrinterDevice, TransportCapabilities, TransportType
from tillprint.printers.base import PrinterTransport
from tillprint.printers.bluetooth import BluetoothTransport
from tillprint.printers.network import NetworkTransport
from tillprint.printers.preview import PreviewTransport
from tillprint.utils.errors import (
    PrinterConnectionError,
    PrinterNotConnectedError,
    PrintTransportError,
    UnsupportedTransportError,
    ValidationError,
)

logger = structlog.get_logger()

TransportFactory = Callable[[PrinterDevice], PrinterTransport]


class ConnectionManager:
    """Own the one connected printer and its transport."""

    def __init__(
        self,
        capabilities: Optional[TransportCapabilities] = None,
        transport_factory: Optional[TransportFactory] = None,
        connect_timeout: float = ConnectionConstants.CONNECT_TIMEOUT_SECONDS,
        print_timeout: float = ConnectionConstants.PRINT_TIMEOUT_SECONDS,
        encoding: str = ReceiptConstants.DEFAULT_ENCODING,
        preview_dir: str = "data/previews",
    ):
        """
        Initialize connection manager.

        Args:
            capabilities: Runtime capabilities (Bluetooth support, preview-only)
            transport_factory: Builds the transport for a device (default by transport type)
            connect_timeout: Handshake budget in seconds
            print_timeout: Transmission budget in seconds
            encoding: Payload codec for raw transports
            preview_dir: Where preview documents are written in preview-only mode
        """
        self.capabilities = capabilities or TransportCapabilities()
        self.connect_timeout = connect_timeout
        self.print_timeout = print_timeout
        self.encoding = encoding
        self.preview_dir = preview_dir
        self._transport_factory = transport_factory or self._default_transport
        self._lock = asyncio.Lock()
        self._state = ConnectionState.DISCONNECTED
        self._device: Optional[PrinterDevice] = None
        self._transport: Optional[PrinterTransport] = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    def get_connected_printer(self) -> Optional[PrinterDevice]:
        """The connected device (a copy with ``connected=True``), or None."""
        if self._state != ConnectionState.CONNECTED:
            return None
        return self._device

    async def connect(self, device: PrinterDevice) -> bool:
        """
        Connect to ``device``, replacing any current connection.

        Raises:
            UnsupportedTransportError: Bluetooth requested on a runtime without Bluetooth
            ValidationError: Network device whose address is not host:port

        Returns:
            True when connected, False when the handshake failed
        """
        if device.transport_type == TransportType.BLUETOOTH and not self.capabilities.supports_bluetooth:
            raise UnsupportedTransportError(TransportType.BLUETOOTH.value, {"printer_id": device.id})
        if device.transport_type == TransportType.NETWORK and device.port is None:
            raise ValidationError("address", f"expected host:port, got '{device.address}'")

        async with self._lock:
            await self._close_current()
            self._state = ConnectionState.CONNECTING
            logger.info("Connecting to printer", printer_id=device.id, name=device.name,
                        transport=device.transport_type.value)

            transport: Optional[PrinterTransport] = None
            try:
                transport = self._transport_factory(device)
                connected = await asyncio.wait_for(transport.connect(), timeout=self.connect_timeout)
            except asyncio.CancelledError:
                logger.warning("Printer connection cancelled", printer_id=device.id)
                self._state = ConnectionState.DISCONNECTED
                if transport is not None:
                    await self._discard(transport, device)
                raise
            except asyncio.TimeoutError:
                logger.warning("Printer connection timed out", printer_id=device.id,
                               timeout=self.connect_timeout)
                self._state = ConnectionState.DISCONNECTED
                return False
            except PrinterConnectionError as e:
                logger.warning("Printer connection failed", printer_id=device.id, reason=e.details.get("reason"))
                self._state = ConnectionState.DISCONNECTED
                return False
            except Exception as e:
                logger.error("Unexpected error connecting to printer", printer_id=device.id,
                             error=str(e), error_type=type(e).__name__)
                self._state = ConnectionState.DISCONNECTED
                return False

            if not connected:
                self._state = ConnectionState.DISCONNECTED
                return False

            self._transport = transport
            self._device = device.model_copy(update={"connected": True})
            self._state = ConnectionState.CONNECTED
            logger.info("Printer connected", printer_id=device.id, name=device.name)
            return True

    async def disconnect(self) -> None:
        """Close the connection. Safe to call when already disconnected."""
        async with self._lock:
            await self._close_current()

    async def print(self, content: str) -> bool:
        """
        Send one receipt to the connected printer.

        Raises:
            PrinterNotConnectedError: No printer is connected

        Returns:
            True when delivered, False on any transport failure
        """
        transport = self._transport
        device = self._device
        if self._state != ConnectionState.CONNECTED or transport is None or device is None:
            raise PrinterNotConnectedError()

        logger.info("Printing receipt", printer_id=device.id, name=device.name, chars=len(content))
        try:
            await asyncio.wait_for(transport.send(content), timeout=self.print_timeout)
        except asyncio.TimeoutError:
            logger.warning("Print timed out", printer_id=device.id, timeout=self.print_timeout)
            return False
        except PrintTransportError as e:
            logger.warning("Print failed", printer_id=device.id, reason=e.details.get("reason"))
            return False
        except Exception as e:
            logger.error("Unexpected error while printing", printer_id=device.id,
                         error=str(e), error_type=type(e).__name__)
            return False
        return True

    async def _close_current(self) -> None:
        transport = self._transport
        device = self._device
        self._transport = None
        self._device = None
        self._state = ConnectionState.DISCONNECTED
        if transport is None:
            return
        try:
            await transport.disconnect()
        except Exception as e:
            logger.warning("Error closing printer transport", printer_id=device.id if device else None,
                           error=str(e))
        logger.info("Printer disconnected", printer_id=device.id if device else None)

    async def _discard(self, transport: PrinterTransport, device: PrinterDevice) -> None:
        try:
            await transport.disconnect()
        except Exception as e:
            logger.warning("Error closing half-open transport", printer_id=device.id, error=str(e))

    def _default_transport(self, device: PrinterDevice) -> PrinterTransport:
        if self.capabilities.preview_only:
            return PreviewTransport(device, preview_dir=self.preview_dir)
        if device.transport_type == TransportType.BLUETOOTH:
            return BluetoothTransport(device, connect_timeout=self.connect_timeout,
                                      send_timeout=self.print_timeout, encoding=self.encoding)
        return NetworkTransport(device, connect_timeout=self.connect_timeout,
                                send_timeout=self.print_timeout, encoding=self.encoding)
