"""
Bluetooth printer transport.
Writes receipt bytes to the printer's first writable GATT characteristic via bleak.
"""
import asyncio
from typing import Any, Callable, Optional
from bleak import BleakClient
from bleak.exc import BleakError
import structlog

from tillprint.constants import ConnectionConstants, ReceiptConstants
from tillprint.models.printer import PrinterDevice
from tillprint.printers.base import PrinterTransport
from tillprint.services.receipt_service import encode_payload
from tillprint.utils.errors import PrinterConnectionError, PrintTransportError

logger = structlog.get_logger()

WRITE_PROPERTIES = ("write-without-response", "write")


class BluetoothTransport(PrinterTransport):
    """BLE transport for Bluetooth receipt printers."""

    def __init__(
        self,
        device: PrinterDevice,
        connect_timeout: float = ConnectionConstants.CONNECT_TIMEOUT_SECONDS,
        send_timeout: float = ConnectionConstants.PRINT_TIMEOUT_SECONDS,
        encoding: str = ReceiptConstants.DEFAULT_ENCODING,
        chunk_size: int = ConnectionConstants.BLUETOOTH_CHUNK_SIZE_BYTES,
        client_factory: Callable[..., Any] = BleakClient,
    ):
        super().__init__(device)
        self.connect_timeout = connect_timeout
        self.send_timeout = send_timeout
        self.encoding = encoding
        self.chunk_size = chunk_size
        self._client_factory = client_factory
        self._client: Optional[Any] = None
        self._characteristic: Optional[Any] = None

    async def connect(self) -> bool:
        """Connect and locate a writable characteristic."""
        if self.is_connected:
            return True

        logger.info("Connecting to Bluetooth printer", printer_id=self.device.id,
                    address=self.device.address)
        client = self._client_factory(self.device.address, timeout=self.connect_timeout)
        try:
            await asyncio.wait_for(client.connect(), timeout=self.connect_timeout)
            characteristic = self._find_writable(client)
        except asyncio.TimeoutError:
            await self._safe_disconnect(client)
            raise PrinterConnectionError(self.device.id, f"no answer within {self.connect_timeout}s")
        except (BleakError, OSError) as e:
            await self._safe_disconnect(client)
            raise PrinterConnectionError(self.device.id, str(e))

        if characteristic is None:
            await self._safe_disconnect(client)
            raise PrinterConnectionError(self.device.id, "no writable characteristic")

        self._client = client
        self._characteristic = characteristic
        self.is_connected = True
        logger.info("Connected to Bluetooth printer", printer_id=self.device.id,
                    characteristic=str(getattr(characteristic, "uuid", characteristic)))
        return True

    async def disconnect(self) -> None:
        client = self._client
        self._client = None
        self._characteristic = None
        self.is_connected = False
        if client is not None:
            await self._safe_disconnect(client)

    async def send(self, content: str) -> None:
        """Write the payload in chunks small enough for one GATT write."""
        if self._client is None or self._characteristic is None:
            raise PrintTransportError(self.device.id, "transport not connected")

        payload = encode_payload(content, self.encoding)
        with_response = "write-without-response" not in self._characteristic.properties
        try:
            for offset in range(0, len(payload), self.chunk_size):
                chunk = payload[offset:offset + self.chunk_size]
                await asyncio.wait_for(
                    self._client.write_gatt_char(self._characteristic, chunk, response=with_response),
                    timeout=self.send_timeout
                )
        except asyncio.TimeoutError:
            raise PrintTransportError(self.device.id, f"send timed out after {self.send_timeout}s")
        except (BleakError, OSError) as e:
            raise PrintTransportError(self.device.id, str(e))

        logger.info("Receipt sent", printer_id=self.device.id, bytes=len(payload))

    @staticmethod
    def _find_writable(client: Any) -> Optional[Any]:
        for service in client.services:
            for characteristic in service.characteristics:
                if any(prop in characteristic.properties for prop in WRITE_PROPERTIES):
                    return characteristic
        return None

    async def _safe_disconnect(self, client: Any) -> None:
        try:
            await client.disconnect()
        except (BleakError, OSError) as e:
            logger.debug("Error while disconnecting Bluetooth printer",
                         printer_id=self.device.id, error=str(e))
