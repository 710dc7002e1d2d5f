"""
Network (raw TCP) printer transport.
Streams encoded receipt bytes to the printer's socket.
"""
import asyncio
from typing import Optional
import structlog

from tillprint.constants import ConnectionConstants, ReceiptConstants
from tillprint.models.printer import PrinterDevice
from tillprint.printers.base import PrinterTransport
from tillprint.services.receipt_service import encode_payload
from tillprint.utils.errors import PrinterConnectionError, PrintTransportError

logger = structlog.get_logger()


class NetworkTransport(PrinterTransport):
    """Raw TCP transport for network receipt printers (port 9100 style)."""

    def __init__(
        self,
        device: PrinterDevice,
        connect_timeout: float = ConnectionConstants.CONNECT_TIMEOUT_SECONDS,
        send_timeout: float = ConnectionConstants.PRINT_TIMEOUT_SECONDS,
        encoding: str = ReceiptConstants.DEFAULT_ENCODING,
    ):
        super().__init__(device)
        if device.port is None:
            raise PrinterConnectionError(device.id, f"address '{device.address}' has no port")
        self.host = device.host
        self.port = device.port
        self.connect_timeout = connect_timeout
        self.send_timeout = send_timeout
        self.encoding = encoding
        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None

    async def connect(self) -> bool:
        """Open the TCP stream."""
        if self.is_connected:
            return True

        logger.info("Connecting to network printer", printer_id=self.device.id,
                    host=self.host, port=self.port)
        try:
            self._reader, self._writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port),
                timeout=self.connect_timeout
            )
        except asyncio.TimeoutError:
            raise PrinterConnectionError(self.device.id, f"no answer within {self.connect_timeout}s")
        except OSError as e:
            raise PrinterConnectionError(self.device.id, e.strerror or str(e))

        self.is_connected = True
        logger.info("Connected to network printer", printer_id=self.device.id)
        return True

    async def disconnect(self) -> None:
        """Close the TCP stream."""
        writer = self._writer
        self._reader = None
        self._writer = None
        self.is_connected = False
        if writer is None:
            return
        writer.close()
        try:
            await writer.wait_closed()
        except OSError as e:
            logger.debug("Error while closing printer socket", printer_id=self.device.id, error=str(e))

    async def send(self, content: str) -> None:
        """Write the encoded payload and wait until it is flushed."""
        if self._writer is None:
            raise PrintTransportError(self.device.id, "transport not connected")

        payload = encode_payload(content, self.encoding)
        try:
            self._writer.write(payload)
            await asyncio.wait_for(self._writer.drain(), timeout=self.send_timeout)
        except asyncio.TimeoutError:
            raise PrintTransportError(self.device.id, f"send timed out after {self.send_timeout}s")
        except OSError as e:
            raise PrintTransportError(self.device.id, e.strerror or str(e))

        logger.info("Receipt sent", printer_id=self.device.id, bytes=len(payload))
