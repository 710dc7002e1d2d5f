"""
Preview transport for runtimes that can only show a print preview.
Renders the receipt as an HTML page and hands it to a sink.
"""
from datetime import datetime
from pathlib import Path
from typing import Awaitable, Callable, Optional
import aiofiles
import structlog

from tillprint.models.printer import PrinterDevice
from tillprint.printers.base import PrinterTransport
from tillprint.services.receipt_service import render_preview_document
from tillprint.utils.errors import PrinterConnectionError, PrintTransportError

logger = structlog.get_logger()

PreviewSink = Callable[[str, str], Awaitable[None]]


class PreviewTransport(PrinterTransport):
    """
    Write print previews instead of raw bytes.

    By default each receipt becomes ``receipt-<printer>-<timestamp>.html`` in
    ``preview_dir``; a custom ``sink(filename, document)`` may replace that.
    """

    def __init__(self, device: PrinterDevice, preview_dir: str = "data/previews",
                 sink: Optional[PreviewSink] = None):
        super().__init__(device)
        self.preview_dir = Path(preview_dir)
        self._sink = sink or self._write_file
        self.last_document: Optional[str] = None

    async def connect(self) -> bool:
        if self._sink == self._write_file:
            try:
                self.preview_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise PrinterConnectionError(self.device.id, f"preview directory unavailable: {e}")
        self.is_connected = True
        return True

    async def disconnect(self) -> None:
        self.is_connected = False

    async def send(self, content: str) -> None:
        document = render_preview_document(content)
        safe_id = "".join(c if c.isalnum() or c in "-_" else "_" for c in self.device.id)
        filename = f"receipt-{safe_id}-{datetime.now():%Y%m%d-%H%M%S-%f}.html"
        try:
            await self._sink(filename, document)
        except OSError as e:
            raise PrintTransportError(self.device.id, f"preview write failed: {e}")
        self.last_document = document
        logger.info("Receipt preview rendered", printer_id=self.device.id, preview=filename)

    async def _write_file(self, filename: str, document: str) -> None:
        async with aiofiles.open(self.preview_dir / filename, "w", encoding="utf-8") as f:
            await f.write(document)
