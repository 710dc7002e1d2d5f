"""
Base transport classes for tillprint.
Provides the abstract interface every printer transport implements.
"""
from abc import ABC, abstractmethod

from tillprint.models.printer import PrinterDevice


class PrinterTransport(ABC):
    """
    Abstract interface for sending receipts to one printer.

    Implementations raise PrinterConnectionError from ``connect`` and
    PrintTransportError from ``send``; the connection manager turns both
    into a False result.
    """

    def __init__(self, device: PrinterDevice):
        self.device = device
        self.is_connected = False

    @abstractmethod
    async def connect(self) -> bool:
        """Open the transport (handshake)."""
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the transport. Must be safe to call twice."""
        pass

    @abstractmethod
    async def send(self, content: str) -> None:
        """Deliver one receipt's text."""
        pass

    async def __aenter__(self):
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.disconnect()

    def __repr__(self):
        return f"{self.__class__.__name__}(id='{self.device.id}', connected={self.is_connected})"
