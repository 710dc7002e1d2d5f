"""
Printer transports for tillprint.
"""
from .base import PrinterTransport
from .bluetooth import BluetoothTransport
from .network import NetworkTransport
from .preview import PreviewTransport

__all__ = ['PrinterTransport', 'NetworkTransport', 'BluetoothTransport', 'PreviewTransport']
