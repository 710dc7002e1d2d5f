"""Shared fixtures and fakes for the tillprint test suite."""
import asyncio
from typing import List, Optional

import pytest

from tillprint.models.printer import PrinterDevice, TransportCapabilities
from tillprint.models.report import NightlyReport
from tillprint.printers.base import PrinterTransport
from tillprint.utils.errors import PrinterConnectionError, PrintTransportError


class FakeTransport(PrinterTransport):
    """In-memory transport recording what it was asked to do."""

    def __init__(self, device: PrinterDevice, connect_ok: bool = True, connect_delay: float = 0.0,
                 connect_error: Optional[Exception] = None, send_error: Optional[Exception] = None):
        super().__init__(device)
        self.connect_ok = connect_ok
        self.connect_delay = connect_delay
        self.connect_error = connect_error
        self.send_error = send_error
        self.sent: List[str] = []
        self.disconnect_calls = 0

    async def connect(self) -> bool:
        if self.connect_delay:
            await asyncio.sleep(self.connect_delay)
        if self.connect_error is not None:
            raise self.connect_error
        self.is_connected = self.connect_ok
        return self.connect_ok

    async def disconnect(self) -> None:
        self.disconnect_calls += 1
        self.is_connected = False

    async def send(self, content: str) -> None:
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(content)


class TransportRecorder:
    """Transport factory that keeps every transport it built."""

    def __init__(self, **transport_kwargs):
        self.transport_kwargs = transport_kwargs
        self.built: List[FakeTransport] = []

    def __call__(self, device: PrinterDevice) -> FakeTransport:
        transport = FakeTransport(device, **self.transport_kwargs)
        self.built.append(transport)
        return transport


@pytest.fixture
def network_device() -> PrinterDevice:
    return PrinterDevice.network("192.168.1.105", 9100, "ESC/POS Thermal Printer (192.168.1.105)")


@pytest.fixture
def other_network_device() -> PrinterDevice:
    return PrinterDevice.network("192.168.1.200", 3001, "Star Micronics Receipt Printer (192.168.1.200)")


@pytest.fixture
def bluetooth_device() -> PrinterDevice:
    return PrinterDevice.bluetooth("00:11:22:33:44:55", "TSP143IIIBI")


@pytest.fixture
def capabilities() -> TransportCapabilities:
    return TransportCapabilities()


@pytest.fixture
def bluetooth_capabilities() -> TransportCapabilities:
    return TransportCapabilities(supports_bluetooth=True)


@pytest.fixture
def connection_error(network_device) -> PrinterConnectionError:
    return PrinterConnectionError(network_device.id, "connection refused")


@pytest.fixture
def transport_error(network_device) -> PrintTransportError:
    return PrintTransportError(network_device.id, "broken pipe")


@pytest.fixture
def report_payload() -> dict:
    """Nightly report as the reporting module serializes it."""
    return {
        "date": "2026-10-17",
        "totalSales": 1234.5,
        "totalOrders": 42,
        "cashSales": 434.5,
        "cardSales": 800.0,
        "creditCardFees": 40.0,
        "departmentBreakdown": {
            "box-office": {"sales": 900.0, "orders": 30},
            "candy-counter": {"sales": 300.0, "orders": 10},
            "after-closing": {"sales": 34.5, "orders": 2},
        },
        "paymentBreakdown": {
            "boxOfficeCash": 300.0,
            "boxOfficeCard": 600.0,
            "candyCounterCash": 134.5,
            "candyCounterCard": 165.5,
        },
        "userBreakdown": [
            {"userId": "u1", "userName": "Dana", "sales": 1000.0, "orders": 35, "userRole": "manager"},
            {"userId": "u2", "userName": "Sam", "sales": 234.5, "orders": 7, "userRole": "usher"},
        ],
        "topProducts": [
            {"productId": "p1", "productName": "Popcorn", "quantitySold": 12, "revenue": 60.0},
        ],
    }


@pytest.fixture
def sample_report(report_payload) -> NightlyReport:
    return NightlyReport.model_validate(report_payload)
