"""Tests for the connection manager state machine."""
import asyncio

import pytest

from tests.conftest import TransportRecorder
from tillprint.models.printer import ConnectionState, PrinterDevice, TransportCapabilities
from tillprint.printers import BluetoothTransport, NetworkTransport, PreviewTransport
from tillprint.services.connection_service import ConnectionManager
from tillprint.utils.errors import PrinterNotConnectedError, UnsupportedTransportError, ValidationError


@pytest.mark.asyncio
async def test_connect_success(capabilities, network_device):
    factory = TransportRecorder()
    manager = ConnectionManager(capabilities, transport_factory=factory)

    assert await manager.connect(network_device) is True

    assert manager.state == ConnectionState.CONNECTED
    connected = manager.get_connected_printer()
    assert connected.id == network_device.id
    assert connected.connected is True
    assert network_device.connected is False


@pytest.mark.asyncio
async def test_handshake_refused_returns_false(capabilities, network_device):
    manager = ConnectionManager(capabilities, transport_factory=TransportRecorder(connect_ok=False))

    assert await manager.connect(network_device) is False
    assert manager.state == ConnectionState.DISCONNECTED
    assert manager.get_connected_printer() is None


@pytest.mark.asyncio
async def test_connection_error_returns_false(capabilities, network_device, connection_error):
    manager = ConnectionManager(capabilities,
                                transport_factory=TransportRecorder(connect_error=connection_error))

    assert await manager.connect(network_device) is False
    assert manager.state == ConnectionState.DISCONNECTED


@pytest.mark.asyncio
async def test_unexpected_error_returns_false(capabilities, network_device):
    manager = ConnectionManager(capabilities,
                                transport_factory=TransportRecorder(connect_error=RuntimeError("boom")))

    assert await manager.connect(network_device) is False


@pytest.mark.asyncio
async def test_connect_timeout_returns_false(capabilities, network_device):
    manager = ConnectionManager(capabilities, transport_factory=TransportRecorder(connect_delay=1.0),
                                connect_timeout=0.05)

    assert await manager.connect(network_device) is False
    assert manager.state == ConnectionState.DISCONNECTED


@pytest.mark.asyncio
async def test_cancelled_connect_leaves_manager_disconnected(capabilities, network_device,
                                                             other_network_device):
    factory = TransportRecorder()
    manager = ConnectionManager(capabilities, transport_factory=factory)
    await manager.connect(network_device)

    factory.transport_kwargs["connect_delay"] = 1.0
    task = asyncio.create_task(manager.connect(other_network_device))
    await asyncio.sleep(0.05)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    previous, pending = factory.built
    assert manager.state == ConnectionState.DISCONNECTED
    assert manager.get_connected_printer() is None
    assert previous.disconnect_calls == 1
    assert pending.disconnect_calls == 1

    factory.transport_kwargs["connect_delay"] = 0.0
    assert await manager.connect(network_device) is True


@pytest.mark.asyncio
async def test_reconnect_closes_previous_transport(capabilities, network_device, other_network_device):
    factory = TransportRecorder()
    manager = ConnectionManager(capabilities, transport_factory=factory)

    await manager.connect(network_device)
    await manager.connect(other_network_device)

    first, second = factory.built
    assert first.disconnect_calls == 1
    assert second.disconnect_calls == 0
    assert manager.get_connected_printer().id == other_network_device.id


@pytest.mark.asyncio
async def test_failed_reconnect_leaves_nothing_connected(capabilities, network_device, other_network_device):
    built = []

    def factory(device):
        transport = TransportRecorder(connect_ok=device.id == network_device.id)(device)
        built.append(transport)
        return transport

    manager = ConnectionManager(capabilities, transport_factory=factory)
    assert await manager.connect(network_device) is True
    assert await manager.connect(other_network_device) is False

    assert built[0].disconnect_calls == 1
    assert manager.get_connected_printer() is None


@pytest.mark.asyncio
async def test_last_connect_wins(capabilities, network_device, other_network_device):
    factory = TransportRecorder(connect_delay=0.02)
    manager = ConnectionManager(capabilities, transport_factory=factory)

    results = await asyncio.gather(
        manager.connect(network_device),
        manager.connect(other_network_device),
    )

    assert results == [True, True]
    assert manager.get_connected_printer().id == other_network_device.id
    assert factory.built[0].disconnect_calls == 1


@pytest.mark.asyncio
async def test_bluetooth_without_support_raises(capabilities, bluetooth_device):
    factory = TransportRecorder()
    manager = ConnectionManager(capabilities, transport_factory=factory)

    with pytest.raises(UnsupportedTransportError) as exc_info:
        await manager.connect(bluetooth_device)

    assert exc_info.value.error_code == "UNSUPPORTED_TRANSPORT"
    assert factory.built == []
    assert manager.state == ConnectionState.DISCONNECTED


@pytest.mark.asyncio
async def test_bluetooth_with_support_connects(bluetooth_capabilities, bluetooth_device):
    manager = ConnectionManager(bluetooth_capabilities, transport_factory=TransportRecorder())

    assert await manager.connect(bluetooth_device) is True


@pytest.mark.asyncio
async def test_print_without_connection_raises(capabilities):
    manager = ConnectionManager(capabilities, transport_factory=TransportRecorder())

    with pytest.raises(PrinterNotConnectedError) as exc_info:
        await manager.print("hello")

    assert exc_info.value.message == "No printer connected"


@pytest.mark.asyncio
async def test_print_delivers_content(capabilities, network_device):
    factory = TransportRecorder()
    manager = ConnectionManager(capabilities, transport_factory=factory)
    await manager.connect(network_device)

    assert await manager.print("NIGHTLY SALES REPORT") is True
    assert factory.built[0].sent == ["NIGHTLY SALES REPORT"]


@pytest.mark.asyncio
async def test_print_transport_error_returns_false(capabilities, network_device, transport_error):
    manager = ConnectionManager(capabilities, transport_factory=TransportRecorder(send_error=transport_error))
    await manager.connect(network_device)

    assert await manager.print("hello") is False
    assert manager.state == ConnectionState.CONNECTED


@pytest.mark.asyncio
async def test_print_unexpected_error_returns_false(capabilities, network_device):
    manager = ConnectionManager(capabilities,
                                transport_factory=TransportRecorder(send_error=ValueError("bad bytes")))
    await manager.connect(network_device)

    assert await manager.print("hello") is False


@pytest.mark.asyncio
async def test_print_after_disconnect_raises(capabilities, network_device):
    manager = ConnectionManager(capabilities, transport_factory=TransportRecorder())
    await manager.connect(network_device)
    await manager.disconnect()

    with pytest.raises(PrinterNotConnectedError):
        await manager.print("hello")


@pytest.mark.asyncio
async def test_disconnect_twice_is_safe(capabilities, network_device):
    factory = TransportRecorder()
    manager = ConnectionManager(capabilities, transport_factory=factory)
    await manager.connect(network_device)

    await manager.disconnect()
    await manager.disconnect()

    assert factory.built[0].disconnect_calls == 1
    assert manager.state == ConnectionState.DISCONNECTED


def test_default_transport_by_type(bluetooth_capabilities, network_device, bluetooth_device):
    manager = ConnectionManager(bluetooth_capabilities)

    assert isinstance(manager._default_transport(network_device), NetworkTransport)
    assert isinstance(manager._default_transport(bluetooth_device), BluetoothTransport)


def test_preview_only_uses_preview_transport(network_device, tmp_path):
    manager = ConnectionManager(TransportCapabilities(preview_only=True), preview_dir=str(tmp_path))

    assert isinstance(manager._default_transport(network_device), PreviewTransport)


@pytest.mark.asyncio
async def test_network_address_without_port_rejected(capabilities):
    factory = TransportRecorder()
    manager = ConnectionManager(capabilities, transport_factory=factory)
    device = PrinterDevice(id="network-192.168.1.105", name="Till printer",
                           transport_type="network", address="192.168.1.105")

    with pytest.raises(ValidationError) as exc_info:
        await manager.connect(device)

    assert exc_info.value.status_code == 400
    assert factory.built == []
