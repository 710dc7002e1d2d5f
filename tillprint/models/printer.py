"""
Printer models for tillprint.
Pydantic models for discovered devices, scan results and runtime capabilities.
"""
from enum import Enum
from typing import Optional, List, Tuple
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class TransportType(str, Enum):
    """Connectivity medium of a printer."""
    NETWORK = "network"
    BLUETOOTH = "bluetooth"


class ConnectionState(str, Enum):
    """Connection manager states."""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class ProbeStrategy(str, Enum):
    """Detection strategies the prober can run against one address."""
    HANDSHAKE = "handshake"
    ENDPOINTS = "endpoints"
    RAW_CONNECT = "raw_connect"


ALL_PROBE_STRATEGIES: Tuple[ProbeStrategy, ...] = (
    ProbeStrategy.HANDSHAKE,
    ProbeStrategy.ENDPOINTS,
    ProbeStrategy.RAW_CONNECT,
)


class PrinterDevice(BaseModel):
    """A printer found by a network sweep or a Bluetooth scan."""
    id: str = Field(..., description="Stable device identifier")
    name: str = Field(..., description="Human-readable vendor/model label")
    transport_type: TransportType = Field(..., description="Network or Bluetooth")
    address: str = Field(..., description="host:port for network printers, MAC/UUID for Bluetooth")
    connected: bool = Field(False, description="Whether this device is the active connection")

    @property
    def host(self) -> str:
        """Address without the port; used for deduplication."""
        if self.transport_type == TransportType.NETWORK:
            return self.address.rsplit(":", 1)[0]
        return self.address

    @property
    def port(self) -> Optional[int]:
        """TCP port of a network printer; None for Bluetooth or a malformed address."""
        if self.transport_type != TransportType.NETWORK or ":" not in self.address:
            return None
        port = self.address.rsplit(":", 1)[1]
        if not port.isdigit():
            return None
        return int(port)

    @classmethod
    def network(cls, host: str, port: int, name: str) -> "PrinterDevice":
        """Build a network printer entry."""
        return cls(
            id=f"network-{host}-{port}",
            name=name,
            transport_type=TransportType.NETWORK,
            address=f"{host}:{port}",
        )

    @classmethod
    def bluetooth(cls, address: str, name: str) -> "PrinterDevice":
        """Build a Bluetooth printer entry."""
        return cls(
            id=f"bluetooth-{address}",
            name=name,
            transport_type=TransportType.BLUETOOTH,
            address=address,
        )


class PortCandidate(BaseModel):
    """A TCP port worth probing, with the vendor most likely listening there."""
    model_config = ConfigDict(frozen=True)

    port: int = Field(..., ge=1, le=65535)
    vendor_hint: Optional[str] = None


class TransportCapabilities(BaseModel):
    """What the runtime can do; injected instead of sniffing the platform."""
    model_config = ConfigDict(frozen=True)

    supports_bluetooth: bool = False
    probe_strategies: Tuple[ProbeStrategy, ...] = ALL_PROBE_STRATEGIES
    preview_only: bool = False


class ProbeEvidence(BaseModel):
    """What the probe strategies learned about one host:port."""
    reachable_by: List[ProbeStrategy] = Field(default_factory=list)
    matched_path: Optional[str] = None
    matched_status: Optional[int] = None

    @property
    def reachable(self) -> bool:
        return bool(self.reachable_by)


class SweepStats(BaseModel):
    """Bookkeeping for one sweep."""
    prefixes: int = 0
    hosts_probed: int = 0
    batches: int = 0
    probes_issued: int = 0
    duration_ms: int = 0


class ScanResult(BaseModel):
    """Devices produced by one sweep. Hosts are unique; the first hit per host wins."""
    devices: List[PrinterDevice] = Field(default_factory=list)
    discovered_at: datetime = Field(default_factory=datetime.now)
    stats: SweepStats = Field(default_factory=SweepStats)

    @classmethod
    def from_devices(cls, devices: List[PrinterDevice], stats: Optional[SweepStats] = None) -> "ScanResult":
        """Build a result, dropping every device whose host was already seen."""
        return cls(devices=dedupe_by_host(devices), stats=stats or SweepStats())


def dedupe_by_host(devices: List[PrinterDevice]) -> List[PrinterDevice]:
    """Keep the first device per host, preserving order."""
    seen = set()
    unique = []
    for device in devices:
        if device.host in seen:
            continue
        seen.add(device.host)
        unique.append(device)
    return unique
