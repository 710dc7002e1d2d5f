"""Static network topology tables used by the printer sweep.

Everything here is immutable data plus small pure accessors. The sweep never
enumerates local interfaces; it walks the prefixes below in order.
"""

from dataclasses import dataclass
from typing import Dict, Final, List, Optional, Sequence, Tuple

from tillprint.constants import DiscoveryConstants
from tillprint.models.printer import PortCandidate


# =============================================================================
# Subnet prefixes
# =============================================================================

SUBNET_PREFIXES: Final[Tuple[str, ...]] = (
    # Home routers
    "192.168.1", "192.168.0", "192.168.2", "192.168.3", "192.168.4",
    "192.168.5", "192.168.10", "192.168.11", "192.168.20", "192.168.100",
    "192.168.50", "192.168.101", "192.168.200",
    # Office / corporate
    "10.0.0", "10.0.1", "10.1.1", "10.10.10", "10.1.10", "10.0.10",
    "10.0.50", "10.1.0", "10.2.0", "10.10.0", "10.20.0",
    "172.16.1", "172.16.0", "172.20.10", "172.16.10", "172.16.50",
    # Link-local
    "169.254.1", "169.254.2", "169.254.10", "169.254.100",
    # Printer factory defaults
    "192.168.192", "192.168.223", "172.16.254", "172.20.1",
    "192.168.254", "10.254.254", "172.31.1",
)
"""Ordered candidate /24 prefixes, most common first"""


# =============================================================================
# Vendor table
# =============================================================================

@dataclass(frozen=True)
class VendorProfile:
    """How one printer vendor shows itself on the network."""

    vendor: str
    model_family: str
    endpoints: Tuple[str, ...]
    ports: Tuple[int, ...]


VENDOR_TABLE: Final[Tuple[VendorProfile, ...]] = (
    VendorProfile(
        vendor="Star Micronics",
        model_family="Star Micronics TSP Printer",
        endpoints=("/StarWebPRNT/status", "/StarWebPRNT/info", "/cgi-bin/status", "/status.xml"),
        ports=tuple(range(3001, 3009)) + tuple(range(12000, 12003)),
    ),
    VendorProfile(
        vendor="Epson",
        model_family="Epson TM Series Printer",
        endpoints=("/PRESENTATION/ADVANCED", "/info.xml", "/cgi-bin/epos/service.cgi"),
        ports=tuple(range(10001, 10006)) + tuple(range(8001, 8006)) + tuple(range(11000, 11003)),
    ),
    VendorProfile(
        vendor="Citizen",
        model_family="Citizen CT Series Printer",
        endpoints=("/printer_status",),
        ports=tuple(range(4001, 4005)),
    ),
    VendorProfile(
        vendor="Bixolon",
        model_family="Bixolon SRP Series Printer",
        endpoints=("/WebPRNT/status",),
        ports=tuple(range(5001, 5005)),
    ),
)

GENERIC_ENDPOINTS: Final[Tuple[str, ...]] = ("/", "/status", "/info", "/printer")
"""Paths answered by most embedded printer web servers"""


# =============================================================================
# Port labels
# =============================================================================

def _label_ports(label: str, ports: Sequence[int]) -> Dict[int, str]:
    return {port: label for port in ports}


PORT_LABELS: Final[Dict[int, str]] = {
    **{port: f"{profile.vendor} Receipt Printer" for profile in VENDOR_TABLE for port in profile.ports},
    **_label_ports("Brother Receipt Printer", range(6001, 6004)),
    **_label_ports("Zebra Receipt Printer", range(6101, 6104)),
    **_label_ports("ESC/POS Thermal Printer", range(9100, 9106)),
    515: "LPR Receipt Printer",
    631: "IPP Receipt Printer",
    80: "HTTP Receipt Printer",
    443: "HTTPS Receipt Printer",
    8080: "Web Receipt Printer",
    8443: "Secure Web Receipt Printer",
    23: "Telnet Receipt Printer",
    9600: "Ethernet Receipt Printer",
    **_label_ports("Network Receipt Printer", (7001, 7002)),
    **_label_ports("Specialty Receipt Printer", range(13000, 13003)),
}
"""Display label per well-known printer port"""


# =============================================================================
# Ports
# =============================================================================

PRIORITY_PORTS: Final[Tuple[int, ...]] = (9100, 9101, 9102, 3001, 3002, 3003, 10001, 8001, 631, 515)
"""Ports answered by the large majority of receipt printers"""

ALL_PORTS: Final[Tuple[int, ...]] = (
    9100, 9101, 9102, 9103, 9104, 9105,
    3001, 3002, 3003, 3004, 3005, 3006, 3007, 3008,
    10001, 10002, 10003, 10004, 10005,
    8001, 8002, 8003, 8004, 8005,
    515, 631, 80, 443, 8080, 8443,
    4001, 4002, 4003, 4004,
    5001, 5002, 5003, 5004,
    6001, 6002, 6003,
    6101, 6102, 6103,
    23, 9600, 7001, 7002,
    11000, 11001, 11002,
    12000, 12001, 12002,
    13000, 13001, 13002,
)


# =============================================================================
# Host suffixes
# =============================================================================

_HOST_SUFFIX_PRIORITY: Final[Tuple[range, ...]] = (
    # Static printer assignments
    range(200, 210), range(100, 110), range(50, 60), range(10, 20), range(1, 10),
    # Common static blocks
    range(20, 26), range(30, 36), range(40, 46), range(60, 66),
    range(70, 76), range(80, 86), range(90, 96),
    # DHCP pools
    range(110, 200), range(210, 250),
    # End of range
    range(250, 255),
)

MAX_HOST_SUFFIX: Final[int] = DiscoveryConstants.MAX_HOST_SUFFIX


def _dedupe(items):
    seen = set()
    ordered = []
    for item in items:
        if item not in seen:
            seen.add(item)
            ordered.append(item)
    return ordered


def get_subnet_prefixes(overrides: Optional[Sequence[str]] = None) -> List[str]:
    """Ordered, deduplicated subnet prefixes; overrides replace the built-in table."""
    return _dedupe(overrides if overrides else SUBNET_PREFIXES)


def get_candidate_ports(overrides: Optional[Sequence[int]] = None) -> List[PortCandidate]:
    """
    Candidate ports in probe order.

    The priority ports come first, followed by the remaining ports of the
    full list. Each candidate carries the vendor most likely listening there.

    Args:
        overrides: Ports replacing the built-in order (deduplicated, order kept)

    Returns:
        List of PortCandidate
    """
    ports = _dedupe(overrides) if overrides else _dedupe(PRIORITY_PORTS + ALL_PORTS)
    return [PortCandidate(port=port, vendor_hint=vendor_for_port(port)) for port in ports]


def get_host_suffixes() -> List[int]:
    """Every host suffix 1-254 exactly once, likeliest printer addresses first."""
    ordered = [s for s in _dedupe(s for block in _HOST_SUFFIX_PRIORITY for s in block)
               if 1 <= s <= MAX_HOST_SUFFIX]
    listed = set(ordered)
    return ordered + [s for s in range(1, MAX_HOST_SUFFIX + 1) if s not in listed]


def vendor_for_port(port: int) -> Optional[str]:
    for profile in VENDOR_TABLE:
        if port in profile.ports:
            return profile.vendor
    return None


def label_for_port(port: int) -> Optional[str]:
    return PORT_LABELS.get(port)


def status_paths_for_port(port: int) -> List[str]:
    """Vendor endpoints (vendor hinted by the port first) followed by generic paths."""
    hinted = [p for p in VENDOR_TABLE if port in p.ports]
    others = [p for p in VENDOR_TABLE if port not in p.ports]
    return _dedupe(
        [path for profile in hinted + others for path in profile.endpoints] + list(GENERIC_ENDPOINTS)
    )
