"""Network topology tables for tillprint.

This module contains the static subnet, port and vendor tables the printer
sweep walks, with small accessors over them.
"""

from .topology import (
    GENERIC_ENDPOINTS,
    PORT_LABELS,
    VENDOR_TABLE,
    VendorProfile,
    get_candidate_ports,
    get_host_suffixes,
    get_subnet_prefixes,
    label_for_port,
    status_paths_for_port,
    vendor_for_port,
)

__all__ = [
    "GENERIC_ENDPOINTS",
    "PORT_LABELS",
    "VENDOR_TABLE",
    "VendorProfile",
    "get_candidate_ports",
    "get_host_suffixes",
    "get_subnet_prefixes",
    "label_for_port",
    "status_paths_for_port",
    "vendor_for_port",
]
