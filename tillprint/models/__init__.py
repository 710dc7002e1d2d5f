"""Pydantic models for tillprint."""
from .printer import (
    ALL_PROBE_STRATEGIES,
    ConnectionState,
    PortCandidate,
    PrinterDevice,
    ProbeEvidence,
    ProbeStrategy,
    ScanResult,
    SweepStats,
    TransportCapabilities,
    TransportType,
    dedupe_by_host,
)
from .report import NightlyReport

__all__ = [
    'ALL_PROBE_STRATEGIES',
    'ConnectionState',
    'NightlyReport',
    'PortCandidate',
    'PrinterDevice',
    'ProbeEvidence',
    'ProbeStrategy',
    'ScanResult',
    'SweepStats',
    'TransportCapabilities',
    'TransportType',
    'dedupe_by_host',
]
