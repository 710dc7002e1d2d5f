"""
Printer identification service.

Turns probe evidence and a port number into the display label shown to
operators. Driven by the vendor table in ``tillprint.config.topology``.
"""
from typing import Optional, Sequence
import structlog

from tillprint.config.topology import VENDOR_TABLE, VendorProfile, label_for_port
from tillprint.constants import ProbeConstants
from tillprint.models.printer import ProbeEvidence

logger = structlog.get_logger()


class PrinterIdentifier:
    """Label a reachable host:port with the most specific vendor/model name available."""

    def __init__(self, vendor_table: Sequence[VendorProfile] = VENDOR_TABLE):
        self.vendor_table = tuple(vendor_table)

    def identify(self, host: str, port: int, evidence: Optional[ProbeEvidence] = None) -> str:
        """
        Build a display name for a printer.

        Precedence:
            1. A vendor endpoint answered: 2xx/3xx gives the model family,
               401/403 gives "{vendor} Receipt Printer".
            2. The port table label.
            3. "Network Receipt Printer (host:port)".

        Never raises; on any internal failure the port table decides.

        Args:
            host: Printer host address
            port: TCP port that answered
            evidence: What the probe strategies observed, if anything

        Returns:
            Display label, e.g. "Star Micronics TSP Printer (10.0.0.5)"
        """
        try:
            label = self._label_from_evidence(host, evidence)
            if label:
                return label
        except Exception as e:
            logger.debug("Vendor identification failed, using port table",
                         host=host, port=port, error=str(e))
        return self.label_from_port(host, port)

    def label_from_port(self, host: str, port: int) -> str:
        label = label_for_port(port)
        if label:
            return f"{label} ({host})"
        return f"Network Receipt Printer ({host}:{port})"

    def vendor_for_path(self, path: Optional[str]) -> Optional[VendorProfile]:
        """Vendor whose endpoint list contains ``path``."""
        if not path:
            return None
        for profile in self.vendor_table:
            if path in profile.endpoints:
                return profile
        return None

    def _label_from_evidence(self, host: str, evidence: Optional[ProbeEvidence]) -> Optional[str]:
        if evidence is None or evidence.matched_status is None:
            return None

        profile = self.vendor_for_path(evidence.matched_path)
        if profile is None:
            return None

        status = evidence.matched_status
        if 200 <= status < 400:
            return f"{profile.model_family} ({host})"
        if status in ProbeConstants.PRESENT_STATUS_CODES:
            return f"{profile.vendor} Receipt Printer ({host})"
        return None
