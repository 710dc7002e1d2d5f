"""
TTL cache for the last successful sweep.
"""
import time
from typing import Callable, Optional

from tillprint.constants import DiscoveryConstants
from tillprint.models.printer import ScanResult


class ScanCache:
    """
    Holds one ScanResult and the moment it was stored.

    An entry is served while it is younger than ``ttl_seconds`` and holds at
    least one device; an empty sweep is never served from cache.
    """

    def __init__(
        self,
        ttl_seconds: float = DiscoveryConstants.SCAN_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._result: Optional[ScanResult] = None
        self._stored_at: Optional[float] = None

    def get(self) -> Optional[ScanResult]:
        """Return the cached result if still fresh and non-empty."""
        if self._result is None or self._stored_at is None:
            return None
        if not self._result.devices:
            return None
        if self._clock() - self._stored_at >= self.ttl_seconds:
            return None
        return self._result

    def put(self, result: ScanResult) -> None:
        """Replace the cached entry whole."""
        self._result = result
        self._stored_at = self._clock()

    def clear(self) -> None:
        self._result = None
        self._stored_at = None

    @property
    def age_seconds(self) -> Optional[float]:
        if self._stored_at is None:
            return None
        return self._clock() - self._stored_at
