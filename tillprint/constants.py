"""
Application-wide constants for tillprint.

This module centralizes the magic numbers used by discovery, probing,
connection handling and receipt encoding.

Constants are organized into logical groups using classes as namespaces.
"""


class DiscoveryConstants:
    """
    Network sweep configuration constants.

    Controls batch sizing, pacing between batches and result caching.
    """

    BATCH_SIZE: int = 20
    """Number of hosts probed concurrently in one batch wave"""

    BATCH_DELAY_MS: int = 100
    """Pause between two batch waves (milliseconds)"""

    SCAN_CACHE_TTL_SECONDS: float = 30.0
    """How long a successful sweep is served from cache"""

    MAX_HOST_SUFFIX: int = 254
    """Highest host suffix scanned in a /24 prefix"""


class ProbeConstants:
    """
    Per-strategy probe timeouts and probe HTTP behavior.
    """

    HANDSHAKE_TIMEOUT_SECONDS: float = 4.0
    """Timeout for the protocol handshake strategy"""

    ENDPOINT_TIMEOUT_SECONDS: float = 4.0
    """Timeout for the status/info endpoint strategy (all paths together)"""

    RAW_CONNECT_TIMEOUT_SECONDS: float = 2.0
    """Timeout for the raw TCP connect strategy"""

    MIN_TIMEOUT_SECONDS: float = 0.5
    """Lower bound accepted for any probe timeout setting"""

    MAX_TIMEOUT_SECONDS: float = 10.0
    """Upper bound accepted for any probe timeout setting"""

    PRESENT_STATUS_CODES: frozenset = frozenset({401, 403})
    """Non-2xx statuses that still prove a status endpoint exists"""


class ConnectionConstants:
    """
    Printer connection and transmission constants.
    """

    CONNECT_TIMEOUT_SECONDS: float = 5.0
    """Timeout for a transport handshake"""

    PRINT_TIMEOUT_SECONDS: float = 15.0
    """Timeout for one payload transmission"""

    BLUETOOTH_SCAN_TIMEOUT_SECONDS: float = 5.0
    """Duration of one Bluetooth scan"""

    BLUETOOTH_CHUNK_SIZE_BYTES: int = 180
    """Largest GATT write issued to a Bluetooth printer"""


class ReceiptConstants:
    """
    Receipt layout constants.
    """

    SECTION_RULE: str = "=" * 32
    """Separator printed between receipt sections"""

    FEED_LINES: int = 4
    """Blank lines appended to a raw payload so the tear bar clears the text"""

    DEFAULT_ENCODING: str = "utf-8"
    """Codec used to turn receipt text into printer bytes"""


class ServerConstants:
    """
    HTTP server constants.
    """

    DEFAULT_API_HOST: str = "0.0.0.0"
    """Default bind address"""

    DEFAULT_API_PORT: int = 8000
    """Default API port"""

    API_PREFIX: str = "/api/v1"
    """Prefix for all versioned endpoints"""
