"""
Configuration utilities and settings for tillprint.
Handles environment variables, settings validation and runtime capabilities.
"""

from typing import Optional, List, Tuple
from pydantic import Field, ValidationError as PydanticValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import structlog

from tillprint.constants import (
    ConnectionConstants,
    DiscoveryConstants,
    ProbeConstants,
    ReceiptConstants,
    ServerConstants,
)
from tillprint.models.printer import ProbeStrategy, TransportCapabilities
from tillprint.utils.errors import ConfigurationError

logger = structlog.get_logger()


class TillprintSettings(BaseSettings):
    """
    Application settings with validation.

    All settings are loaded from TILLPRINT_* environment variables or a .env
    file. Every value has a default so the library works unconfigured.
    """

    # Runtime
    environment: str = Field(
        default="production",
        description="Application environment: development, production or testing"
    )
    log_level: str = Field(
        default="info",
        description="Logging level: debug, info, warning, error, critical"
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional log file path in addition to stdout"
    )

    # Server
    api_host: str = Field(
        default=ServerConstants.DEFAULT_API_HOST,
        description="API server bind address."
    )
    api_port: int = Field(
        default=ServerConstants.DEFAULT_API_PORT,
        description="API server port. Must be between 1 and 65535.",
        ge=1,
        le=65535
    )
    cors_origins: str = Field(
        default="",
        description="Comma-separated list of allowed CORS origins."
    )

    # Discovery
    discovery_batch_size: int = Field(
        default=DiscoveryConstants.BATCH_SIZE,
        description="Hosts probed concurrently per batch wave.",
        ge=1,
        le=DiscoveryConstants.MAX_HOST_SUFFIX
    )
    discovery_batch_delay_ms: int = Field(
        default=DiscoveryConstants.BATCH_DELAY_MS,
        description="Pause between batch waves in milliseconds.",
        ge=0,
        le=10_000
    )
    scan_cache_ttl_seconds: float = Field(
        default=DiscoveryConstants.SCAN_CACHE_TTL_SECONDS,
        description="How long a successful sweep is served from cache.",
        ge=0.0,
        le=3600.0
    )
    subnet_prefixes: str = Field(
        default="",
        description="Comma-separated subnet prefixes (e.g. 192.168.1) replacing the built-in table."
    )
    scan_ports: str = Field(
        default="",
        description="Comma-separated TCP ports replacing the built-in port priority list."
    )
    probe_strategies: str = Field(
        default="handshake,endpoints,raw_connect",
        description="Comma-separated probe strategies: handshake, endpoints, raw_connect."
    )
    handshake_timeout: float = Field(
        default=ProbeConstants.HANDSHAKE_TIMEOUT_SECONDS,
        ge=ProbeConstants.MIN_TIMEOUT_SECONDS,
        le=ProbeConstants.MAX_TIMEOUT_SECONDS
    )
    endpoint_timeout: float = Field(
        default=ProbeConstants.ENDPOINT_TIMEOUT_SECONDS,
        ge=ProbeConstants.MIN_TIMEOUT_SECONDS,
        le=ProbeConstants.MAX_TIMEOUT_SECONDS
    )
    raw_connect_timeout: float = Field(
        default=ProbeConstants.RAW_CONNECT_TIMEOUT_SECONDS,
        ge=ProbeConstants.MIN_TIMEOUT_SECONDS,
        le=ProbeConstants.MAX_TIMEOUT_SECONDS
    )

    # Connection / printing
    connect_timeout: float = Field(
        default=ConnectionConstants.CONNECT_TIMEOUT_SECONDS,
        ge=0.5,
        le=60.0
    )
    print_timeout: float = Field(
        default=ConnectionConstants.PRINT_TIMEOUT_SECONDS,
        ge=0.5,
        le=120.0
    )
    supports_bluetooth: bool = Field(
        default=False,
        description="Whether this runtime has a usable Bluetooth adapter."
    )
    bluetooth_scan_timeout: float = Field(
        default=ConnectionConstants.BLUETOOTH_SCAN_TIMEOUT_SECONDS,
        ge=1.0,
        le=60.0
    )
    preview_only: bool = Field(
        default=False,
        description="Render an interactive print preview instead of sending raw bytes."
    )
    preview_dir: str = Field(
        default="data/previews",
        description="Directory receiving rendered print previews."
    )
    payload_encoding: str = Field(
        default=ReceiptConstants.DEFAULT_ENCODING,
        description="Codec used to encode receipt text for the printer."
    )

    @field_validator('environment')
    @classmethod
    def validate_environment(cls, v):
        """Validate environment setting."""
        valid_environments = ['development', 'production', 'testing']
        if v.lower() not in valid_environments:
            raise ValueError(
                f"Invalid environment '{v}'. Must be one of: {', '.join(valid_environments)}"
            )
        return v.lower()

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level setting."""
        valid_levels = ['debug', 'info', 'warning', 'error', 'critical']
        if v.lower() not in valid_levels:
            raise ValueError(
                f"Invalid log_level '{v}'. Must be one of: {', '.join(valid_levels)}"
            )
        return v.lower()

    @field_validator('subnet_prefixes')
    @classmethod
    def validate_subnet_prefixes(cls, v):
        """Each prefix must be three dotted octets."""
        for prefix in _split_csv(v):
            octets = prefix.split('.')
            if len(octets) != 3 or not all(o.isdigit() and 0 <= int(o) <= 255 for o in octets):
                raise ValueError(f"Invalid subnet prefix '{prefix}'. Expected three octets, e.g. 192.168.1")
        return v

    @field_validator('scan_ports')
    @classmethod
    def validate_scan_ports(cls, v):
        """Ports must be integers in 1-65535."""
        for port in _split_csv(v):
            if not port.isdigit() or not 1 <= int(port) <= 65535:
                raise ValueError(f"Invalid port '{port}'. Must be between 1 and 65535")
        return v

    @field_validator('probe_strategies')
    @classmethod
    def validate_probe_strategies(cls, v):
        """At least one known strategy must be enabled."""
        names = _split_csv(v.lower())
        valid = [s.value for s in ProbeStrategy]
        unknown = [name for name in names if name not in valid]
        if unknown or not names:
            raise ValueError(
                f"Invalid probe_strategies '{v}'. Use a comma-separated subset of: {', '.join(valid)}"
            )
        return v.lower()

    @field_validator('payload_encoding')
    @classmethod
    def validate_payload_encoding(cls, v):
        """The codec must be known to Python."""
        import codecs
        try:
            codecs.lookup(v)
        except LookupError:
            raise ValueError(f"Unknown payload encoding '{v}'")
        return v

    @property
    def cors_origins_list(self) -> List[str]:
        """Get CORS origins as list."""
        return _split_csv(self.cors_origins)

    @property
    def subnet_prefix_list(self) -> List[str]:
        """Configured subnet prefixes, empty when the built-in table applies."""
        return _split_csv(self.subnet_prefixes)

    @property
    def scan_port_list(self) -> List[int]:
        """Configured ports, empty when the built-in priority list applies."""
        return [int(port) for port in _split_csv(self.scan_ports)]

    @property
    def probe_strategy_list(self) -> Tuple[ProbeStrategy, ...]:
        """Enabled probe strategies, in declaration order."""
        return tuple(ProbeStrategy(name) for name in _split_csv(self.probe_strategies))

    @property
    def batch_delay_seconds(self) -> float:
        return self.discovery_batch_delay_ms / 1000.0

    def capabilities(self) -> TransportCapabilities:
        """Build the capability descriptor handed to the printer services."""
        return TransportCapabilities(
            supports_bluetooth=self.supports_bluetooth,
            probe_strategies=self.probe_strategy_list,
            preview_only=self.preview_only,
        )

    model_config = SettingsConfigDict(
        env_prefix="TILLPRINT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )


def _split_csv(value: str) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


_settings: Optional[TillprintSettings] = None


def load_settings(**overrides) -> TillprintSettings:
    """
    Build settings from the environment plus ``overrides``.

    Raises:
        ConfigurationError: A value failed validation; names the first bad key
    """
    try:
        return TillprintSettings(**overrides)
    except PydanticValidationError as e:
        first = e.errors()[0]
        key = ".".join(str(part) for part in first.get("loc", ())) or "settings"
        raise ConfigurationError(key, first.get("msg", str(e)), {"error_count": e.error_count()})


def get_settings() -> TillprintSettings:
    """Process-wide settings, loaded on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reload_settings() -> TillprintSettings:
    """Re-read the environment, e.g. after TILLPRINT_* variables changed."""
    global _settings
    _settings = load_settings()
    logger.info("Settings reloaded", environment=_settings.environment)
    return _settings
