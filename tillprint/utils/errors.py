"""
Error taxonomy and HTTP error responses for tillprint.

Every error carries a message, an HTTP status, a machine-readable code and a
details dict, and serializes to::

    {
        "status": "error",
        "message": "No printer connected",
        "error_code": "PRINTER_NOT_CONNECTED",
        "details": {},
        "timestamp": "2026-10-17T21:30:00"
    }

Successful API payloads are wrapped as ``{"status": "success", "data": ...}``.

Where each error stops:
    - ProbeTimeoutError / ProbeUnreachableError stay inside the prober and
      only shrink the discovery result.
    - PrinterConnectionError / PrintTransportError are logged by the
      connection manager and reported as a False result.
    - UnsupportedTransportError, PrinterNotConnectedError and ValidationError
      reach the caller.
"""

import re
from datetime import datetime
from typing import Any, Dict, Optional
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
import structlog

logger = structlog.get_logger()

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def _error_body(message: str, error_code: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "status": "error",
        "message": message,
        "error_code": error_code,
        "details": details or {},
        "timestamp": datetime.now().isoformat()
    }


# =============================================================================
# Base
# =============================================================================

class TillprintError(Exception):
    """
    Root of every error raised by tillprint.

    ``error_code`` defaults to the class name in UPPER_SNAKE_CASE without the
    ``Error`` suffix, e.g. ``PrinterNotConnectedError`` -> ``PRINTER_NOT_CONNECTED``.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = dict(details or {})
        self.error_code = error_code or self.default_error_code()

    @classmethod
    def default_error_code(cls) -> str:
        name = cls.__name__
        if name.endswith("Error"):
            name = name[:-len("Error")]
        return _CAMEL_BOUNDARY.sub("_", name).upper()

    def to_dict(self) -> Dict[str, Any]:
        """Response body for this error."""
        return _error_body(self.message, self.error_code, self.details)


def _merge(base: Dict[str, Any], extra: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    merged = dict(base)
    if extra:
        merged.update(extra)
    return merged


# =============================================================================
# Probing (absorbed by the prober)
# =============================================================================

class ProbeError(TillprintError):
    """One probe strategy failed against one host:port."""

    def __init__(self, host: str, port: int, reason: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"Probe of {host}:{port} failed: {reason}",
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            details=_merge({"host": host, "port": port, "reason": reason}, details)
        )


class ProbeTimeoutError(ProbeError):
    """The strategy did not settle in time."""

    def __init__(self, host: str, port: int, timeout: float):
        super().__init__(host, port, f"no answer within {timeout:.1f}s", {"timeout": timeout})


class ProbeUnreachableError(ProbeError):
    """Connection refused, or the host is not on the network."""

    def __init__(self, host: str, port: int, reason: str = "unreachable"):
        super().__init__(host, port, reason)


# =============================================================================
# Printer connection and transmission
# =============================================================================

class _PrinterScopedError(TillprintError):
    """Failure tied to one printer; details always hold printer_id and reason."""

    summary = "Printer error"
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, printer_id: str, reason: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"{self.summary}: {reason}",
            status_code=self.http_status,
            details=_merge({"printer_id": printer_id, "reason": reason}, details)
        )


class PrinterConnectionError(_PrinterScopedError):
    """The transport handshake failed."""

    summary = "Failed to connect to printer"
    http_status = status.HTTP_503_SERVICE_UNAVAILABLE


class PrintTransportError(_PrinterScopedError):
    """Sending the payload to the connected printer failed."""

    summary = "Print transmission failed"
    http_status = status.HTTP_502_BAD_GATEWAY


class UnsupportedTransportError(TillprintError):
    """The runtime lacks the requested transport, e.g. Bluetooth."""

    def __init__(self, transport: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"{transport.capitalize()} printing is not supported on this runtime",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=_merge({"transport": transport}, details)
        )


class PrinterNotConnectedError(TillprintError):
    """Print requested with no active connection."""

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__("No printer connected", status.HTTP_409_CONFLICT, details=details)


# =============================================================================
# Input and configuration
# =============================================================================

class ValidationError(TillprintError):
    """A caller-supplied value is unusable."""

    def __init__(self, field: str, error: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"Invalid value for '{field}': {error}",
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="VALIDATION_ERROR",
            details=_merge({"field": field, "error": error}, details)
        )


class ConfigurationError(TillprintError):
    """Settings could not be loaded."""

    def __init__(self, config_key: str, issue: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"Bad configuration for '{config_key}': {issue}",
            details=_merge({"config_key": config_key, "issue": issue}, details)
        )


# =============================================================================
# Responses and handlers
# =============================================================================

def success_response(data: Any, status_code: int = status.HTTP_200_OK,
                     message: Optional[str] = None) -> JSONResponse:
    """
    Wrap ``data`` in the success envelope.

    Pydantic models, and lists of them, are dumped in JSON mode.
    """
    if isinstance(data, list):
        data = [item.model_dump(mode="json") if hasattr(item, "model_dump") else item for item in data]
    elif hasattr(data, "model_dump"):
        data = data.model_dump(mode="json")

    body: Dict[str, Any] = {"status": "success", "data": data}
    if message:
        body["message"] = message
    return JSONResponse(status_code=status_code, content=body)


async def tillprint_exception_handler(request: Request, exc: TillprintError) -> JSONResponse:
    logger.error("Request failed", error_code=exc.error_code, status_code=exc.status_code,
                 message=exc.message, details=exc.details,
                 method=request.method, path=request.url.path)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    logger.warning("HTTP error", status_code=exc.status_code, detail=exc.detail,
                   method=request.method, path=request.url.path)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(str(exc.detail), f"HTTP_{exc.status_code}")
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler; internal details stay in the log."""
    logger.error("Unhandled exception", error_type=type(exc).__name__, error=str(exc),
                 method=request.method, path=request.url.path, exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("An unexpected error occurred. Please try again later.",
                            "INTERNAL_SERVER_ERROR")
    )
