"""Health check endpoint."""

from datetime import datetime

from fastapi import APIRouter, Depends

from tillprint import __version__
from tillprint.services.printer_service import PrinterService
from tillprint.utils.dependencies import get_printer_service

router = APIRouter()


@router.get("/health")
async def health_check(printer_service: PrinterService = Depends(get_printer_service)):
    """Report service liveness and the current printer connection state."""
    capabilities = printer_service.connection.capabilities
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.now().isoformat(),
        "connection_state": printer_service.connection.state.value,
        "supports_bluetooth": capabilities.supports_bluetooth,
        "preview_only": capabilities.preview_only,
    }
