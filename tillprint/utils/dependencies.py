"""FastAPI dependency providers."""

from fastapi import Request

from tillprint.services.printer_service import PrinterService


async def get_printer_service(request: Request) -> PrinterService:
    """Get printer service instance from app state."""
    return request.app.state.printer_service
