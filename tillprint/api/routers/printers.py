"""Printer discovery, connection and printing endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from tillprint.models.printer import PrinterDevice
from tillprint.services.printer_service import PrinterService
from tillprint.utils.dependencies import get_printer_service
from tillprint.utils.errors import success_response

router = APIRouter()


class PrinterListResponse(BaseModel):
    """Response model for discovered printers."""
    printers: List[PrinterDevice]
    total_count: int


class ConnectResponse(BaseModel):
    """Result of a connect request."""
    connected: bool
    printer: Optional[PrinterDevice] = None


class ConnectedPrinterResponse(BaseModel):
    printer: Optional[PrinterDevice] = None


class PrintRequest(BaseModel):
    """Request model for printing receipt text."""
    content: str = Field(..., min_length=1, description="Receipt text to print")


class PrintResponse(BaseModel):
    printed: bool


@router.get("/discover", response_model=PrinterListResponse)
async def discover_printers(
    refresh: bool = Query(False, description="Ignore the cached sweep and scan again"),
    printer_service: PrinterService = Depends(get_printer_service)
):
    """
    Discover receipt printers on the local network and over Bluetooth.

    A successful sweep is cached for a short time; pass ``refresh=true`` to
    force a new one. A full sweep can take several minutes.
    """
    if refresh:
        printer_service.clear_discovery_cache()
    printers = await printer_service.discover_printers()
    return PrinterListResponse(printers=printers, total_count=len(printers))


@router.post("/connect", response_model=ConnectResponse)
async def connect_printer(
    device: PrinterDevice,
    printer_service: PrinterService = Depends(get_printer_service)
):
    """Connect to a printer, replacing any current connection."""
    connected = await printer_service.connect_to_printer(device)
    return ConnectResponse(connected=connected, printer=printer_service.get_connected_printer())


@router.post("/disconnect")
async def disconnect_printer(printer_service: PrinterService = Depends(get_printer_service)):
    """Disconnect the current printer (no-op when none is connected)."""
    await printer_service.disconnect_printer()
    return success_response({"status": "disconnected"})


@router.get("/connected", response_model=ConnectedPrinterResponse)
async def get_connected_printer(printer_service: PrinterService = Depends(get_printer_service)):
    """The currently connected printer, if any."""
    return ConnectedPrinterResponse(printer=printer_service.get_connected_printer())


@router.post("/print", response_model=PrintResponse)
async def print_receipt(
    request: PrintRequest,
    printer_service: PrinterService = Depends(get_printer_service)
):
    """Print receipt text on the connected printer. 409 when no printer is connected."""
    printed = await printer_service.print_receipt(request.content)
    return PrintResponse(printed=printed)
