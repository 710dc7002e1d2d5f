"""Receipt formatting endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from tillprint.models.report import NightlyReport
from tillprint.services.printer_service import PrinterService
from tillprint.services.receipt_service import format_for_print_preview
from tillprint.utils.dependencies import get_printer_service

router = APIRouter()


class FormatReceiptRequest(BaseModel):
    """Request model for formatting a nightly report."""
    report: NightlyReport
    user_name: str = Field(..., min_length=1)
    user_role: str = Field(..., min_length=1)
    fee_percent: Optional[float] = Field(None, ge=0, le=100)


class ReceiptContentResponse(BaseModel):
    content: str


class PreviewRequest(BaseModel):
    content: str


class PreviewResponse(BaseModel):
    markup: str


@router.post("/format", response_model=ReceiptContentResponse)
async def format_receipt(
    request: FormatReceiptRequest,
    printer_service: PrinterService = Depends(get_printer_service)
):
    """Format a nightly report as receipt text."""
    content = printer_service.format_receipt_content(
        request.report, request.user_name, request.user_role, fee_percent=request.fee_percent
    )
    return ReceiptContentResponse(content=content)


@router.post("/preview", response_model=PreviewResponse)
async def preview_receipt(request: PreviewRequest):
    """Mark receipt text up for the print preview."""
    return PreviewResponse(markup=format_for_print_preview(request.content))
