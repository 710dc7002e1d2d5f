"""API routers."""
from .health import router as health_router
from .printers import router as printers_router
from .receipts import router as receipts_router

__all__ = ["health_router", "printers_router", "receipts_router"]
