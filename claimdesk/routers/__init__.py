from .invoices import router as invoices_router
from .claims import router as claims_router

__all__ = ["invoices_router", "claims_router"]
