from .invoice import (
    InvoiceCreate,
    InvoiceResponse,
    InvoiceListResponse,
    PaymentUpdate,
    PaymentHistoryResponse,
    EmrLookupResponse,
    ClaimSummaryResponse,
)
from .claim import (
    ReleaseClaimRequest,
    CancelClaimRequest,
    CancelledInvoiceEdit,
    ChecklistItemResponse,
    ClaimTransitionsResponse,
    AuditEventResponse,
)

__all__ = [
    "InvoiceCreate",
    "InvoiceResponse",
    "InvoiceListResponse",
    "PaymentUpdate",
    "PaymentHistoryResponse",
    "EmrLookupResponse",
    "ClaimSummaryResponse",
    "ReleaseClaimRequest",
    "CancelClaimRequest",
    "CancelledInvoiceEdit",
    "ChecklistItemResponse",
    "ClaimTransitionsResponse",
    "AuditEventResponse",
]
