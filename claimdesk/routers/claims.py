from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..checklist import REQUIRED_ITEMS
from ..database import get_db
from ..schemas.claim import (
    AuditEventResponse,
    CancelClaimRequest,
    CancelledInvoiceEdit,
    ChecklistItemResponse,
    ClaimTransitionsResponse,
    ReleaseClaimRequest,
)
from ..schemas.invoice import InvoiceListResponse, InvoiceResponse
from ..services.audit import AuditService
from ..services.auth import CLAIM_ROLES, Actor
from ..services.claims import ClaimLifecycleService
from ..services.invoices import InvoiceService
from ..state_machine import get_valid_transitions
from .auth import require_roles

router = APIRouter(prefix="/api/claims", tags=["claims"])


@router.get("/checklist", response_model=List[ChecklistItemResponse])
def get_release_checklist(current_actor: Actor = Depends(require_roles(CLAIM_ROLES))):
    return [ChecklistItemResponse(key=item.value, label=item.label) for item in REQUIRED_ITEMS]


@router.get("/cancelled", response_model=List[InvoiceListResponse])
def list_cancelled_claims(
    db: Session = Depends(get_db),
    current_actor: Actor = Depends(require_roles(CLAIM_ROLES)),
):
    return ClaimLifecycleService.list_cancelled(db)


@router.post("/{invoice_id}/release", response_model=InvoiceResponse)
def release_claim(
    invoice_id: int,
    request: ReleaseClaimRequest,
    db: Session = Depends(get_db),
    current_actor: Actor = Depends(require_roles(CLAIM_ROLES)),
):
    return ClaimLifecycleService.release_claim(db, invoice_id, request.checklist, current_actor)


@router.post("/{invoice_id}/cancel", response_model=InvoiceResponse)
def cancel_claim(
    invoice_id: int,
    request: CancelClaimRequest,
    db: Session = Depends(get_db),
    current_actor: Actor = Depends(require_roles(CLAIM_ROLES)),
):
    return ClaimLifecycleService.cancel_claim(db, invoice_id, current_actor, remark=request.remark)


@router.put("/{invoice_id}/cancelled", response_model=InvoiceResponse)
def edit_cancelled_invoice(
    invoice_id: int,
    edit: CancelledInvoiceEdit,
    db: Session = Depends(get_db),
    current_actor: Actor = Depends(require_roles(CLAIM_ROLES)),
):
    return ClaimLifecycleService.edit_cancelled_invoice(db, invoice_id, edit, current_actor)


@router.get("/{invoice_id}/transitions", response_model=ClaimTransitionsResponse)
def get_claim_transitions(
    invoice_id: int,
    db: Session = Depends(get_db),
    current_actor: Actor = Depends(require_roles(CLAIM_ROLES)),
):
    invoice = InvoiceService.get_invoice(db, invoice_id)
    valid = get_valid_transitions(invoice.claim_status)
    return ClaimTransitionsResponse(
        invoice_id=invoice.id,
        current_status=invoice.advance_claim_status,
        valid_transitions=sorted(s.value for s in valid),
    )


@router.get("/{invoice_id}/history", response_model=List[AuditEventResponse])
def get_claim_history(
    invoice_id: int,
    db: Session = Depends(get_db),
    current_actor: Actor = Depends(require_roles(CLAIM_ROLES)),
):
    InvoiceService.get_invoice(db, invoice_id)
    return AuditService.history(db, invoice_id)
