from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.invoice import (
    ClaimSummaryResponse,
    EmrLookupResponse,
    InvoiceCreate,
    InvoiceListResponse,
    InvoiceResponse,
    PaymentUpdate,
)
from ..services.auth import ADMIN_ROLES, CLAIM_ROLES, INVOICING_ROLES, Actor
from ..services.invoices import InvoiceService
from .auth import require_roles

router = APIRouter(prefix="/api/invoices", tags=["invoices"])


@router.post("", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
def create_invoice(
    invoice_data: InvoiceCreate,
    db: Session = Depends(get_db),
    current_actor: Actor = Depends(require_roles(INVOICING_ROLES)),
):
    return InvoiceService.create_invoice(db, invoice_data, current_actor)


@router.get("", response_model=List[InvoiceListResponse])
def list_invoices(
    emr_number: Optional[str] = Query(None, alias="emrNumber"),
    invoice_number: Optional[str] = Query(None, alias="invoiceNumber"),
    name: Optional[str] = Query(None, description="Matches first or last name"),
    phone: Optional[str] = Query(None),
    claim_status: Optional[str] = Query(None, alias="claimStatus"),
    application_status: Optional[str] = Query(None, alias="applicationStatus"),
    category: Optional[str] = Query(None, description="'co-pay' or 'advance'"),
    date_from: Optional[date] = Query(None, alias="dateFrom"),
    date_to: Optional[date] = Query(None, alias="dateTo"),
    db: Session = Depends(get_db),
    current_actor: Actor = Depends(require_roles(CLAIM_ROLES)),
):
    return InvoiceService.list_invoices(
        db,
        emr_number=emr_number,
        invoice_number=invoice_number,
        name=name,
        phone=phone,
        claim_status=claim_status,
        application_status=application_status,
        category=category,
        date_from=date_from,
        date_to=date_to,
    )


@router.get("/summary", response_model=ClaimSummaryResponse)
def claim_summary(
    db: Session = Depends(get_db),
    current_actor: Actor = Depends(require_roles(ADMIN_ROLES)),
):
    return InvoiceService.claim_summary(db)


@router.get("/emr/{emr_number}", response_model=EmrLookupResponse)
def lookup_emr(
    emr_number: str,
    db: Session = Depends(get_db),
    current_actor: Actor = Depends(require_roles(INVOICING_ROLES)),
):
    invoice, count, total_advance = InvoiceService.lookup_by_emr(db, emr_number)
    return EmrLookupResponse(
        invoice=InvoiceResponse.model_validate(invoice),
        invoice_count=count,
        total_advance_amount=total_advance,
    )


@router.get("/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
    current_actor: Actor = Depends(require_roles(CLAIM_ROLES)),
):
    return InvoiceService.get_invoice(db, invoice_id)


@router.post("/{invoice_id}/payments", response_model=InvoiceResponse)
def record_payment(
    invoice_id: int,
    payment: PaymentUpdate,
    db: Session = Depends(get_db),
    current_actor: Actor = Depends(require_roles(INVOICING_ROLES)),
):
    return InvoiceService.record_payment(db, invoice_id, payment, current_actor)
