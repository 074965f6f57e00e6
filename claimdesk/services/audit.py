import json
from typing import Optional, Dict, Any, List
from sqlalchemy.orm import Session

from ..models.audit import AuditEvent
from ..models.invoice import Invoice
from .auth import Actor


class AuditService:
    @staticmethod
    def log_event(
        db: Session,
        invoice_id: int,
        action: str,
        actor: Optional[Actor] = None,
        from_status: Optional[str] = None,
        to_status: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AuditEvent:
        event = AuditEvent(
            invoice_id=invoice_id,
            action=action,
            from_status=from_status,
            to_status=to_status,
            actor_id=actor.id if actor else None,
            actor_name=actor.name if actor else None,
            metadata_json=json.dumps(metadata, default=str) if metadata else None,
        )
        db.add(event)
        return event

    @staticmethod
    def log_status_change(
        db: Session,
        invoice_id: int,
        action: str,
        from_status: Optional[str],
        to_status: str,
        actor: Optional[Actor] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AuditEvent:
        return AuditService.log_event(
            db=db,
            invoice_id=invoice_id,
            action=action,
            actor=actor,
            from_status=from_status,
            to_status=to_status,
            metadata=metadata,
        )

    @staticmethod
    def log_invoice_created(
        db: Session,
        invoice: Invoice,
        actor: Optional[Actor] = None,
    ) -> AuditEvent:
        return AuditService.log_event(
            db=db,
            invoice_id=invoice.id,
            action="INVOICE_CREATED",
            to_status=invoice.advance_claim_status,
            actor=actor,
            metadata={
                "invoice_number": invoice.invoice_number,
                "amount": invoice.amount,
                "paid": invoice.paid,
            },
        )

    @staticmethod
    def history(db: Session, invoice_id: int) -> List[AuditEvent]:
        return (
            db.query(AuditEvent)
            .filter(AuditEvent.invoice_id == invoice_id)
            .order_by(AuditEvent.created_at.asc(), AuditEvent.id.asc())
            .all()
        )
