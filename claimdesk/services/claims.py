import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.orm import Session

from ..checklist import REQUIRED_ITEMS
from ..database import commit_or_raise
from ..errors import (
    ChecklistIncompleteError,
    ConflictError,
    FieldIssue,
    InvalidStatusTransitionError,
    ValidationFailedError,
)
from ..models.invoice import AdvanceClaimStatus, Invoice, ServiceKind
from ..schemas.claim import CancelledInvoiceEdit
from ..state_machine import TransitionEvidence, plan_transition
from .audit import AuditService
from .auth import Actor
from .invoices import InvoiceService

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "first_name",
    "last_name",
    "email",
    "mobile_number",
    "referred_by",
    "service",
    "treatment",
    "package",
    "notes",
)

REQUIRED_EDIT_FIELDS = frozenset({"first_name", "mobile_number", "service"})

TRANSITION_ACTIONS = {
    AdvanceClaimStatus.RELEASED: "CLAIM_RELEASED",
    AdvanceClaimStatus.CANCELLED: "CLAIM_CANCELLED",
    AdvanceClaimStatus.PENDING: "CANCELLED_INVOICE_EDITED",
}


class ClaimLifecycleService:
    @staticmethod
    def transition(
        db: Session,
        invoice_id: int,
        target_status: AdvanceClaimStatus,
        actor: Actor,
        evidence: Optional[TransitionEvidence] = None,
        changes: Optional[Dict[str, Any]] = None,
    ) -> Invoice:
        """Move an invoice's advance claim to ``target_status``.

        This is the only code path that writes ``advance_claim_status``
        after creation. The status, its audit columns and any ``changes``
        are written by one UPDATE conditioned on the status that was read,
        so a concurrent transition on the same invoice makes this one fail
        with ``ConflictError`` instead of both succeeding.
        """
        invoice = InvoiceService.get_invoice(db, invoice_id)
        current = invoice.claim_status
        evidence = evidence or TransitionEvidence(actor_id=actor.id, actor_name=actor.name)

        try:
            planned = plan_transition(current, target_status, evidence)
        except ChecklistIncompleteError as e:
            logger.warning(
                "Release rejected for invoice %s: missing %s",
                invoice.id, ", ".join(item.value for item in e.missing),
            )
            raise
        except InvalidStatusTransitionError as e:
            logger.warning(
                "Invalid claim transition for invoice %s: %s -> %s",
                invoice.id, current.value if current else None, target_status.value,
            )
            raise

        values = dict(changes or {})
        values.update(planned)
        values["updated_at"] = datetime.utcnow()

        rows = (
            db.query(Invoice)
            .filter(Invoice.id == invoice.id, Invoice.advance_claim_status == current.value)
            .update({getattr(Invoice, name): value for name, value in values.items()}, synchronize_session=False)
        )
        if rows != 1:
            db.rollback()
            logger.warning(
                "Concurrent claim update on invoice %s; expected status %s",
                invoice.id, current.value,
            )
            raise ConflictError(
                f"Invoice {invoice.id} was modified concurrently; reload and retry"
            )

        metadata: Dict[str, Any] = {}
        if target_status == AdvanceClaimStatus.RELEASED:
            metadata["checklist"] = [item.value for item in REQUIRED_ITEMS]
        if evidence.remark:
            metadata["remark"] = evidence.remark
        if evidence.edited_fields:
            metadata["updated_fields"] = list(evidence.edited_fields)

        AuditService.log_status_change(
            db,
            invoice.id,
            TRANSITION_ACTIONS[target_status],
            from_status=current.value,
            to_status=target_status.value,
            actor=actor,
            metadata=metadata or None,
        )
        commit_or_raise(db)
        db.refresh(invoice)

        logger.info(
            "Invoice %s advance claim %s -> %s by %s",
            invoice.invoice_number, current.value, target_status.value, actor.label,
        )
        return invoice

    @staticmethod
    def release_claim(
        db: Session,
        invoice_id: int,
        checklist: Optional[Mapping[str, Any]],
        actor: Actor,
    ) -> Invoice:
        evidence = TransitionEvidence(actor_id=actor.id, actor_name=actor.name, checklist=checklist)
        return ClaimLifecycleService.transition(db, invoice_id, AdvanceClaimStatus.RELEASED, actor, evidence)

    @staticmethod
    def cancel_claim(
        db: Session,
        invoice_id: int,
        actor: Actor,
        remark: Optional[str] = None,
    ) -> Invoice:
        remark = remark.strip() if remark and remark.strip() else None
        evidence = TransitionEvidence(actor_id=actor.id, actor_name=actor.name, remark=remark)
        return ClaimLifecycleService.transition(db, invoice_id, AdvanceClaimStatus.CANCELLED, actor, evidence)

    @staticmethod
    def list_cancelled(db: Session) -> List[Invoice]:
        return (
            db.query(Invoice)
            .filter(Invoice.advance_claim_status == AdvanceClaimStatus.CANCELLED.value)
            .order_by(Invoice.updated_at.desc(), Invoice.id.desc())
            .all()
        )

    @staticmethod
    def edit_cancelled_invoice(
        db: Session,
        invoice_id: int,
        edit: CancelledInvoiceEdit,
        actor: Actor,
    ) -> Invoice:
        """Correct a cancelled invoice and send its claim back to Pending.

        Only ``EDITABLE_FIELDS`` are applied. A release still needs its own
        request with a full checklist afterwards.
        """
        invoice = InvoiceService.get_invoice(db, invoice_id)
        if invoice.claim_status != AdvanceClaimStatus.CANCELLED:
            raise ConflictError(
                f"Only cancelled claims can be corrected; invoice {invoice.id} is "
                f"'{invoice.advance_claim_status or 'without an advance claim'}'"
            )

        updates = ClaimLifecycleService._collect_edits(invoice, edit)
        evidence = TransitionEvidence(
            actor_id=actor.id,
            actor_name=actor.name,
            edited_fields=tuple(updates),
        )
        return ClaimLifecycleService.transition(
            db, invoice.id, AdvanceClaimStatus.PENDING, actor, evidence, changes=updates
        )

    @staticmethod
    def _collect_edits(invoice: Invoice, edit: CancelledInvoiceEdit) -> Dict[str, Any]:
        raw = edit.model_dump(exclude_unset=True)
        updates: Dict[str, Any] = {}
        issues: List[FieldIssue] = []

        for name in EDITABLE_FIELDS:
            if name not in raw:
                continue
            value = raw[name]
            if isinstance(value, ServiceKind):
                value = value.value
            elif isinstance(value, str):
                value = value.strip() or None
            if value is None and name in REQUIRED_EDIT_FIELDS:
                issues.append(FieldIssue(_camel(name), "cannot be empty"))
                continue
            updates[name] = value

        service = updates.get("service", invoice.service)
        treatment = updates.get("treatment", invoice.treatment)
        package = updates.get("package", invoice.package)
        if service == ServiceKind.TREATMENT.value and not treatment:
            issues.append(FieldIssue("treatment", "Treatment is required"))
        if service == ServiceKind.PACKAGE.value and not package:
            issues.append(FieldIssue("package", "Package is required"))

        if issues:
            raise ValidationFailedError(issues)
        if not updates:
            raise ValidationFailedError(
                [FieldIssue("body", "Provide at least one editable field: " + ", ".join(_camel(f) for f in EDITABLE_FIELDS))]
            )
        return updates


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)
