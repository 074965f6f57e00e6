import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from ..calculator import ZERO, calculate, derive_amounts, to_amount
from ..config import get_settings
from ..database import commit_or_raise
from ..errors import (
    ConflictError,
    FieldIssue,
    InfrastructureError,
    NotFoundError,
    ValidationFailedError,
)
from ..models.invoice import (
    AdvanceClaimStatus,
    InsuranceFlag,
    InsuranceType,
    Invoice,
    ServiceKind,
)
from ..models.payment import PaymentHistory
from ..schemas.invoice import InvoiceCreate, PaymentUpdate
from .audit import AuditService
from .auth import Actor

logger = logging.getLogger(__name__)

LIST_CATEGORIES = ("co-pay", "advance")


def is_advance_insurance(insurance: Optional[str], insurance_type: Optional[str]) -> bool:
    return insurance == InsuranceFlag.YES.value and insurance_type == InsuranceType.ADVANCE.value


class InvoiceService:
    @staticmethod
    def validate_create(data: InvoiceCreate) -> List[FieldIssue]:
        issues: List[FieldIssue] = []
        if data.service == ServiceKind.TREATMENT and not data.treatment:
            issues.append(FieldIssue("treatment", "Treatment is required"))
        if data.service == ServiceKind.PACKAGE and not data.package:
            issues.append(FieldIssue("package", "Package is required"))
        if data.email and ("@" not in data.email or "." not in data.email.split("@")[-1]):
            issues.append(FieldIssue("email", "Valid email required"))
        if data.insurance == InsuranceFlag.YES and data.insurance_type is None:
            issues.append(FieldIssue("insuranceType", "Insurance type is required when insurance is Yes"))
        return issues

    @staticmethod
    def create_invoice(db: Session, data: InvoiceCreate, actor: Actor) -> Invoice:
        settings = get_settings()
        issues = InvoiceService.validate_create(data)

        insurance = data.insurance.value
        insurance_type = data.insurance_type.value if data.insurance == InsuranceFlag.YES and data.insurance_type else None
        advance_insurance = is_advance_insurance(insurance, insurance_type)

        calculation = calculate(
            data.amount,
            data.paid,
            advance_insurance=advance_insurance,
            co_pay_percent=data.co_pay_percent,
            advance_given_amount=data.advance_given_amount,
        )
        issues.extend(calculation.issues)
        if issues:
            raise ValidationFailedError(issues)
        amounts = calculation.amounts

        invoice_number = data.invoice_number or Invoice.generate_invoice_number(settings.invoice_number_prefix)
        existing = db.query(Invoice).filter(Invoice.invoice_number == invoice_number).first()
        if existing:
            raise ConflictError(f"Invoice number {invoice_number} already exists")

        if amounts.overpaid and settings.flag_overpayment:
            logger.warning(
                "Overpayment on invoice %s: paid=%s amount=%s credited as advance=%s",
                invoice_number, amounts.paid, amounts.amount, amounts.advance,
            )

        invoice = Invoice(
            invoice_number=invoice_number,
            emr_number=data.emr_number,
            user_id=actor.id,
            invoiced_date=datetime.utcnow(),
            invoiced_by=actor.label,
            first_name=data.first_name,
            last_name=data.last_name,
            email=data.email,
            mobile_number=data.mobile_number,
            gender=data.gender.value,
            doctor=data.doctor,
            service=data.service.value,
            treatment=data.treatment,
            package=data.package,
            patient_type=data.patient_type.value if data.patient_type else None,
            referred_by=data.referred_by,
            notes=data.notes,
            amount=amounts.amount,
            paid=amounts.paid,
            advance=amounts.advance,
            pending=amounts.pending,
            payment_method=data.payment_method,
            insurance=insurance,
            insurance_type=insurance_type,
            co_pay_percent=amounts.co_pay_percent,
            co_pay_amount=amounts.co_pay_amount,
            advance_given_amount=amounts.advance_given_amount,
            need_to_pay=amounts.need_to_pay,
            advance_claim_status=AdvanceClaimStatus.PENDING.value if advance_insurance else None,
        )
        try:
            db.add(invoice)
            db.flush()
        except IntegrityError as e:
            db.rollback()
            logger.warning("IntegrityError creating invoice %s: %s", invoice_number, e)
            raise ConflictError(f"Invoice number {invoice_number} already exists") from e
        except OperationalError as e:
            db.rollback()
            logger.error("Database unavailable creating invoice %s: %s", invoice_number, e)
            raise InfrastructureError("Record store unavailable; retry the operation") from e

        AuditService.log_invoice_created(db, invoice, actor=actor)
        commit_or_raise(db)
        db.refresh(invoice)

        logger.info(
            "Created invoice %s (id=%s) for EMR %s, claim status %s",
            invoice.invoice_number, invoice.id, invoice.emr_number, invoice.advance_claim_status,
        )
        return invoice

    @staticmethod
    def get_invoice(db: Session, invoice_id: int) -> Invoice:
        invoice = db.query(Invoice).filter(Invoice.id == invoice_id).first()
        if not invoice:
            raise NotFoundError(f"Invoice {invoice_id} not found")
        return invoice

    @staticmethod
    def list_invoices(
        db: Session,
        *,
        emr_number: Optional[str] = None,
        invoice_number: Optional[str] = None,
        name: Optional[str] = None,
        phone: Optional[str] = None,
        claim_status: Optional[str] = None,
        application_status: Optional[str] = None,
        category: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> List[Invoice]:
        query = db.query(Invoice)
        if emr_number:
            query = query.filter(Invoice.emr_number.ilike(f"%{emr_number}%"))
        if invoice_number:
            query = query.filter(Invoice.invoice_number.ilike(f"%{invoice_number}%"))
        if phone:
            query = query.filter(Invoice.mobile_number.ilike(f"%{phone}%"))
        if name:
            query = query.filter(
                or_(Invoice.first_name.ilike(f"%{name}%"), Invoice.last_name.ilike(f"%{name}%"))
            )
        if claim_status:
            try:
                status = AdvanceClaimStatus(claim_status)
            except ValueError:
                raise ValidationFailedError([FieldIssue("claimStatus", f"Unknown claim status '{claim_status}'")])
            query = query.filter(Invoice.advance_claim_status == status.value)
        if application_status:
            query = query.filter(Invoice.status == application_status)
        if category:
            if category.lower() == "co-pay":
                query = query.filter(Invoice.co_pay_percent > 0)
            elif category.lower() == "advance":
                query = query.filter(Invoice.advance_given_amount > 0)
            else:
                raise ValidationFailedError(
                    [FieldIssue("category", f"Category must be one of: {', '.join(LIST_CATEGORIES)}")]
                )
        if date_from:
            query = query.filter(Invoice.invoiced_date >= datetime.combine(date_from, time.min))
        if date_to:
            query = query.filter(Invoice.invoiced_date < datetime.combine(date_to + timedelta(days=1), time.min))

        query = query.order_by(Invoice.invoiced_date.desc(), Invoice.id.desc())
        return query.limit(limit or get_settings().list_limit).all()

    @staticmethod
    def lookup_by_emr(db: Session, emr_number: str) -> Tuple[Invoice, int, Decimal]:
        invoices = (
            db.query(Invoice)
            .filter(Invoice.emr_number == emr_number)
            .order_by(Invoice.invoiced_date.desc(), Invoice.id.desc())
            .all()
        )
        if not invoices:
            raise NotFoundError(f"No invoices found for EMR number {emr_number}")
        total_advance = sum((to_amount(i.advance) for i in invoices), ZERO)
        return invoices[0], len(invoices), total_advance

    @staticmethod
    def record_payment(db: Session, invoice_id: int, data: PaymentUpdate, actor: Actor) -> Invoice:
        invoice = InvoiceService.get_invoice(db, invoice_id)

        paying = to_amount(data.paying)
        if paying == ZERO and data.amount is None:
            raise ValidationFailedError([FieldIssue("paying", "Enter a payment amount or a new invoice amount")])

        current_paid = to_amount(invoice.paid)
        amount = to_amount(data.amount) if data.amount is not None else to_amount(invoice.amount)
        payment_method = data.payment_method or invoice.payment_method

        amounts = derive_amounts(
            amount,
            current_paid + paying,
            advance_insurance=is_advance_insurance(invoice.insurance, invoice.insurance_type),
            co_pay_percent=invoice.co_pay_percent,
            advance_given_amount=invoice.advance_given_amount,
        )

        if amounts.overpaid and get_settings().flag_overpayment:
            logger.warning(
                "Overpayment on invoice %s: paid=%s amount=%s credited as advance=%s",
                invoice.invoice_number, amounts.paid, amounts.amount, amounts.advance,
            )

        # Keyed on the amount and paid values we read so a concurrent update is not lost
        rows = (
            db.query(Invoice)
            .filter(
                Invoice.id == invoice.id,
                Invoice.amount == invoice.amount,
                Invoice.paid == invoice.paid,
            )
            .update(
                {
                    Invoice.amount: amounts.amount,
                    Invoice.paid: amounts.paid,
                    Invoice.advance: amounts.advance,
                    Invoice.pending: amounts.pending,
                    Invoice.co_pay_amount: amounts.co_pay_amount,
                    Invoice.need_to_pay: amounts.need_to_pay,
                    Invoice.payment_method: payment_method,
                    Invoice.updated_at: datetime.utcnow(),
                },
                synchronize_session=False,
            )
        )
        if rows != 1:
            db.rollback()
            logger.warning("Concurrent payment update detected on invoice %s", invoice.id)
            raise ConflictError(f"Invoice {invoice.id} was modified concurrently; reload and retry")

        db.add(
            PaymentHistory(
                invoice_id=invoice.id,
                amount=amounts.amount,
                paying=paying,
                paid=amounts.paid,
                advance=amounts.advance,
                pending=amounts.pending,
                payment_method=payment_method,
                recorded_by=actor.label,
            )
        )
        AuditService.log_event(
            db,
            invoice.id,
            "PAYMENT_RECORDED",
            actor=actor,
            metadata={"paying": paying, "paid": amounts.paid, "pending": amounts.pending, "advance": amounts.advance},
        )
        commit_or_raise(db)
        db.refresh(invoice)

        logger.info(
            "Recorded payment of %s on invoice %s; pending now %s",
            paying, invoice.invoice_number, invoice.pending,
        )
        return invoice

    @staticmethod
    def claim_summary(db: Session) -> Dict[str, int]:
        counts = dict(
            db.query(Invoice.advance_claim_status, func.count(Invoice.id))
            .group_by(Invoice.advance_claim_status)
            .all()
        )
        return {
            "pending": counts.get(AdvanceClaimStatus.PENDING.value, 0),
            "released": counts.get(AdvanceClaimStatus.RELEASED.value, 0),
            "cancelled": counts.get(AdvanceClaimStatus.CANCELLED.value, 0),
            "copay": db.query(Invoice).filter(Invoice.co_pay_percent > 0).count(),
            "advance": db.query(Invoice).filter(Invoice.advance_given_amount > 0).count(),
            "total": db.query(Invoice).count(),
        }
