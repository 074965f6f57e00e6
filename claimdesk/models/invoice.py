import base64
import secrets
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from ..database import Base


class AdvanceClaimStatus(str, Enum):
    PENDING = "Pending"
    RELEASED = "Released"
    CANCELLED = "Cancelled"


ADVANCE_CLAIM_TRANSITIONS = {
    AdvanceClaimStatus.PENDING: frozenset({AdvanceClaimStatus.RELEASED, AdvanceClaimStatus.CANCELLED}),
    AdvanceClaimStatus.RELEASED: frozenset({AdvanceClaimStatus.CANCELLED}),
    AdvanceClaimStatus.CANCELLED: frozenset({AdvanceClaimStatus.PENDING}),
}


class InsuranceFlag(str, Enum):
    YES = "Yes"
    NO = "No"


class InsuranceType(str, Enum):
    PAID = "Paid"
    ADVANCE = "Advance"


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class PatientType(str, Enum):
    NEW = "New"
    OLD = "Old"


class ServiceKind(str, Enum):
    TREATMENT = "Treatment"
    PACKAGE = "Package"


class Invoice(Base):
    __tablename__ = "invoices"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_invoice_amount_non_negative"),
        CheckConstraint("paid >= 0", name="ck_invoice_paid_non_negative"),
        CheckConstraint("advance >= 0", name="ck_invoice_advance_non_negative"),
        CheckConstraint("pending >= 0", name="ck_invoice_pending_non_negative"),
        CheckConstraint(
            "(advance_claim_status = 'Released' "
            "AND advance_claim_release_date IS NOT NULL AND advance_claim_released_by IS NOT NULL) "
            "OR (COALESCE(advance_claim_status, '') <> 'Released' "
            "AND advance_claim_release_date IS NULL AND advance_claim_released_by IS NULL)",
            name="ck_invoice_release_audit_coupled",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)

    invoice_number = Column(String(64), unique=True, index=True, nullable=False)
    emr_number = Column(String(64), index=True, nullable=False)

    # Provenance, set once at creation
    user_id = Column(String(64), nullable=True)
    invoiced_date = Column(DateTime, default=datetime.utcnow, nullable=False)
    invoiced_by = Column(String(255), nullable=False)

    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    mobile_number = Column(String(32), nullable=False, index=True)
    gender = Column(String(10), nullable=False)
    doctor = Column(String(255), nullable=False)
    service = Column(String(20), nullable=False)
    treatment = Column(String(255), nullable=True)
    package = Column(String(255), nullable=True)
    patient_type = Column(String(10), nullable=True)
    referred_by = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(String(50), nullable=False, default="Active")

    amount = Column(Numeric(12, 2), nullable=False, default=0)
    paid = Column(Numeric(12, 2), nullable=False, default=0)
    advance = Column(Numeric(12, 2), nullable=False, default=0)
    pending = Column(Numeric(12, 2), nullable=False, default=0)
    payment_method = Column(String(50), nullable=False)

    insurance = Column(String(3), nullable=False, default=InsuranceFlag.NO.value)
    insurance_type = Column(String(20), nullable=True)
    co_pay_percent = Column(Numeric(5, 2), nullable=False, default=0)
    co_pay_amount = Column(Numeric(12, 2), nullable=False, default=0)
    advance_given_amount = Column(Numeric(12, 2), nullable=False, default=0)
    need_to_pay = Column(Numeric(12, 2), nullable=False, default=0)

    # Null when the invoice carries no advance insurance claim
    advance_claim_status = Column(String(20), nullable=True, index=True)
    advance_claim_release_date = Column(DateTime, nullable=True)
    advance_claim_released_by = Column(String(255), nullable=True)
    advance_claim_cancellation_remark = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    payments = relationship(
        "PaymentHistory", back_populates="invoice", order_by="PaymentHistory.id"
    )
    audit_events = relationship(
        "AuditEvent", back_populates="invoice", order_by="AuditEvent.id"
    )

    @property
    def claim_status(self) -> Optional[AdvanceClaimStatus]:
        if self.advance_claim_status is None:
            return None
        return AdvanceClaimStatus(self.advance_claim_status)

    @staticmethod
    def generate_invoice_number(prefix: str, when: Optional[datetime] = None) -> str:
        """Generate a unique, non-guessable invoice number.

        Format: <prefix>-<YYYYMMDD>-<6 chars base32>
        Example: INV-20261019-K3M9QZ
        """
        when = when or datetime.utcnow()
        token_chars = base64.b32encode(secrets.token_bytes(5)).decode("ascii")[:6]
        return f"{prefix}-{when:%Y%m%d}-{token_chars}"
