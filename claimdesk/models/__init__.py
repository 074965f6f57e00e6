from .invoice import (
    Invoice,
    AdvanceClaimStatus,
    ADVANCE_CLAIM_TRANSITIONS,
    InsuranceFlag,
    InsuranceType,
    Gender,
    PatientType,
    ServiceKind,
)
from .payment import PaymentHistory
from .audit import AuditEvent

__all__ = [
    "Invoice",
    "AdvanceClaimStatus",
    "ADVANCE_CLAIM_TRANSITIONS",
    "InsuranceFlag",
    "InsuranceType",
    "Gender",
    "PatientType",
    "ServiceKind",
    "PaymentHistory",
    "AuditEvent",
]
