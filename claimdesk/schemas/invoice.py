from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from ..models.invoice import Gender, InsuranceFlag, InsuranceType, PatientType, ServiceKind


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InvoiceCreate(CamelModel):
    invoice_number: Optional[str] = None
    emr_number: str

    first_name: str
    last_name: Optional[str] = None
    email: Optional[str] = None
    mobile_number: str
    gender: Gender
    doctor: str
    service: ServiceKind
    treatment: Optional[str] = None
    package: Optional[str] = None
    patient_type: Optional[PatientType] = None
    referred_by: Optional[str] = None
    notes: Optional[str] = None

    amount: Decimal
    paid: Decimal = Decimal("0")
    payment_method: str

    insurance: InsuranceFlag = InsuranceFlag.NO
    insurance_type: Optional[InsuranceType] = None
    co_pay_percent: Optional[Decimal] = None
    advance_given_amount: Optional[Decimal] = None

    @field_validator("invoice_number", "last_name", "email", "treatment", "package", "referred_by", "notes")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            v = v.strip()
            if not v:
                return None
        return v

    @field_validator("emr_number", "first_name", "mobile_number", "doctor", "payment_method")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("cannot be empty")
        return v.strip()


class PaymentUpdate(CamelModel):
    paying: Decimal = Decimal("0")
    amount: Optional[Decimal] = None
    payment_method: Optional[str] = None


class PaymentHistoryResponse(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    amount: Decimal
    paying: Decimal
    paid: Decimal
    advance: Decimal
    pending: Decimal
    payment_method: Optional[str]
    recorded_by: Optional[str]
    created_at: datetime


class InvoiceListResponse(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    invoice_number: str
    emr_number: str
    first_name: str
    last_name: Optional[str]
    mobile_number: str
    doctor: str
    amount: Decimal
    paid: Decimal
    advance: Decimal
    pending: Decimal
    need_to_pay: Decimal
    insurance: str
    insurance_type: Optional[str]
    advance_claim_status: Optional[str]
    status: str
    invoiced_date: datetime


class InvoiceResponse(InvoiceListResponse):
    user_id: Optional[str]
    invoiced_by: str
    email: Optional[str]
    gender: str
    service: str
    treatment: Optional[str]
    package: Optional[str]
    patient_type: Optional[str]
    referred_by: Optional[str]
    notes: Optional[str]
    payment_method: str
    co_pay_percent: Decimal
    co_pay_amount: Decimal
    advance_given_amount: Decimal
    advance_claim_release_date: Optional[datetime]
    advance_claim_released_by: Optional[str]
    advance_claim_cancellation_remark: Optional[str]
    created_at: datetime
    updated_at: datetime
    payments: List[PaymentHistoryResponse] = []


class EmrLookupResponse(CamelModel):
    invoice: InvoiceResponse
    invoice_count: int
    total_advance_amount: Decimal


class ClaimSummaryResponse(CamelModel):
    pending: int
    released: int
    cancelled: int
    copay: int
    advance: int
    total: int
