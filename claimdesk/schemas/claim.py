from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import ConfigDict
from pydantic.alias_generators import to_camel

from ..models.invoice import ServiceKind
from .invoice import CamelModel


class ReleaseClaimRequest(CamelModel):
    # Values are judged by the checklist validator, which names each bad item
    checklist: Optional[Dict[str, Any]] = None


class CancelClaimRequest(CamelModel):
    remark: Optional[str] = None


class CancelledInvoiceEdit(CamelModel):
    """Fields that may be corrected on a cancelled invoice.

    Anything else in the payload, such as amounts or claim status, is
    ignored.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    mobile_number: Optional[str] = None
    referred_by: Optional[str] = None
    service: Optional[ServiceKind] = None
    treatment: Optional[str] = None
    package: Optional[str] = None
    notes: Optional[str] = None


class ChecklistItemResponse(CamelModel):
    key: str
    label: str


class ClaimTransitionsResponse(CamelModel):
    invoice_id: int
    current_status: Optional[str]
    valid_transitions: List[str]


class AuditEventResponse(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    action: str
    from_status: Optional[str]
    to_status: Optional[str]
    actor_id: Optional[str]
    actor_name: Optional[str]
    metadata_json: Optional[str]
    created_at: datetime
