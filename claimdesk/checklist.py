from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple


class ChecklistItem(str, Enum):
    APPOINTMENT = "appointment"
    PERSONAL_DETAILS = "personalDetails"
    TREATMENT = "treatment"
    AMOUNT = "amount"
    COMPLAINS = "complains"
    VITAL_SIGN = "vitalSign"
    CONSENT_FORM = "consentForm"
    ALLERGY = "allergy"
    INVOICE_DATE = "invoiceDate"
    FAMILY_DETAILS = "familyDetails"
    DIAGNOSIS = "diagnosis"
    START_DATE = "startDate"

    @property
    def label(self) -> str:
        return CHECKLIST_LABELS[self]


CHECKLIST_LABELS: Dict[ChecklistItem, str] = {
    ChecklistItem.APPOINTMENT: "Appointment",
    ChecklistItem.PERSONAL_DETAILS: "Personal details",
    ChecklistItem.TREATMENT: "Treatment",
    ChecklistItem.AMOUNT: "Amount",
    ChecklistItem.COMPLAINS: "Complains",
    ChecklistItem.VITAL_SIGN: "Vital sign",
    ChecklistItem.CONSENT_FORM: "Consent form",
    ChecklistItem.ALLERGY: "Allergy",
    ChecklistItem.INVOICE_DATE: "Invoice date",
    ChecklistItem.FAMILY_DETAILS: "Family details",
    ChecklistItem.DIAGNOSIS: "Diagnosis",
    ChecklistItem.START_DATE: "Start date",
}

REQUIRED_ITEMS: Tuple[ChecklistItem, ...] = tuple(ChecklistItem)


@dataclass(frozen=True)
class ChecklistResult:
    missing: Tuple[ChecklistItem, ...]

    @property
    def complete(self) -> bool:
        return not self.missing

    @property
    def missing_keys(self) -> List[str]:
        return [item.value for item in self.missing]

    @property
    def message(self) -> str:
        if self.complete:
            return "Checklist complete"
        return "Checklist incomplete. Missing: " + ", ".join(item.label for item in self.missing)


def evaluate_checklist(payload: Optional[Mapping[str, Any]]) -> ChecklistResult:
    """Check that every required attestation is present and exactly ``True``.

    Keys outside ``ChecklistItem`` are ignored. Only a real boolean ``True``
    counts, so ``"true"``, ``1`` or a misspelt key never satisfy an item.
    """
    if not isinstance(payload, Mapping):
        return ChecklistResult(missing=REQUIRED_ITEMS)
    missing = tuple(item for item in REQUIRED_ITEMS if payload.get(item.value) is not True)
    return ChecklistResult(missing=missing)