from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, FrozenSet, Mapping, Optional, Sequence

from .checklist import evaluate_checklist
from .errors import ChecklistIncompleteError, InvalidStatusTransitionError
from .models.invoice import AdvanceClaimStatus, ADVANCE_CLAIM_TRANSITIONS


@dataclass(frozen=True)
class TransitionEvidence:
    """What the caller brings to justify a transition.

    ``checklist`` is required to release; ``edited_fields`` marks a
    correction of a cancelled invoice and is the only way back to Pending.
    """

    actor_id: str
    actor_name: Optional[str] = None
    checklist: Optional[Mapping[str, Any]] = None
    remark: Optional[str] = None
    edited_fields: Sequence[str] = field(default_factory=tuple)

    @property
    def actor_label(self) -> str:
        return self.actor_name or self.actor_id


def validate_status_transition(
    current_status: Optional[AdvanceClaimStatus], target_status: AdvanceClaimStatus
) -> None:
    if current_status is None:
        raise InvalidStatusTransitionError(
            current_status,
            target_status,
            "Invoice has no advance insurance claim."
        )

    if current_status == target_status:
        raise InvalidStatusTransitionError(
            current_status,
            target_status,
            f"Claim is already in '{current_status.value}' status."
        )

    valid_targets = ADVANCE_CLAIM_TRANSITIONS.get(current_status, frozenset())
    if target_status not in valid_targets:
        valid_list = ", ".join(f"'{s.value}'" for s in sorted(valid_targets, key=lambda s: s.value)) if valid_targets else "none"
        raise InvalidStatusTransitionError(
            current_status,
            target_status,
            f"Cannot transition from '{current_status.value}' to '{target_status.value}'. "
            f"Valid transitions from '{current_status.value}': {valid_list}."
        )


def can_transition(current_status: Optional[AdvanceClaimStatus], target_status: AdvanceClaimStatus) -> bool:
    if current_status is None or current_status == target_status:
        return False
    valid_targets = ADVANCE_CLAIM_TRANSITIONS.get(current_status, frozenset())
    return target_status in valid_targets


def get_valid_transitions(current_status: Optional[AdvanceClaimStatus]) -> FrozenSet[AdvanceClaimStatus]:
    if current_status is None:
        return frozenset()
    return ADVANCE_CLAIM_TRANSITIONS.get(current_status, frozenset())


def plan_transition(
    current_status: Optional[AdvanceClaimStatus],
    target_status: AdvanceClaimStatus,
    evidence: TransitionEvidence,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Return the complete set of column changes for a legal transition.

    Raises ``InvalidStatusTransitionError`` for an illegal move and
    ``ChecklistIncompleteError`` when a release lacks attestations. Nothing
    is written here; the caller applies the whole dict or nothing.
    """
    validate_status_transition(current_status, target_status)

    if target_status == AdvanceClaimStatus.RELEASED:
        result = evaluate_checklist(evidence.checklist)
        if not result.complete:
            raise ChecklistIncompleteError(result.missing)
        return {
            "advance_claim_status": target_status.value,
            "advance_claim_release_date": now or datetime.utcnow(),
            "advance_claim_released_by": evidence.actor_label,
            "advance_claim_cancellation_remark": None,
        }

    if target_status == AdvanceClaimStatus.CANCELLED:
        return {
            "advance_claim_status": target_status.value,
            "advance_claim_release_date": None,
            "advance_claim_released_by": None,
            "advance_claim_cancellation_remark": evidence.remark,
        }

    # Cancelled -> Pending is only reachable through a correction
    if not evidence.edited_fields:
        raise InvalidStatusTransitionError(
            current_status,
            target_status,
            "A cancelled claim returns to 'Pending' only when its invoice is corrected."
        )
    return {
        "advance_claim_status": target_status.value,
        "advance_claim_release_date": None,
        "advance_claim_released_by": None,
        "advance_claim_cancellation_remark": None,
    }
