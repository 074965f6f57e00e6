from datetime import datetime

import pytest

from claimdesk.checklist import REQUIRED_ITEMS
from claimdesk.errors import ChecklistIncompleteError, ConflictError, InvalidStatusTransitionError
from claimdesk.models.invoice import ADVANCE_CLAIM_TRANSITIONS, AdvanceClaimStatus
from claimdesk.state_machine import (
    TransitionEvidence,
    can_transition,
    get_valid_transitions,
    plan_transition,
    validate_status_transition,
)

PENDING = AdvanceClaimStatus.PENDING
RELEASED = AdvanceClaimStatus.RELEASED
CANCELLED = AdvanceClaimStatus.CANCELLED


def _evidence(**kwargs):
    return TransitionEvidence(actor_id="u-1", actor_name="Asha", **kwargs)


def _checklist():
    return {item.value: True for item in REQUIRED_ITEMS}


class TestTransitionTable:
    def test_pending_can_transition_to_released(self):
        assert can_transition(PENDING, RELEASED)

    def test_pending_can_transition_to_cancelled(self):
        assert can_transition(PENDING, CANCELLED)

    def test_released_can_transition_to_cancelled(self):
        assert can_transition(RELEASED, CANCELLED)

    def test_released_cannot_transition_to_pending(self):
        assert not can_transition(RELEASED, PENDING)

    def test_cancelled_can_transition_to_pending(self):
        assert can_transition(CANCELLED, PENDING)

    def test_cancelled_cannot_transition_to_released(self):
        assert not can_transition(CANCELLED, RELEASED)

    def test_same_status_is_never_a_transition(self):
        for status in AdvanceClaimStatus:
            assert not can_transition(status, status)

    def test_no_claim_has_no_transitions(self):
        assert get_valid_transitions(None) == frozenset()
        assert not can_transition(None, RELEASED)

    def test_all_statuses_have_transitions_defined(self):
        for status in AdvanceClaimStatus:
            assert status in ADVANCE_CLAIM_TRANSITIONS

    def test_validate_invalid_transition_raises(self):
        with pytest.raises(InvalidStatusTransitionError) as exc_info:
            validate_status_transition(CANCELLED, RELEASED)
        assert "Cannot transition" in str(exc_info.value)
        assert "Cancelled" in str(exc_info.value)
        assert "Released" in str(exc_info.value)

    def test_validate_same_status_raises(self):
        with pytest.raises(InvalidStatusTransitionError):
            validate_status_transition(RELEASED, RELEASED)

    def test_invalid_transition_is_a_conflict(self):
        with pytest.raises(ConflictError):
            validate_status_transition(None, CANCELLED)


class TestPlanTransition:
    def test_release_sets_audit_fields(self):
        now = datetime(2026, 10, 19, 9, 30)
        changes = plan_transition(PENDING, RELEASED, _evidence(checklist=_checklist()), now=now)
        assert changes["advance_claim_status"] == "Released"
        assert changes["advance_claim_release_date"] == now
        assert changes["advance_claim_released_by"] == "Asha"

    def test_release_falls_back_to_actor_id(self):
        evidence = TransitionEvidence(actor_id="u-9", checklist=_checklist())
        assert plan_transition(PENDING, RELEASED, evidence)["advance_claim_released_by"] == "u-9"

    def test_release_without_checklist_lists_every_item(self):
        with pytest.raises(ChecklistIncompleteError) as exc_info:
            plan_transition(PENDING, RELEASED, _evidence())
        assert len(exc_info.value.missing) == 12

    def test_release_with_one_false_item(self):
        checklist = _checklist()
        checklist["diagnosis"] = False
        with pytest.raises(ChecklistIncompleteError) as exc_info:
            plan_transition(PENDING, RELEASED, _evidence(checklist=checklist))
        assert [i.value for i in exc_info.value.missing] == ["diagnosis"]
        assert exc_info.value.errors() == [
            {"field": "checklist.diagnosis", "message": "Diagnosis must be confirmed"}
        ]

    def test_cancel_clears_audit_fields(self):
        changes = plan_transition(RELEASED, CANCELLED, _evidence(remark="Wrong insurer"))
        assert changes["advance_claim_status"] == "Cancelled"
        assert changes["advance_claim_release_date"] is None
        assert changes["advance_claim_released_by"] is None
        assert changes["advance_claim_cancellation_remark"] == "Wrong insurer"

    def test_cancel_needs_no_checklist(self):
        assert plan_transition(PENDING, CANCELLED, _evidence())["advance_claim_status"] == "Cancelled"

    def test_reopen_requires_an_edit(self):
        with pytest.raises(InvalidStatusTransitionError):
            plan_transition(CANCELLED, PENDING, _evidence())

    def test_reopen_after_edit(self):
        changes = plan_transition(CANCELLED, PENDING, _evidence(edited_fields=("first_name",)))
        assert changes["advance_claim_status"] == "Pending"
        assert changes["advance_claim_cancellation_remark"] is None

    def test_cancelled_cannot_be_released_even_with_checklist(self):
        with pytest.raises(InvalidStatusTransitionError):
            plan_transition(CANCELLED, RELEASED, _evidence(checklist=_checklist()))
