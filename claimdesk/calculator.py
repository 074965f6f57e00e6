"""Derivation of invoice financial fields.

All functions here are pure. Raw inputs are coerced with ``to_amount`` so a
negative, blank or non-numeric value counts as zero and ``NaN`` can never
reach a derived field. Range problems that must be corrected by the user
(co-pay outside 0-100, a missing insurer advance) are reported by
``validate_amount_inputs`` as a list of issues instead of being raised.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, List, Optional

from .errors import FieldIssue

ZERO = Decimal("0.00")
CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def to_amount(value: Any) -> Decimal:
    if value is None or isinstance(value, bool):
        return ZERO
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return ZERO
    if not number.is_finite() or number < 0:
        return ZERO
    return number.quantize(CENT, rounding=ROUND_HALF_UP)


def _parse(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return number if number.is_finite() else None


@dataclass(frozen=True)
class DerivedAmounts:
    amount: Decimal
    paid: Decimal
    advance: Decimal
    pending: Decimal
    co_pay_percent: Decimal
    co_pay_amount: Decimal
    advance_given_amount: Decimal
    need_to_pay: Decimal

    @property
    def overpaid(self) -> bool:
        return self.advance > ZERO


@dataclass(frozen=True)
class Calculation:
    amounts: Optional[DerivedAmounts]
    issues: List[FieldIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues


def validate_amount_inputs(
    *,
    advance_insurance: bool,
    co_pay_percent: Any = None,
    advance_given_amount: Any = None,
) -> List[FieldIssue]:
    """Return the user-correctable problems with the insurance inputs."""
    issues: List[FieldIssue] = []
    if not advance_insurance:
        return issues

    percent = _parse(co_pay_percent)
    if percent is None:
        issues.append(FieldIssue("coPayPercent", "Co-pay % is required for advance insurance"))
    elif percent < 0 or percent > HUNDRED:
        issues.append(FieldIssue("coPayPercent", "Co-pay % must be between 0 and 100"))

    given = _parse(advance_given_amount)
    if given is None or given <= 0:
        issues.append(FieldIssue("advanceGivenAmount", "Advance given amount must be greater than 0"))

    return issues


def derive_amounts(
    amount: Any,
    paid: Any,
    *,
    advance_insurance: bool = False,
    co_pay_percent: Any = None,
    advance_given_amount: Any = None,
) -> DerivedAmounts:
    """Compute advance, pending and need-to-pay from raw invoice inputs.

    advance     = paid - amount when paid exceeds amount, else 0
    pending     = max(0, amount - (paid + advance))
    need_to_pay = max(0, amount - co-pay amount - insurer advance) under
                  advance insurance, otherwise equal to pending

    The co-pay percentage is expected to have passed
    ``validate_amount_inputs`` already.
    """
    amount = to_amount(amount)
    paid = to_amount(paid)

    advance = paid - amount if paid > amount else ZERO
    pending = max(ZERO, amount - (paid + advance))

    if advance_insurance:
        percent = to_amount(co_pay_percent)
        given = to_amount(advance_given_amount)
        co_pay_amount = (amount * percent / HUNDRED).quantize(CENT, rounding=ROUND_HALF_UP)
        need_to_pay = max(ZERO, amount - co_pay_amount - given)
    else:
        percent = ZERO
        given = ZERO
        co_pay_amount = ZERO
        need_to_pay = pending

    return DerivedAmounts(
        amount=amount,
        paid=paid,
        advance=advance,
        pending=pending,
        co_pay_percent=percent,
        co_pay_amount=co_pay_amount,
        advance_given_amount=given,
        need_to_pay=need_to_pay,
    )


def calculate(
    amount: Any,
    paid: Any,
    *,
    advance_insurance: bool = False,
    co_pay_percent: Any = None,
    advance_given_amount: Any = None,
) -> Calculation:
    issues = validate_amount_inputs(
        advance_insurance=advance_insurance,
        co_pay_percent=co_pay_percent,
        advance_given_amount=advance_given_amount,
    )
    if issues:
        return Calculation(amounts=None, issues=issues)
    return Calculation(
        amounts=derive_amounts(
            amount,
            paid,
            advance_insurance=advance_insurance,
            co_pay_percent=co_pay_percent,
            advance_given_amount=advance_given_amount,
        )
    )
