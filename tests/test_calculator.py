from decimal import Decimal

import pytest

from claimdesk.calculator import calculate, derive_amounts, to_amount, validate_amount_inputs


class TestToAmount:
    @pytest.mark.parametrize("raw", [None, "", "abc", "NaN", "-5", -12, True, "  "])
    def test_bad_input_becomes_zero(self, raw):
        assert to_amount(raw) == Decimal("0")

    def test_numeric_string_is_parsed(self):
        assert to_amount(" 1200.5 ") == Decimal("1200.50")

    def test_rounds_to_cents(self):
        assert to_amount("10.005") == Decimal("10.01")


class TestDeriveAmounts:
    def test_fully_paid(self):
        result = derive_amounts(1000, 1000)
        assert result.advance == Decimal("0")
        assert result.pending == Decimal("0")
        assert not result.overpaid

    def test_overpayment_becomes_advance(self):
        result = derive_amounts(1000, 1200)
        assert result.advance == Decimal("200")
        assert result.pending == Decimal("0")
        assert result.overpaid

    def test_partial_payment_leaves_pending(self):
        result = derive_amounts(1000, 250)
        assert result.advance == Decimal("0")
        assert result.pending == Decimal("750")

    def test_need_to_pay_equals_pending_without_advance_insurance(self):
        result = derive_amounts(1000, 250, co_pay_percent=50, advance_given_amount=100)
        assert result.need_to_pay == result.pending
        assert result.co_pay_amount == Decimal("0")

    def test_advance_insurance_co_pay(self):
        result = derive_amounts(
            1000, 400, advance_insurance=True, co_pay_percent=10, advance_given_amount=300
        )
        assert result.co_pay_amount == Decimal("100")
        assert result.need_to_pay == Decimal("600")
        assert result.pending == Decimal("600")

    def test_need_to_pay_never_negative(self):
        result = derive_amounts(
            1000, 0, advance_insurance=True, co_pay_percent=50, advance_given_amount=900
        )
        assert result.need_to_pay == Decimal("0")

    def test_garbage_inputs_do_not_propagate(self):
        result = derive_amounts("abc", "NaN", advance_insurance=True, co_pay_percent="x", advance_given_amount=None)
        assert result.amount == Decimal("0")
        assert result.pending == Decimal("0")
        assert result.need_to_pay == Decimal("0")

    @pytest.mark.parametrize(
        "amount,paid",
        [(0, 0), (0, 500), (1000, 0), (1000, 999.99), (1000, 1000.01), (-100, 50), (50, -100)],
    )
    def test_non_negative(self, amount, paid):
        result = derive_amounts(amount, paid)
        assert result.advance >= 0
        assert result.pending >= 0

    def test_idempotent(self):
        kwargs = dict(advance_insurance=True, co_pay_percent=12.5, advance_given_amount=150)
        assert derive_amounts(830, 120, **kwargs) == derive_amounts(830, 120, **kwargs)


class TestValidation:
    def test_plain_invoice_has_no_issues(self):
        assert validate_amount_inputs(advance_insurance=False, co_pay_percent=500) == []

    @pytest.mark.parametrize("percent", [-1, 100.5, 250])
    def test_co_pay_out_of_range(self, percent):
        issues = validate_amount_inputs(advance_insurance=True, co_pay_percent=percent, advance_given_amount=100)
        assert [i.field for i in issues] == ["coPayPercent"]

    def test_co_pay_bounds_accepted(self):
        assert validate_amount_inputs(advance_insurance=True, co_pay_percent=0, advance_given_amount=1) == []
        assert validate_amount_inputs(advance_insurance=True, co_pay_percent=100, advance_given_amount=1) == []

    def test_missing_insurer_advance(self):
        issues = validate_amount_inputs(advance_insurance=True, co_pay_percent=10, advance_given_amount=0)
        assert [i.field for i in issues] == ["advanceGivenAmount"]

    def test_calculate_rejects_before_deriving(self):
        result = calculate(1000, 400, advance_insurance=True, co_pay_percent=101, advance_given_amount=300)
        assert not result.ok
        assert result.amounts is None
        assert result.issues[0].field == "coPayPercent"

    def test_calculate_ok(self):
        result = calculate(1000, 1200)
        assert result.ok
        assert result.amounts.advance == Decimal("200")
