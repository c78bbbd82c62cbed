from __future__ import annotations

from decimal import Decimal

from tillpoint_sdk.payment_validation import compute_tender_totals, money_equal, validate_payment_intent


def test_empty_cart_is_rejected_first() -> None:
    result = validate_payment_intent(line_count=0, has_customer=False, total_due=Decimal("0"), intent={"method": "credit"})
    assert not result.ok
    assert result.code == "EMPTY_CART"
    assert [issue.code for issue in result.issues] == ["EMPTY_CART", "CUSTOMER_REQUIRED"]


def test_credit_and_split_need_a_customer() -> None:
    for method in ("CREDIT", "SPLIT"):
        result = validate_payment_intent(
            line_count=1,
            has_customer=False,
            total_due=Decimal("20.00"),
            intent={"method": method, "split_cash": "10", "split_card": "10"},
        )
        assert result.code == "CUSTOMER_REQUIRED"


def test_cash_and_card_need_no_customer() -> None:
    for method in ("CASH", "CARD"):
        assert validate_payment_intent(line_count=1, has_customer=False, total_due="20", intent={"method": method}).ok


def test_split_within_epsilon_passes() -> None:
    result = validate_payment_intent(
        line_count=1,
        has_customer=True,
        total_due=Decimal("20.00"),
        intent={"method": "SPLIT", "split_cash": "12.00", "split_card": "7.99"},
    )
    assert result.ok
    assert result.intent is not None and result.intent.method == "SPLIT"


def test_split_off_by_more_than_epsilon_fails() -> None:
    result = validate_payment_intent(
        line_count=1,
        has_customer=True,
        total_due=Decimal("20.00"),
        intent={"method": "SPLIT", "split_cash": "12.00", "split_card": "7.98"},
    )
    assert result.code == "SPLIT_MISMATCH"


def test_negative_split_amount_fails() -> None:
    result = validate_payment_intent(
        line_count=1,
        has_customer=True,
        total_due=Decimal("20.00"),
        intent={"method": "SPLIT", "split_cash": "25.00", "split_card": "-5.00"},
    )
    assert result.code == "SPLIT_MISMATCH"


def test_money_helpers() -> None:
    assert money_equal(Decimal("10.00"), Decimal("10.01"))
    assert not money_equal(Decimal("10.00"), Decimal("10.02"))
    totals = compute_tender_totals(Decimal("18.40"), Decimal("20.00"))
    assert totals.change_due == Decimal("1.60")
    assert totals.missing_amount == Decimal("0.00")
