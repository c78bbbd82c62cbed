from __future__ import annotations

from decimal import Decimal

import pytest

from tillpoint_app.domain.errors import ShiftAlreadyOpenError, ShiftNotOpenError, ValidationError
from tillpoint_app.domain.models import LedgerSale
from tillpoint_app.services.shift_ledger import ShiftLedger
from tillpoint_sdk.local_store import LocalStore


def _sale(total: str, method: str = "CASH", **kwargs) -> LedgerSale:
    return LedgerSale(sale_id=f"s-{total}", total=Decimal(total), method=method, **kwargs)


def test_variance_after_three_cash_sales_and_a_refund() -> None:
    ledger = ShiftLedger()
    ledger.start(Decimal("100.00"))
    for amount in ("12.50", "7.25", "30.00"):
        ledger.record_sale(_sale(amount))
    ledger.record_return(Decimal("5.00"))

    report = ledger.end(Decimal("140.00"))

    expected = Decimal("100.00") + Decimal("12.50") + Decimal("7.25") + Decimal("30.00") - Decimal("5.00")
    assert report.expected_cash == expected
    assert report.variance == Decimal("140.00") - expected
    assert report.is_balanced is False
    assert report.shift.sales_count == 3
    assert report.shift.return_count == 1
    assert report.shift.closing_count == Decimal("140.00")
    assert report.shift.closed_at is not None
    assert ledger.current is None


def test_balanced_within_epsilon() -> None:
    ledger = ShiftLedger()
    ledger.start(Decimal("50"))
    ledger.record_sale(_sale("10.00"))
    assert ledger.end(Decimal("60.01")).is_balanced is True


def test_routes_revenue_by_method() -> None:
    ledger = ShiftLedger()
    ledger.start(Decimal("0"))
    ledger.record_sale(_sale("10", "CASH"))
    ledger.record_sale(_sale("20", "CARD", discount_amount=Decimal("2")))
    ledger.record_sale(_sale("30", "CREDIT"))
    shift = ledger.record_sale(_sale("40", "SPLIT", split_cash=Decimal("15"), split_card=Decimal("25")))

    assert shift is not None
    assert shift.total_revenue == Decimal("100")
    assert shift.cash_revenue == Decimal("25")
    assert shift.card_revenue == Decimal("45")
    assert shift.credit_revenue == Decimal("30")
    assert shift.total_discounts == Decimal("2")
    assert shift.sales_count == 4


def test_sales_without_open_shift_are_ignored() -> None:
    ledger = ShiftLedger()
    assert ledger.record_sale(_sale("10")) is None
    assert ledger.record_return(Decimal("1")) is None


def test_only_one_open_shift() -> None:
    ledger = ShiftLedger()
    ledger.start(Decimal("10"))
    with pytest.raises(ShiftAlreadyOpenError):
        ledger.start(Decimal("10"))


def test_end_without_shift_fails() -> None:
    with pytest.raises(ShiftNotOpenError):
        ShiftLedger().end(Decimal("0"))


def test_negative_amounts_rejected() -> None:
    ledger = ShiftLedger()
    with pytest.raises(ValidationError):
        ledger.start(Decimal("-1"))
    ledger.start(Decimal("0"))
    with pytest.raises(ValidationError):
        ledger.record_return(Decimal("0"))
    with pytest.raises(ValidationError):
        ledger.end(Decimal("-0.01"))
    assert ledger.is_open


def test_open_shift_survives_restart_and_history_is_kept(tmp_path) -> None:
    store = LocalStore(base_dir=tmp_path)
    ledger = ShiftLedger(store=store)
    opened = ledger.start(Decimal("20"))
    ledger.record_sale(_sale("5"))

    resumed = ShiftLedger(store=store)
    assert resumed.current is not None
    assert resumed.current.id == opened.id
    assert resumed.current.cash_revenue == Decimal("5")

    resumed.end(Decimal("25"))
    second = ShiftLedger(store=store)
    assert second.current is None
    second.start(Decimal("0"))
    second.end(Decimal("0"))

    history = second.history()
    assert len(history) == 2
    assert history[1].id == opened.id


def test_history_is_bounded(tmp_path) -> None:
    ledger = ShiftLedger(store=LocalStore(base_dir=tmp_path), history_limit=2)
    for _ in range(3):
        ledger.start(Decimal("0"))
        ledger.end(Decimal("0"))
    assert len(ledger.history()) == 2


def test_split_within_tolerance_keeps_method_totals_exact() -> None:
    ledger = ShiftLedger()
    ledger.start(Decimal("0"))
    shift = ledger.record_sale(_sale("18.40", "SPLIT", split_cash=Decimal("10.00"), split_card=Decimal("8.41")))

    assert shift is not None
    assert shift.card_revenue == Decimal("8.41")
    assert shift.cash_revenue == Decimal("9.99")
    assert shift.cash_revenue + shift.card_revenue + shift.credit_revenue == shift.total_revenue


@pytest.mark.parametrize("amount", ["NaN", "Infinity", "-Infinity"])
def test_non_finite_amounts_are_rejected(amount: str) -> None:
    ledger = ShiftLedger()
    with pytest.raises(ValidationError):
        ledger.start(Decimal(amount))
    ledger.start(Decimal("0"))
    with pytest.raises(ValidationError):
        ledger.record_return(Decimal(amount))
