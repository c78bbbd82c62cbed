from __future__ import annotations

from decimal import Decimal

import pytest

from checkout_fakes import make_product
from tillpoint_app.domain.calculator import compute_totals, discount_amount, subtotal, tax_portion, to_display
from tillpoint_app.domain.models import CampaignDiscount, CartLine, FixedDiscount, PercentageDiscount


def _lines() -> list[CartLine]:
    return [
        CartLine.from_product(make_product("p-1", price="10.00", tax_rate="18"), 2),
        CartLine.from_product(make_product("p-2", price="5.50", tax_rate="8"), 1),
    ]


def test_subtotal_and_tax_inclusive_portion() -> None:
    lines = _lines()
    assert subtotal(lines) == Decimal("25.50")
    expected_tax = Decimal("20.00") * 18 / 118 + Decimal("5.50") * 8 / 108
    assert tax_portion(lines) == expected_tax
    assert to_display(tax_portion(lines)) == Decimal("3.46")


def test_zero_tax_rate_contributes_nothing() -> None:
    line = CartLine.from_product(make_product(tax_rate="0"), 3)
    assert tax_portion([line]) == Decimal("0")


@pytest.mark.parametrize(
    ("discount", "expected"),
    [
        (PercentageDiscount(value=Decimal("10")), Decimal("2.55")),
        (PercentageDiscount(value=Decimal("100")), Decimal("25.50")),
        (FixedDiscount(value=Decimal("5")), Decimal("5")),
        (FixedDiscount(value=Decimal("99")), Decimal("25.50")),
        (CampaignDiscount(code="SPRING", amount=Decimal("3")), Decimal("3")),
        (None, Decimal("0")),
    ],
)
def test_discount_amount_stays_within_subtotal(discount, expected: Decimal) -> None:
    amount = discount_amount(Decimal("25.50"), discount)
    assert amount == expected
    assert Decimal("0") <= amount <= Decimal("25.50")


def test_discount_on_empty_cart_is_zero() -> None:
    assert discount_amount(Decimal("0"), FixedDiscount(value=Decimal("5"))) == Decimal("0")


def test_compute_totals_rounds_only_at_display() -> None:
    lines = [CartLine.from_product(make_product(price="0.335", tax_rate="0"), 3)]
    totals = compute_totals(lines, PercentageDiscount(value=Decimal("10")))

    assert totals.subtotal == Decimal("1.005")
    assert totals.discount_amount == Decimal("0.1005")
    assert totals.total == Decimal("0.9045")
    assert to_display(totals.total) == Decimal("0.90")
    assert totals.item_count == 3
    assert totals.discount_label == "10% discount"


def test_campaign_label_prefers_description() -> None:
    assert CampaignDiscount(code="X1", amount=Decimal("1")).label == "Campaign: X1"
    assert CampaignDiscount(code="X1", amount=Decimal("1"), description="Spring sale").label == "Spring sale"
