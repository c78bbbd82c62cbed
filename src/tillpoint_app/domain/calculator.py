"""Pure money math for a cart.

Prices are tax-inclusive: a line's tax portion is carved out of its total as
``line_total * rate / (100 + rate)``. Nothing here rounds; callers round with
:func:`to_display` when a value leaves the engine (receipt, screen, payload).
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from .models import CampaignDiscount, CartLine, Discount, FixedDiscount, PercentageDiscount

ZERO = Decimal("0")
CENT = Decimal("0.01")


@dataclass(frozen=True)
class CartTotals:
    subtotal: Decimal
    tax_amount: Decimal
    discount_amount: Decimal
    total: Decimal
    discount_label: str | None = None
    item_count: int = 0


def subtotal(lines: Iterable[CartLine]) -> Decimal:
    return sum((line.line_total for line in lines), ZERO)


def tax_portion(lines: Iterable[CartLine]) -> Decimal:
    total_tax = ZERO
    for line in lines:
        rate = line.tax_rate or ZERO
        if rate <= 0:
            continue
        total_tax += line.line_total * rate / (Decimal("100") + rate)
    return total_tax


def discount_amount(cart_subtotal: Decimal, discount: Discount | None) -> Decimal:
    if discount is None or cart_subtotal <= 0:
        return ZERO
    if isinstance(discount, PercentageDiscount):
        return cart_subtotal * discount.value / Decimal("100")
    if isinstance(discount, FixedDiscount):
        return min(discount.value, cart_subtotal)
    if isinstance(discount, CampaignDiscount):
        return min(discount.amount, cart_subtotal)
    raise TypeError(f"Unsupported discount type: {type(discount).__name__}")


def compute_totals(lines: Iterable[CartLine], discount: Discount | None = None) -> CartTotals:
    materialized = list(lines)
    cart_subtotal = subtotal(materialized)
    cart_discount = discount_amount(cart_subtotal, discount)
    return CartTotals(
        subtotal=cart_subtotal,
        tax_amount=tax_portion(materialized),
        discount_amount=cart_discount,
        total=cart_subtotal - cart_discount,
        discount_label=discount.label if discount is not None else None,
        item_count=sum(line.quantity for line in materialized),
    )


def to_display(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)
