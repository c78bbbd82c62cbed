from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from tillpoint_sdk import MONEY_EPSILON, PaymentIntent, PaymentTotals, compute_tender_totals, validate_payment_intent

from .components.payment_summary_bar import PaymentSummaryBar


@dataclass
class PaymentDialog:
    total_due: Decimal
    line_count: int
    has_customer: bool = False
    method: str = "CASH"
    tendered: Decimal | None = None
    split_cash: Decimal | None = None
    split_card: Decimal | None = None
    epsilon: Decimal = MONEY_EPSILON
    issues: list[str] = field(default_factory=list)

    def intent(self) -> PaymentIntent:
        if self.method == "SPLIT":
            return PaymentIntent(method="SPLIT", split_cash=self.split_cash, split_card=self.split_card)
        return PaymentIntent(method=self.method)

    def validate(self) -> bool:
        result = validate_payment_intent(
            line_count=self.line_count,
            has_customer=self.has_customer,
            total_due=self.total_due,
            intent=self.intent(),
            epsilon=self.epsilon,
        )
        self.issues = [f"{issue.field}: {issue.reason}" for issue in result.issues]
        return result.ok

    def tender_totals(self) -> PaymentTotals:
        if self.method == "SPLIT":
            tendered = (self.split_cash or Decimal("0")) + (self.split_card or Decimal("0"))
        elif self.method == "CASH" and self.tendered is not None:
            tendered = self.tendered
        else:
            # card and credit settle the exact amount
            tendered = self.total_due
        return compute_tender_totals(self.total_due, tendered)

    def render(self) -> dict[str, Any]:
        totals = self.tender_totals()
        return {
            "method": self.method,
            "issues": self.issues,
            "covers_total": totals.missing_amount <= self.epsilon,
            "summary": PaymentSummaryBar(totals, method=self.method).render(),
        }
