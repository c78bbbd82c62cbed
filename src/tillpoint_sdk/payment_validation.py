from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping

from .models_sales import PaymentIntent

MONEY_EPSILON = Decimal("0.01")


@dataclass(frozen=True)
class PaymentValidationIssue:
    field: str
    reason: str
    code: str


@dataclass(frozen=True)
class PaymentTotals:
    total_due: Decimal
    tendered: Decimal
    missing_amount: Decimal
    change_due: Decimal


@dataclass(frozen=True)
class PaymentValidationResult:
    ok: bool
    issues: list[PaymentValidationIssue]
    intent: PaymentIntent | None = None

    @property
    def code(self) -> str | None:
        return self.issues[0].code if self.issues else None


def money_equal(left: Decimal, right: Decimal, epsilon: Decimal = MONEY_EPSILON) -> bool:
    return abs(left - right) <= epsilon


def compute_tender_totals(total_due: Decimal, tendered: Decimal) -> PaymentTotals:
    missing_amount = max(total_due - tendered, Decimal("0.00"))
    change_due = max(tendered - total_due, Decimal("0.00"))
    return PaymentTotals(
        total_due=total_due,
        tendered=tendered,
        missing_amount=missing_amount,
        change_due=change_due,
    )


def _coerce_intent(intent: PaymentIntent | Mapping[str, Any]) -> PaymentIntent:
    if isinstance(intent, PaymentIntent):
        return intent
    payload = dict(intent)
    if payload.get("method"):
        payload["method"] = str(payload["method"]).upper()
    return PaymentIntent.model_validate(payload)


def validate_payment_intent(
    *,
    line_count: int,
    has_customer: bool,
    total_due: Decimal | float | str,
    intent: PaymentIntent | Mapping[str, Any],
    epsilon: Decimal = MONEY_EPSILON,
) -> PaymentValidationResult:
    """Check method-specific preconditions for settling a cart.

    Every failing rule is reported; ``result.code`` is the first one, in the
    order empty cart, customer, split reconciliation.
    """
    normalized = _coerce_intent(intent)
    issues: list[PaymentValidationIssue] = []
    if line_count <= 0:
        issues.append(PaymentValidationIssue(field="lines", reason="cart is empty", code="EMPTY_CART"))
    if normalized.method in {"CREDIT", "SPLIT"} and not has_customer:
        issues.append(
            PaymentValidationIssue(
                field="customer",
                reason=f"a customer is required for {normalized.method} payments",
                code="CUSTOMER_REQUIRED",
            )
        )
    if normalized.method == "SPLIT":
        split_cash = normalized.split_cash or Decimal("0")
        split_card = normalized.split_card or Decimal("0")
        if split_cash < 0 or split_card < 0:
            issues.append(
                PaymentValidationIssue(field="split", reason="split amounts must be >= 0", code="SPLIT_MISMATCH")
            )
        elif not money_equal(split_cash + split_card, Decimal(str(total_due)), epsilon):
            issues.append(
                PaymentValidationIssue(
                    field="split",
                    reason=f"cash + card must equal {Decimal(str(total_due)):.2f}, got {split_cash + split_card:.2f}",
                    code="SPLIT_MISMATCH",
                )
            )
    return PaymentValidationResult(ok=not issues, issues=issues, intent=normalized)
