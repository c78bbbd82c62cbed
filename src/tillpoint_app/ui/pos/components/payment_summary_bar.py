from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from tillpoint_sdk import PaymentTotals


@dataclass
class PaymentSummaryBar:
    totals: PaymentTotals
    method: str = "CASH"

    def render(self) -> dict[str, Any]:
        return {
            "method": self.method,
            "total_due": self.totals.total_due,
            "tendered": self.totals.tendered,
            "missing_amount": self.totals.missing_amount,
            "change_due": self.totals.change_due,
            "is_fully_paid": self.totals.missing_amount == Decimal("0"),
        }
