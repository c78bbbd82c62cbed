from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ....domain.calculator import to_display
from ....domain.models import ZReport


@dataclass
class ZReportPanel:
    report: ZReport

    def render(self) -> dict[str, Any]:
        shift = self.report.shift
        return {
            "shift_id": shift.id,
            "opened_at": shift.opened_at.isoformat(),
            "closed_at": shift.closed_at.isoformat() if shift.closed_at else None,
            "sales_count": shift.sales_count,
            "return_count": shift.return_count,
            "opening_float": to_display(shift.opening_float),
            "total_revenue": to_display(shift.total_revenue),
            "cash_revenue": to_display(shift.cash_revenue),
            "card_revenue": to_display(shift.card_revenue),
            "credit_revenue": to_display(shift.credit_revenue),
            "total_discounts": to_display(shift.total_discounts),
            "total_refunds": to_display(shift.total_refunds),
            "expected_cash": to_display(self.report.expected_cash),
            "closing_count": to_display(shift.closing_count) if shift.closing_count is not None else None,
            "variance": to_display(self.report.variance),
            "is_balanced": self.report.is_balanced,
            "status": "BALANCED" if self.report.is_balanced else ("OVER" if self.report.variance > 0 else "SHORT"),
        }
