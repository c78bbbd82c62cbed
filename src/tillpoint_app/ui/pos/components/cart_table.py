from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ....domain.calculator import compute_totals, to_display
from ....domain.models import Channel


@dataclass
class CartTable:
    channel: Channel

    def render(self) -> dict[str, Any]:
        totals = compute_totals(self.channel.lines, self.channel.discount)
        rows = [
            {
                "line_id": line.line_id,
                "name": line.name,
                "barcode": line.barcode,
                "quantity": line.quantity,
                "unit_price": to_display(line.unit_price),
                "line_total": to_display(line.line_total),
                "tax_rate": line.tax_rate,
                "is_ad_hoc": line.is_ad_hoc,
                "price_overridden": line.is_overridden,
            }
            for line in self.channel.lines
        ]
        return {
            "channel_id": self.channel.id,
            "channel_name": self.channel.display_name,
            "customer": self.channel.customer.name if self.channel.customer else None,
            "count": len(rows),
            "item_count": totals.item_count,
            "rows": rows,
            "subtotal": to_display(totals.subtotal),
            "tax_amount": to_display(totals.tax_amount),
            "discount_amount": to_display(totals.discount_amount),
            "discount_label": totals.discount_label,
            "total": to_display(totals.total),
        }
