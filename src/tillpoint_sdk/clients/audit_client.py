from __future__ import annotations

from dataclasses import dataclass

from ..models_sales import PriceOverrideAudit
from .base import BaseClient


@dataclass
class AuditClient(BaseClient):
    def record_price_override(self, record: PriceOverrideAudit) -> None:
        self._request(
            "POST",
            "/audit/price-overrides",
            json_body=record.to_wire(),
            module="audit",
            operation="price_override",
        )
