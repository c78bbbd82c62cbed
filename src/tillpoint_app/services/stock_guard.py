from __future__ import annotations

from dataclasses import dataclass

from tillpoint_sdk import Product

from ..domain.models import StockWarning

LOW_STOCK_THRESHOLD = 10


@dataclass(frozen=True)
class StockGuard:
    """Gates low-stock inserts behind an explicit "add anyway" confirmation.

    The guard never blocks; it only tells the caller to ask first.
    """

    threshold: int = LOW_STOCK_THRESHOLD

    def evaluate(self, product: Product, skip: bool = False) -> StockWarning | None:
        if skip:
            return None
        if product.stock_quantity > self.threshold:
            return None
        return StockWarning(
            product_id=product.id,
            product_name=product.name,
            stock_quantity=product.stock_quantity,
            out_of_stock=product.stock_quantity <= 0,
        )
