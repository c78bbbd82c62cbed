from __future__ import annotations

import logging
from collections import OrderedDict

from pydantic import ValidationError as PydanticValidationError

from tillpoint_sdk import LocalStore, Product

logger = logging.getLogger(__name__)

FREQUENT_PRODUCTS_KEY = "frequent_products"
FREQUENT_PRODUCTS_VERSION = 1


class FrequentProducts:
    """Most-recently-used products, newest first, for the quick-pick strip."""

    def __init__(self, store: LocalStore | None = None, limit: int = 6) -> None:
        if limit < 1:
            raise ValueError("limit must be >= 1")
        self.store = store
        self.limit = limit
        self._entries: OrderedDict[str, Product] = OrderedDict()
        self._load()

    def touch(self, product: Product) -> None:
        self._entries.pop(product.id, None)
        self._entries[product.id] = product
        self._entries.move_to_end(product.id, last=False)
        while len(self._entries) > self.limit:
            self._entries.popitem(last=True)
        self._save()

    def items(self) -> list[Product]:
        return list(self._entries.values())

    def clear(self) -> None:
        self._entries.clear()
        if self.store is not None:
            self.store.clear(FREQUENT_PRODUCTS_KEY)

    def _load(self) -> None:
        if self.store is None:
            return
        rows = self.store.load(FREQUENT_PRODUCTS_KEY, FREQUENT_PRODUCTS_VERSION) or []
        try:
            products = [Product.model_validate(row) for row in rows]
        except (PydanticValidationError, TypeError):
            logger.warning("frequent_products_discarded", extra={"store_key": FREQUENT_PRODUCTS_KEY})
            self.store.clear(FREQUENT_PRODUCTS_KEY)
            return
        for product in products[: self.limit]:
            self._entries[product.id] = product

    def _save(self) -> None:
        if self.store is None:
            return
        self.store.save(
            FREQUENT_PRODUCTS_KEY,
            FREQUENT_PRODUCTS_VERSION,
            [product.model_dump(mode="json", by_alias=True) for product in self._entries.values()],
        )
