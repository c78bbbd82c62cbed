from __future__ import annotations

import logging

from tillpoint_sdk import ApiSession, Customer, Product, to_user_facing_error
from tillpoint_sdk.exceptions import ApiError, NotFoundError

from ..domain.errors import NetworkError, ProductInactiveError

logger = logging.getLogger(__name__)

MIN_SEARCH_LENGTH = 2
SEARCH_LIMIT = 10


class LookupService:
    """Catalog and customer lookups for the checkout screen."""

    def __init__(self, session: ApiSession) -> None:
        self.session = session
        self._customers: list[Customer] | None = None

    def by_barcode(self, barcode: str) -> Product | None:
        cleaned = (barcode or "").strip()
        if not cleaned:
            return None
        try:
            product = self.session.products_client().get_by_barcode(cleaned)
        except NotFoundError:
            logger.info("barcode_not_found", extra={"barcode": cleaned})
            return None
        except ApiError as exc:
            raise self._normalize_error(exc) from exc
        if not product.is_active:
            raise ProductInactiveError(f"{product.name} is inactive and cannot be sold")
        return product

    def search(self, query: str, limit: int = SEARCH_LIMIT) -> list[Product]:
        cleaned = (query or "").strip()
        if len(cleaned) < MIN_SEARCH_LENGTH:
            return []
        try:
            response = self.session.products_client().search(cleaned, limit=limit)
        except ApiError as exc:
            raise self._normalize_error(exc) from exc
        return [product for product in response.products if product.is_active][:limit]

    def customers(self, query: str = "", refresh: bool = False) -> list[Customer]:
        if self._customers is None or refresh:
            try:
                self._customers = list(self.session.customers_client().list_customers().customers)
            except ApiError as exc:
                raise self._normalize_error(exc) from exc
        needle = (query or "").strip().lower()
        if not needle:
            return list(self._customers)
        return [customer for customer in self._customers if _customer_matches(customer, needle)]

    @staticmethod
    def _normalize_error(exc: ApiError) -> NetworkError:
        friendly = to_user_facing_error(exc)
        return NetworkError(code=exc.code, message=friendly.message, details=friendly.details, trace_id=exc.trace_id)


def _customer_matches(customer: Customer, needle: str) -> bool:
    haystack = (customer.name, customer.phone or "", customer.email or "")
    return any(needle in value.lower() for value in haystack)
