from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote

from ..models_catalog import Product, ProductListResponse
from .base import BaseClient


@dataclass
class ProductsClient(BaseClient):
    def get_by_barcode(self, barcode: str) -> Product:
        data = self._request(
            "GET",
            f"/products/barcode/{quote(barcode.strip(), safe='')}",
            module="products",
            operation="get_by_barcode",
        )
        if not isinstance(data, dict):
            raise ValueError("Expected product response to be a JSON object")
        return Product.model_validate(data.get("product", data))

    def search(self, query: str, limit: int = 10) -> ProductListResponse:
        data = self._request(
            "GET",
            "/products",
            params={"search": query, "limit": limit},
            module="products",
            operation="search",
        )
        if isinstance(data, list):
            return ProductListResponse(products=[Product.model_validate(row) for row in data])
        if not isinstance(data, dict):
            raise ValueError("Expected product search response to be a JSON object")
        return ProductListResponse.model_validate(data)
