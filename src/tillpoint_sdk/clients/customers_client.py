from __future__ import annotations

from dataclasses import dataclass

from ..models_catalog import Customer, CustomerListResponse
from .base import BaseClient


@dataclass
class CustomersClient(BaseClient):
    def list_customers(self) -> CustomerListResponse:
        data = self._request("GET", "/customers", module="customers", operation="list")
        if isinstance(data, list):
            return CustomerListResponse(customers=[Customer.model_validate(row) for row in data])
        if not isinstance(data, dict):
            raise ValueError("Expected customer list response to be a JSON object")
        return CustomerListResponse.model_validate(data)
