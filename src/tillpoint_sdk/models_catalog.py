from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class Product(BaseModel):
    """Catalog product as served by the backend.

    The engine treats products as read-only references; cart lines copy the
    fields they need at insertion time.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    id: str
    barcode: str | None = None
    name: str
    unit_price: Decimal = Field(default=Decimal("0"), alias="sellPrice")
    stock_quantity: int = Field(default=0, alias="stock")
    tax_rate: Decimal = Field(default=Decimal("0"), alias="taxRate")
    is_active: bool = Field(default=True, alias="isActive")


class ProductListResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    products: list[Product] = Field(default_factory=list)


class Customer(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    id: str
    name: str
    phone: str | None = None
    email: str | None = None
    debt: Decimal = Decimal("0")


class CustomerListResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    customers: list[Customer] = Field(default_factory=list)
