from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

PaymentMethod = Literal["CASH", "CARD", "CREDIT", "SPLIT"]
WirePaymentMethod = Literal["CASH", "CARD", "CREDIT"]


class PaymentIntent(BaseModel):
    model_config = ConfigDict(frozen=True)

    method: PaymentMethod
    split_cash: Decimal | None = None
    split_card: Decimal | None = None


class SplitPayment(BaseModel):
    model_config = ConfigDict(frozen=True)

    cash: Decimal
    card: Decimal


class SaleItemCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    product_id: str | None = Field(default=None, alias="productId")
    quantity: int
    unit_price: Decimal = Field(alias="unitPrice")
    tax_rate: Decimal = Field(default=Decimal("0"), alias="taxRate")
    name: str | None = None


class SaleCommitRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    customer_id: str | None = Field(default=None, alias="customerId")
    items: list[SaleItemCreate]
    payment_method: WirePaymentMethod = Field(alias="paymentMethod")
    subtotal: Decimal
    discount_amount: Decimal = Field(default=Decimal("0"), alias="discountAmount")
    tax_amount: Decimal = Field(default=Decimal("0"), alias="taxAmount")
    total: Decimal
    split_payment: SplitPayment | None = Field(default=None, alias="splitPayment")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class SaleCommitResponse(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    sale_number: str | None = Field(default=None, alias="saleNumber")
    created_at: datetime | None = Field(default=None, alias="createdAt")

    @model_validator(mode="before")
    @classmethod
    def _unwrap_sale(cls, data: Any) -> Any:
        # POST /sales answers {"message": ..., "sale": {...}}; older builds return the sale itself
        if isinstance(data, dict) and "id" not in data and isinstance(data.get("sale"), dict):
            return data["sale"]
        return data


class ReturnItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    sale_item_id: str = Field(alias="saleItemId")
    quantity: int = Field(gt=0)


class ReturnRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    sale_id: str = Field(alias="saleId")
    items: list[ReturnItem] = Field(min_length=1)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ReturnResponse(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str | None = None
    refund_total: Decimal | None = Field(default=None, alias="refundTotal")


class PriceOverrideAudit(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    user_id: str = Field(alias="userId")
    username: str | None = None
    product_id: str | None = Field(default=None, alias="productId")
    product_name: str | None = Field(default=None, alias="productName")
    old_price: Decimal = Field(alias="oldPrice")
    new_price: Decimal = Field(alias="newPrice")
    reason: str
    timestamp: datetime

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
