from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from tillpoint_sdk.models_catalog import Customer, Product

AD_HOC_BARCODE = "AD_HOC"
AD_HOC_LINE_PREFIX = "adhoc:"


class CartLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    line_id: str
    product_id: str | None = None
    barcode: str | None = None
    name: str
    unit_price: Decimal
    catalog_price: Decimal
    quantity: int = Field(ge=1)
    tax_rate: Decimal = Decimal("0")
    stock_quantity: int | None = None
    is_ad_hoc: bool = False
    line_total: Decimal

    @classmethod
    def from_product(cls, product: Product, quantity: int = 1) -> CartLine:
        return cls(
            line_id=product.id,
            product_id=product.id,
            barcode=product.barcode,
            name=product.name,
            unit_price=product.unit_price,
            catalog_price=product.unit_price,
            quantity=quantity,
            tax_rate=product.tax_rate,
            stock_quantity=product.stock_quantity,
            line_total=product.unit_price * quantity,
        )

    @classmethod
    def ad_hoc(cls, name: str, unit_price: Decimal, quantity: int = 1, tax_rate: Decimal = Decimal("0")) -> CartLine:
        return cls(
            line_id=f"{AD_HOC_LINE_PREFIX}{name}",
            barcode=AD_HOC_BARCODE,
            name=name,
            unit_price=unit_price,
            catalog_price=unit_price,
            quantity=quantity,
            tax_rate=tax_rate,
            is_ad_hoc=True,
            line_total=unit_price * quantity,
        )

    @property
    def merge_key(self) -> tuple[str, bool]:
        if self.is_ad_hoc:
            return (self.name, True)
        return (self.product_id or self.line_id, False)

    @property
    def is_overridden(self) -> bool:
        return self.unit_price != self.catalog_price

    def with_quantity(self, quantity: int) -> CartLine:
        return self.model_copy(update={"quantity": quantity, "line_total": self.unit_price * quantity})

    def with_unit_price(self, unit_price: Decimal) -> CartLine:
        return self.model_copy(update={"unit_price": unit_price, "line_total": unit_price * self.quantity})


class PercentageDiscount(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["percentage"] = "percentage"
    value: Decimal = Field(ge=0, le=100)

    @property
    def label(self) -> str:
        return f"{self.value.normalize():f}% discount"


class FixedDiscount(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["fixed"] = "fixed"
    value: Decimal = Field(ge=0)

    @property
    def label(self) -> str:
        return f"{self.value:.2f} off"


class CampaignDiscount(BaseModel):
    """Campaign code whose amount was resolved by the backend before applying."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["campaignCode"] = "campaignCode"
    code: str = Field(min_length=1)
    amount: Decimal = Field(ge=0)
    description: str | None = None

    @property
    def label(self) -> str:
        return self.description or f"Campaign: {self.code}"


Discount = Annotated[
    Union[PercentageDiscount, FixedDiscount, CampaignDiscount],
    Field(discriminator="kind"),
]


class Channel(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
    lines: tuple[CartLine, ...] = ()
    customer: Customer | None = None
    discount: Discount | None = None

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def line(self, line_id: str) -> CartLine | None:
        return next((line for line in self.lines if line.line_id == line_id), None)


class CheckoutState(BaseModel):
    """All channels of one terminal plus the pointer to the active one."""

    model_config = ConfigDict(frozen=True)

    channels: tuple[Channel, ...]
    active_id: str
    next_number: int = 2

    def channel(self, channel_id: str) -> Channel | None:
        return next((channel for channel in self.channels if channel.id == channel_id), None)

    @property
    def active(self) -> Channel:
        return self.channel(self.active_id) or self.channels[0]


class HeldSale(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    channel_name: str
    lines: tuple[CartLine, ...]
    customer: Customer | None = None
    discount: Discount | None = None
    total: Decimal
    parked_at: datetime


class Shift(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    opened_at: datetime
    closed_at: datetime | None = None
    opening_float: Decimal
    closing_count: Decimal | None = None
    sales_count: int = 0
    total_revenue: Decimal = Decimal("0")
    cash_revenue: Decimal = Decimal("0")
    card_revenue: Decimal = Decimal("0")
    credit_revenue: Decimal = Decimal("0")
    total_discounts: Decimal = Decimal("0")
    return_count: int = 0
    total_refunds: Decimal = Decimal("0")

    @property
    def is_open(self) -> bool:
        return self.closed_at is None

    @property
    def expected_cash(self) -> Decimal:
        return self.opening_float + self.cash_revenue - self.total_refunds


class ZReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    shift: Shift
    expected_cash: Decimal
    variance: Decimal
    is_balanced: bool
    generated_at: datetime


class LedgerSale(BaseModel):
    """What the shift ledger needs to know about a committed sale."""

    model_config = ConfigDict(frozen=True)

    sale_id: str
    total: Decimal
    discount_amount: Decimal = Decimal("0")
    method: Literal["CASH", "CARD", "CREDIT", "SPLIT"]
    split_cash: Decimal | None = None
    split_card: Decimal | None = None


class StockWarning(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: str
    product_name: str
    stock_quantity: int
    out_of_stock: bool

    @property
    def message(self) -> str:
        if self.out_of_stock:
            return f"{self.product_name} is out of stock. Add anyway?"
        return f"Only {self.stock_quantity} left of {self.product_name}. Add anyway?"


class ReceiptLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    price_overridden: bool = False


class Receipt(BaseModel):
    model_config = ConfigDict(frozen=True)

    sale_id: str
    sale_number: str | None = None
    channel_name: str
    customer_name: str | None = None
    lines: tuple[ReceiptLine, ...]
    subtotal: Decimal
    tax_amount: Decimal
    discount_amount: Decimal
    discount_label: str | None = None
    total: Decimal
    payment_method: str
    split_cash: Decimal | None = None
    split_card: Decimal | None = None
    issued_at: datetime


class SaleAttemptStatus(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    REJECTED = "rejected"
    SUBMITTING = "submitting"
    COMMITTED = "committed"
    FAILED = "failed"
