from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from tillpoint_sdk import (
    Customer,
    CustomerListResponse,
    LocalStore,
    PriceOverrideAudit,
    Product,
    ProductListResponse,
    ReturnRequest,
    ReturnResponse,
    SaleCommitRequest,
    SaleCommitResponse,
    UserResponse,
)
from tillpoint_sdk.exceptions import NotFoundError
from tillpoint_app.services.channel_store import ChannelStore
from tillpoint_app.services.frequent_products import FrequentProducts
from tillpoint_app.services.hold_service import HoldService
from tillpoint_app.services.lookup_service import LookupService
from tillpoint_app.services.price_override import PriceOverrideAuthority
from tillpoint_app.services.returns_service import ReturnsService
from tillpoint_app.services.settlement_service import SettlementService
from tillpoint_app.services.shift_ledger import ShiftLedger
from tillpoint_app.services.stock_guard import StockGuard
from tillpoint_app.ui.pos.checkout_view import CheckoutView


def make_product(
    product_id: str = "p-1",
    *,
    name: str = "Tea",
    price: str = "10.00",
    stock: int = 50,
    tax_rate: str = "18",
    active: bool = True,
    barcode: str | None = None,
) -> Product:
    return Product(
        id=product_id,
        barcode=barcode or f"BC-{product_id}",
        name=name,
        sellPrice=Decimal(price),
        stock=stock,
        taxRate=Decimal(tax_rate),
        isActive=active,
    )


def make_customer(customer_id: str = "c-1", name: str = "Ada Lovelace") -> Customer:
    return Customer(id=customer_id, name=name, phone="5550001", email="ada@example.com")


def make_user(role: str = "CASHIER") -> UserResponse:
    return UserResponse(id=f"u-{role.lower()}", username=role.lower(), role=role)


@dataclass
class FakeSalesClient:
    fail: Exception | None = None
    calls: list[SaleCommitRequest] = field(default_factory=list)
    counter: int = 0

    def commit_sale(self, payload: SaleCommitRequest, keys: Any = None) -> SaleCommitResponse:
        self.calls.append(payload)
        if self.fail:
            raise self.fail
        self.counter += 1
        return SaleCommitResponse(id=f"sale-{self.counter}", saleNumber=f"S-{self.counter:04d}")


@dataclass
class FakeProductsClient:
    catalog: dict[str, Product] = field(default_factory=dict)
    search_rows: list[Product] = field(default_factory=list)
    fail: Exception | None = None
    search_calls: list[tuple[str, int]] = field(default_factory=list)

    def get_by_barcode(self, barcode: str) -> Product:
        if self.fail:
            raise self.fail
        if barcode not in self.catalog:
            raise NotFoundError(code="NOT_FOUND", message="Product not found", details=None, trace_id=None, status_code=404)
        return self.catalog[barcode]

    def search(self, query: str, limit: int = 10) -> ProductListResponse:
        self.search_calls.append((query, limit))
        if self.fail:
            raise self.fail
        return ProductListResponse(products=list(self.search_rows))


@dataclass
class FakeCustomersClient:
    rows: list[Customer] = field(default_factory=list)
    calls: int = 0

    def list_customers(self) -> CustomerListResponse:
        self.calls += 1
        return CustomerListResponse(customers=list(self.rows))


@dataclass
class FakeReturnsClient:
    refund_total: Decimal | None = None
    fail: Exception | None = None
    calls: list[ReturnRequest] = field(default_factory=list)

    def submit_return(self, payload: ReturnRequest) -> ReturnResponse:
        self.calls.append(payload)
        if self.fail:
            raise self.fail
        return ReturnResponse(id="ret-1", refundTotal=self.refund_total)


@dataclass
class FakeAuditClient:
    fail: Exception | None = None
    records: list[PriceOverrideAudit] = field(default_factory=list)

    def record_price_override(self, record: PriceOverrideAudit) -> None:
        if self.fail:
            raise self.fail
        self.records.append(record)


@dataclass
class FakeSession:
    sales: FakeSalesClient = field(default_factory=FakeSalesClient)
    products: FakeProductsClient = field(default_factory=FakeProductsClient)
    customers: FakeCustomersClient = field(default_factory=FakeCustomersClient)
    returns: FakeReturnsClient = field(default_factory=FakeReturnsClient)
    audit: FakeAuditClient = field(default_factory=FakeAuditClient)
    user: UserResponse | None = None

    def sales_client(self) -> FakeSalesClient:
        return self.sales

    def products_client(self) -> FakeProductsClient:
        return self.products

    def customers_client(self) -> FakeCustomersClient:
        return self.customers

    def returns_client(self) -> FakeReturnsClient:
        return self.returns

    def audit_client(self) -> FakeAuditClient:
        return self.audit


@dataclass
class Engine:
    session: FakeSession
    store: LocalStore
    channels: ChannelStore
    ledger: ShiftLedger
    holds: HoldService
    settlement: SettlementService
    view: CheckoutView


def build_engine(tmp_path, session: FakeSession | None = None, user: UserResponse | None = None) -> Engine:
    session = session or FakeSession()
    store = LocalStore(base_dir=tmp_path)
    stock_guard = StockGuard()
    channels = ChannelStore(store=store, frequent=FrequentProducts(store=store))
    ledger = ShiftLedger(store=store)
    lookup = LookupService(session)
    holds = HoldService(channels, store=store, stock_guard=stock_guard, lookup=lookup.by_barcode)
    settlement = SettlementService(session, channels, ledger)
    view = CheckoutView(
        channels=channels,
        holds=holds,
        settlement=settlement,
        lookup=lookup,
        price_override=PriceOverrideAuthority(audit_sink=lambda record: session.audit_client().record_price_override(record)),
        returns=ReturnsService(session, ledger),
        stock_guard=stock_guard,
        user=user,
    )
    return Engine(
        session=session,
        store=store,
        channels=channels,
        ledger=ledger,
        holds=holds,
        settlement=settlement,
        view=view,
    )
