from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from time import perf_counter
from typing import Any, Callable, Mapping, Sequence

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from tillpoint_sdk import Customer, PaymentIntent, Product, UserResponse

from ...domain.calculator import to_display
from ...domain.errors import (
    CheckoutError,
    ConfirmationRequired,
    PermissionDeniedError,
    ProductInactiveError,
    StorageError,
    SubmissionInProgressError,
    ValidationError,
)
from ...domain.models import Discount, HeldSale, StockWarning
from ...services.channel_store import ChannelStore
from ...services.hold_service import HoldService
from ...services.lookup_service import LookupService
from ...services.price_override import PriceOverrideAuthority
from ...services.returns_service import ReturnsService
from ...services.settlement_service import SettlementService
from ...services.stock_guard import StockGuard
from ...telemetry.events import build_event
from ...telemetry.logger import TelemetryLogger
from ..shared.error_presenter import ErrorPresenter
from ..shared.notification_center import NotificationCenter
from .components.cart_table import CartTable
from .payment_dialog import PaymentDialog

logger = logging.getLogger(__name__)

_DISCOUNT_ADAPTER: TypeAdapter[Discount] = TypeAdapter(Discount)


@dataclass
class PendingAdd:
    channel_id: str
    product: Product
    quantity: int
    warning: StockWarning


@dataclass
class CheckoutView:
    channels: ChannelStore
    holds: HoldService
    settlement: SettlementService
    lookup: LookupService
    price_override: PriceOverrideAuthority
    returns: ReturnsService
    stock_guard: StockGuard = field(default_factory=StockGuard)
    user: UserResponse | None = None
    telemetry: TelemetryLogger | None = None
    presenter: ErrorPresenter = field(default_factory=ErrorPresenter)
    notifications: NotificationCenter = field(default_factory=NotificationCenter)
    pending: PendingAdd | None = None
    last_receipt: dict[str, Any] | None = None
    error_message: str | None = None
    trace_id: str | None = None
    is_submitting: bool = False

    # cart

    def scan(self, barcode: str, quantity: int = 1) -> dict[str, Any]:
        def action() -> dict[str, Any]:
            product = self.lookup.by_barcode(barcode)
            if product is None:
                raise ValidationError(code="PRODUCT_NOT_FOUND", message=f"No product found for barcode {barcode}")
            return self._add(product, quantity)

        return self._run("scan", action)

    def add_product(self, product: Product, quantity: int = 1) -> dict[str, Any]:
        return self._run("add_product", lambda: self._add(product, quantity))

    def add_anyway(self) -> dict[str, Any]:
        pending = self.pending
        if pending is None:
            return {"ok": False, "error": "Nothing is waiting for confirmation", "code": "NO_PENDING_ADD", "category": "conflict"}

        def action() -> dict[str, Any]:
            self.channels.add_line(pending.channel_id, pending.product, pending.quantity)
            self.pending = None
            return self._cart_result(pending.channel_id)

        return self._run("add_anyway", action)

    def cancel_pending(self) -> dict[str, Any]:
        self.pending = None
        return {"ok": True}

    def add_ad_hoc(self, name: str, unit_price: Decimal, quantity: int = 1, tax_rate: Decimal = Decimal("0")) -> dict[str, Any]:
        def action() -> dict[str, Any]:
            channel_id = self.channels.active.id
            self.channels.add_ad_hoc_line(channel_id, name, unit_price, quantity, tax_rate)
            return self._cart_result(channel_id)

        return self._run("add_ad_hoc", action)

    def set_quantity(self, line_id: str, quantity: int) -> dict[str, Any]:
        return self._on_active("set_quantity", lambda channel_id: self.channels.set_quantity(channel_id, line_id, quantity))

    def remove_line(self, line_id: str) -> dict[str, Any]:
        return self._on_active("remove_line", lambda channel_id: self.channels.remove_line(channel_id, line_id))

    def clear_cart(self) -> dict[str, Any]:
        return self._on_active("clear_cart", self.channels.clear)

    def search(self, query: str) -> dict[str, Any]:
        def action() -> dict[str, Any]:
            products = self.lookup.search(query)
            return {"ok": True, "products": [_product_row(product) for product in products]}

        return self._run("search", action)

    def find_customers(self, query: str = "", refresh: bool = False) -> dict[str, Any]:
        def action() -> dict[str, Any]:
            customers = self.lookup.customers(query, refresh=refresh)
            return {"ok": True, "customers": [customer.model_dump(mode="json") for customer in customers]}

        return self._run("find_customers", action)

    def assign_customer(self, customer: Customer | None) -> dict[str, Any]:
        return self._on_active("assign_customer", lambda channel_id: self.channels.assign_customer(channel_id, customer))

    def apply_discount(self, discount: Discount | Mapping[str, Any]) -> dict[str, Any]:
        def action() -> dict[str, Any]:
            try:
                parsed = discount if not isinstance(discount, Mapping) else _DISCOUNT_ADAPTER.validate_python(discount)
            except PydanticValidationError as exc:
                raise ValidationError(code="INVALID_DISCOUNT", message="Discount is not valid", details=exc.errors()) from exc
            channel_id = self.channels.active.id
            self.channels.apply_discount(channel_id, parsed)
            return self._cart_result(channel_id)

        return self._run("apply_discount", action)

    def remove_discount(self) -> dict[str, Any]:
        return self._on_active("remove_discount", self.channels.remove_discount)

    # channels

    def new_channel(self) -> dict[str, Any]:
        def action() -> dict[str, Any]:
            channel = self.channels.add_channel()
            self.pending = None
            return self._cart_result(channel.id)

        return self._run("new_channel", action)

    def close_channel(self, channel_id: str, confirmed: bool = False) -> dict[str, Any]:
        def action() -> dict[str, Any]:
            active = self.channels.close_channel(channel_id, confirmed=confirmed)
            if self.pending is not None and self.pending.channel_id == channel_id:
                self.pending = None
            return self._cart_result(active.id)

        return self._run("close_channel", action)

    def switch_channel(self, channel_id: str) -> dict[str, Any]:
        def action() -> dict[str, Any]:
            channel = self.channels.switch_active(channel_id)
            self._emit("navigation", "channel_switched", "switch_channel", success=True)
            return self._cart_result(channel.id)

        return self._run("switch_channel", action)

    # price override

    def override_price(self, line_id: str, new_price: Decimal, reason: str) -> dict[str, Any]:
        def action() -> dict[str, Any]:
            channel = self.channels.active
            line = channel.line(line_id)
            if line is None:
                raise ValidationError(code="UNKNOWN_LINE", message=f"Cart line {line_id} does not exist")
            outcome = self.price_override.apply(self.user, line, new_price, reason)
            self.channels.replace_line(channel.id, outcome.line)
            self._emit(
                "checkout",
                "price_override",
                "override_price",
                success=True,
                context={"product_id": line.product_id, "has_audit_warning": outcome.warning is not None},
            )
            result = self._cart_result(channel.id)
            if outcome.warning:
                self.notifications.push(level="warning", title="Audit", message=outcome.warning)
                result["warning"] = outcome.warning
            return result

        return self._run("override_price", action)

    # hold / restore

    def hold(self) -> dict[str, Any]:
        def action() -> dict[str, Any]:
            held = self.holds.hold(self.channels.active.id)
            result = self._cart_result(self.channels.active.id)
            result["held"] = _held_row(held)
            return result

        return self._run("hold", action)

    def restore(self, held_id: str, confirmed: bool = False) -> dict[str, Any]:
        def action() -> dict[str, Any]:
            active = self.channels.active
            if not active.is_empty and not confirmed:
                raise ConfirmationRequired(
                    code="RESTORE_OVERWRITES_CART",
                    message=f"{active.display_name} already has items. Replace them with the held sale?",
                    details={"held_id": held_id},
                )
            outcome = self.holds.restore(held_id, active.id)
            result = self._cart_result(active.id)
            result["stock_warnings"] = [
                {**warning.model_dump(mode="json"), "message": warning.message} for warning in outcome.warnings
            ]
            return result

        return self._run("restore", action)

    def delete_held(self, held_id: str, confirmed: bool = False) -> dict[str, Any]:
        def action() -> dict[str, Any]:
            held = self.holds.get(held_id)
            if not confirmed:
                raise ConfirmationRequired(
                    code="DELETE_HELD_SALE",
                    message=f"Delete the held sale from {held.channel_name}? This cannot be undone.",
                    details={"held_id": held_id},
                )
            self.holds.delete_held(held_id)
            return {"ok": True, "held_sales": [_held_row(entry) for entry in self.holds.list_held()]}

        return self._run("delete_held", action)

    # settlement

    def payment_dialog(self, method: str = "CASH") -> PaymentDialog:
        channel = self.channels.active
        totals = self.channels.totals(channel.id)
        return PaymentDialog(
            total_due=to_display(totals.total),
            line_count=len(channel.lines),
            has_customer=channel.customer is not None,
            method=method,
        )

    def pay(self, intent: PaymentIntent | Mapping[str, Any]) -> dict[str, Any]:
        return self._settle("pay", lambda channel_id: self.settlement.submit(channel_id, intent))

    def quick_cash(self) -> dict[str, Any]:
        return self._settle("quick_cash", self.settlement.quick_cash_sale)

    def process_return(self, sale_id: str, items: Sequence[Mapping[str, Any]], refund_amount: Decimal) -> dict[str, Any]:
        def action() -> dict[str, Any]:
            outcome = self.returns.submit_return(sale_id, items, refund_amount)
            self.notifications.push(level="success", title="Return", message=f"Refunded {to_display(outcome.refund_amount)}")
            result: dict[str, Any] = {"ok": True, "refund_amount": to_display(outcome.refund_amount), "return_id": outcome.response.id}
            for warning in outcome.warnings:
                self.notifications.push(level="warning", title="Return", message=warning)
            if outcome.warnings:
                result["warnings"] = list(outcome.warnings)
            return result

        return self._run("process_return", action)

    # render

    def render(self) -> dict[str, Any]:
        state = self.channels.state
        frequent = self.channels.frequent.items() if self.channels.frequent is not None else []
        return {
            "channels": [
                {
                    "id": channel.id,
                    "name": channel.display_name,
                    "is_active": channel.id == state.active_id,
                    "line_count": len(channel.lines),
                }
                for channel in state.channels
            ],
            "cart": CartTable(self.channels.active).render(),
            "held_sales": [_held_row(held) for held in self.holds.list_held()],
            "frequent_products": [_product_row(product) for product in frequent],
            "pending_warning": self._pending_payload(),
            "can_override_price": self._can_override(),
            "is_submitting": self.is_submitting,
            "last_receipt": self.last_receipt,
            "notifications": self.notifications.render(),
            "error": self.error_message,
            "trace_id": self.trace_id,
        }

    # internals

    def _add(self, product: Product, quantity: int) -> dict[str, Any]:
        channel_id = self.channels.active.id
        if not product.is_active:
            raise ProductInactiveError(f"{product.name} is inactive and cannot be sold")
        warning = self.stock_guard.evaluate(product)
        if warning is not None:
            self.pending = PendingAdd(channel_id=channel_id, product=product, quantity=quantity, warning=warning)
            raise ConfirmationRequired(
                code="OUT_OF_STOCK" if warning.out_of_stock else "LOW_STOCK",
                message=warning.message,
                details=warning.model_dump(mode="json"),
            )
        self.channels.add_line(channel_id, product, quantity)
        return self._cart_result(channel_id)

    def _on_active(self, action: str, mutate: Callable[[str], Any]) -> dict[str, Any]:
        def run() -> dict[str, Any]:
            channel_id = self.channels.active.id
            mutate(channel_id)
            return self._cart_result(channel_id)

        return self._run(action, run)

    def _settle(self, action: str, submit: Callable[[str], Any]) -> dict[str, Any]:
        if self.is_submitting:
            return self._error_result(SubmissionInProgressError(self.channels.active.id), action)
        channel_id = self.channels.active.id
        self.is_submitting = True
        started = perf_counter()
        try:
            outcome = submit(channel_id)
        except CheckoutError as exc:
            self._emit(
                "checkout",
                "sale_result",
                action,
                success=False,
                error_code=exc.code,
                trace_id=exc.trace_id,
                duration_ms=int((perf_counter() - started) * 1000),
            )
            return self._error_result(exc, action)
        except OSError as exc:
            return self._error_result(self._storage_error(exc, action), action)
        finally:
            self.is_submitting = False
        self.last_receipt = outcome.receipt.model_dump(mode="json")
        self.error_message = None
        self._emit(
            "checkout",
            "sale_result",
            action,
            success=True,
            duration_ms=int((perf_counter() - started) * 1000),
            context={"sale_id": outcome.receipt.sale_id, "payment_method": outcome.receipt.payment_method},
        )
        self.notifications.push(level="success", title="Sale", message=f"Sale {outcome.receipt.sale_id} completed")
        result = self._cart_result(channel_id)
        result["receipt"] = self.last_receipt
        for warning in outcome.warnings:
            self.notifications.push(level="warning", title="Sale", message=warning)
        if outcome.warnings:
            result["warnings"] = list(outcome.warnings)
        return result

    def _run(self, action: str, fn: Callable[[], dict[str, Any]]) -> dict[str, Any]:
        try:
            result = fn()
        except CheckoutError as exc:
            return self._error_result(exc, action)
        except OSError as exc:
            return self._error_result(self._storage_error(exc, action), action)
        self.error_message = None
        return result

    @staticmethod
    def _storage_error(exc: OSError, action: str) -> StorageError:
        logger.exception("local_store_write_failed", extra={"action": action})
        return StorageError(details=str(exc))

    def _error_result(self, exc: CheckoutError, action: str) -> dict[str, Any]:
        presented = self.presenter.present_exception(exc, action=action)
        payload: dict[str, Any] = {
            "ok": False,
            "error": exc.message,
            "code": exc.code,
            "category": presented.category,
            "trace_id": exc.trace_id,
            "details": exc.details,
        }
        if isinstance(exc, ConfirmationRequired):
            payload["confirmation_required"] = True
            return payload
        self.error_message = exc.message
        self.trace_id = exc.trace_id
        payload["safe_to_retry"] = presented.safe_to_retry
        if isinstance(exc, PermissionDeniedError):
            self._emit("permission_denied", "permission_denied", action, success=False, error_code=exc.code)
            self.notifications.push(level="error", title="Not allowed", message=exc.message)
        logger.info("checkout_action_failed", extra={"action": action, "error_code": exc.code})
        return payload

    def _cart_result(self, channel_id: str) -> dict[str, Any]:
        return {"ok": True, "cart": CartTable(self.channels.channel(channel_id)).render()}

    def _pending_payload(self) -> dict[str, Any] | None:
        if self.pending is None:
            return None
        return {**self.pending.warning.model_dump(mode="json"), "message": self.pending.warning.message}

    def _can_override(self) -> bool:
        try:
            self.price_override.authorize(self.user)
        except PermissionDeniedError:
            return False
        return True

    def _emit(
        self,
        category: str,
        name: str,
        action: str,
        *,
        success: bool | None = None,
        error_code: str | None = None,
        trace_id: str | None = None,
        duration_ms: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        if self.telemetry is None:
            return
        self.telemetry.emit(
            build_event(
                category=category,
                name=name,
                module="checkout",
                action=action,
                success=success,
                error_code=error_code,
                trace_id=trace_id,
                duration_ms=duration_ms,
                context=context,
            )
        )


def _product_row(product: Product) -> dict[str, Any]:
    return {
        "id": product.id,
        "barcode": product.barcode,
        "name": product.name,
        "unit_price": to_display(product.unit_price),
        "stock_quantity": product.stock_quantity,
    }


def _held_row(held: HeldSale) -> dict[str, Any]:
    return {
        "id": held.id,
        "channel_name": held.channel_name,
        "line_count": len(held.lines),
        "customer": held.customer.name if held.customer else None,
        "total": to_display(held.total),
        "parked_at": held.parked_at.isoformat(),
    }
