"""Multi-channel cart state.

Module-level functions are the commands: each takes a ``CheckoutState`` and
returns a new one, leaving the input untouched. ``ChannelStore`` holds the
current value and writes it to the local store after every successful command.
"""
from __future__ import annotations

import logging
import uuid
from decimal import Decimal

from pydantic import ValidationError as PydanticValidationError

from tillpoint_sdk import Customer, LocalStore, Product

from ..domain.calculator import CartTotals, compute_totals, subtotal
from ..domain.errors import (
    ConfirmationRequired,
    LastChannelError,
    ProductInactiveError,
    UnknownChannelError,
    UnknownLineError,
    ValidationError,
)
from ..domain.models import (
    CampaignDiscount,
    CartLine,
    Channel,
    CheckoutState,
    Discount,
    FixedDiscount,
    PercentageDiscount,
)
from .frequent_products import FrequentProducts

logger = logging.getLogger(__name__)

CHANNELS_KEY = "channels"
CHANNELS_VERSION = 1


def channel_name(number: int) -> str:
    return f"Customer {number}"


def _new_channel(number: int) -> Channel:
    return Channel(id=uuid.uuid4().hex, display_name=channel_name(number))


def initial_state() -> CheckoutState:
    first = _new_channel(1)
    return CheckoutState(channels=(first,), active_id=first.id, next_number=2)


def _require_channel(state: CheckoutState, channel_id: str) -> Channel:
    channel = state.channel(channel_id)
    if channel is None:
        raise UnknownChannelError(channel_id)
    return channel


def _replace_channel(state: CheckoutState, channel: Channel) -> CheckoutState:
    channels = tuple(channel if existing.id == channel.id else existing for existing in state.channels)
    return state.model_copy(update={"channels": channels})


def _with_lines(channel: Channel, lines: tuple[CartLine, ...] | list[CartLine]) -> Channel:
    return channel.model_copy(update={"lines": tuple(lines)})


def _merge_line(channel: Channel, incoming: CartLine) -> Channel:
    lines = list(channel.lines)
    for index, line in enumerate(lines):
        if line.merge_key == incoming.merge_key:
            lines[index] = line.with_quantity(line.quantity + incoming.quantity)
            return _with_lines(channel, lines)
    lines.append(incoming)
    return _with_lines(channel, lines)


def add_line(state: CheckoutState, channel_id: str, product: Product, quantity: int = 1) -> CheckoutState:
    if quantity < 1:
        raise ValidationError(code="INVALID_QUANTITY", message="Quantity must be at least 1")
    if not product.is_active:
        raise ProductInactiveError(f"{product.name} is inactive and cannot be sold")
    channel = _require_channel(state, channel_id)
    return _replace_channel(state, _merge_line(channel, CartLine.from_product(product, quantity)))


def add_ad_hoc_line(
    state: CheckoutState,
    channel_id: str,
    name: str,
    unit_price: Decimal,
    quantity: int = 1,
    tax_rate: Decimal = Decimal("0"),
) -> CheckoutState:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError(code="INVALID_NAME", message="Item name is required")
    if unit_price < 0:
        raise ValidationError(code="INVALID_PRICE", message="Price must be >= 0")
    if quantity < 1:
        raise ValidationError(code="INVALID_QUANTITY", message="Quantity must be at least 1")
    channel = _require_channel(state, channel_id)
    line = CartLine.ad_hoc(cleaned, unit_price, quantity, tax_rate)
    return _replace_channel(state, _merge_line(channel, line))


def remove_line(state: CheckoutState, channel_id: str, line_id: str) -> CheckoutState:
    channel = _require_channel(state, channel_id)
    if channel.line(line_id) is None:
        raise UnknownLineError(line_id)
    lines = [line for line in channel.lines if line.line_id != line_id]
    return _replace_channel(state, _with_lines(channel, lines))


def set_quantity(state: CheckoutState, channel_id: str, line_id: str, quantity: int) -> CheckoutState:
    if quantity <= 0:
        return remove_line(state, channel_id, line_id)
    channel = _require_channel(state, channel_id)
    if channel.line(line_id) is None:
        raise UnknownLineError(line_id)
    lines = [line.with_quantity(quantity) if line.line_id == line_id else line for line in channel.lines]
    return _replace_channel(state, _with_lines(channel, lines))


def replace_line(state: CheckoutState, channel_id: str, updated: CartLine) -> CheckoutState:
    channel = _require_channel(state, channel_id)
    if channel.line(updated.line_id) is None:
        raise UnknownLineError(updated.line_id)
    lines = [updated if line.line_id == updated.line_id else line for line in channel.lines]
    return _replace_channel(state, _with_lines(channel, lines))


def clear(state: CheckoutState, channel_id: str) -> CheckoutState:
    channel = _require_channel(state, channel_id)
    emptied = channel.model_copy(update={"lines": (), "customer": None, "discount": None})
    return _replace_channel(state, emptied)


def load_into(
    state: CheckoutState,
    channel_id: str,
    lines: tuple[CartLine, ...],
    customer: Customer | None,
    discount: Discount | None,
) -> CheckoutState:
    """Overwrite a channel's cart, customer and discount in one step."""
    channel = _require_channel(state, channel_id)
    loaded = channel.model_copy(update={"lines": tuple(lines), "customer": customer, "discount": discount})
    return _replace_channel(state, loaded)


def add_channel(state: CheckoutState) -> CheckoutState:
    channel = _new_channel(state.next_number)
    return state.model_copy(
        update={
            "channels": (*state.channels, channel),
            "active_id": channel.id,
            "next_number": state.next_number + 1,
        }
    )


def close_channel(state: CheckoutState, channel_id: str, confirmed: bool = False) -> CheckoutState:
    if len(state.channels) <= 1:
        raise LastChannelError()
    channel = _require_channel(state, channel_id)
    if not channel.is_empty and not confirmed:
        raise ConfirmationRequired(
            code="CLOSE_NON_EMPTY_CHANNEL",
            message=f"{channel.display_name} has items in the cart. Close it anyway?",
            details={"channel_id": channel_id, "line_count": len(channel.lines)},
        )
    remaining = tuple(existing for existing in state.channels if existing.id != channel_id)
    active_id = state.active_id if state.active_id != channel_id else remaining[0].id
    return state.model_copy(update={"channels": remaining, "active_id": active_id})


def switch_active(state: CheckoutState, channel_id: str) -> CheckoutState:
    _require_channel(state, channel_id)
    return state.model_copy(update={"active_id": channel_id})


def assign_customer(state: CheckoutState, channel_id: str, customer: Customer | None) -> CheckoutState:
    channel = _require_channel(state, channel_id)
    return _replace_channel(state, channel.model_copy(update={"customer": customer}))


def _validate_discount(discount: Discount, cart_subtotal: Decimal) -> None:
    if isinstance(discount, PercentageDiscount):
        if discount.value < 0 or discount.value > 100:
            raise ValidationError(code="INVALID_DISCOUNT", message="Percentage must be between 0 and 100")
    elif isinstance(discount, FixedDiscount):
        if discount.value <= 0:
            raise ValidationError(code="INVALID_DISCOUNT", message="Discount amount must be greater than 0")
        if discount.value > cart_subtotal:
            raise ValidationError(
                code="INVALID_DISCOUNT",
                message=f"Discount cannot exceed the cart subtotal of {cart_subtotal:.2f}",
            )
    elif isinstance(discount, CampaignDiscount):
        if discount.amount <= 0:
            raise ValidationError(code="INVALID_DISCOUNT", message=f"Campaign {discount.code} has no value")


def apply_discount(state: CheckoutState, channel_id: str, discount: Discount) -> CheckoutState:
    channel = _require_channel(state, channel_id)
    _validate_discount(discount, subtotal(channel.lines))
    return _replace_channel(state, channel.model_copy(update={"discount": discount}))


def remove_discount(state: CheckoutState, channel_id: str) -> CheckoutState:
    channel = _require_channel(state, channel_id)
    return _replace_channel(state, channel.model_copy(update={"discount": None}))


class ChannelStore:
    """Owns the live ``CheckoutState`` and persists it after every mutation."""

    def __init__(
        self,
        store: LocalStore | None = None,
        frequent: FrequentProducts | None = None,
        state: CheckoutState | None = None,
    ) -> None:
        self.store = store
        self.frequent = frequent
        self._state = state or self._load() or initial_state()

    @property
    def state(self) -> CheckoutState:
        return self._state

    @property
    def active(self) -> Channel:
        return self._state.active

    def channel(self, channel_id: str) -> Channel:
        return _require_channel(self._state, channel_id)

    def totals(self, channel_id: str) -> CartTotals:
        channel = self.channel(channel_id)
        return compute_totals(channel.lines, channel.discount)

    def add_line(self, channel_id: str, product: Product, quantity: int = 1) -> Channel:
        self._commit(add_line(self._state, channel_id, product, quantity))
        if self.frequent is not None:
            self.frequent.touch(product)
        return self.channel(channel_id)

    def add_ad_hoc_line(
        self,
        channel_id: str,
        name: str,
        unit_price: Decimal,
        quantity: int = 1,
        tax_rate: Decimal = Decimal("0"),
    ) -> Channel:
        self._commit(add_ad_hoc_line(self._state, channel_id, name, unit_price, quantity, tax_rate))
        return self.channel(channel_id)

    def set_quantity(self, channel_id: str, line_id: str, quantity: int) -> Channel:
        self._commit(set_quantity(self._state, channel_id, line_id, quantity))
        return self.channel(channel_id)

    def remove_line(self, channel_id: str, line_id: str) -> Channel:
        self._commit(remove_line(self._state, channel_id, line_id))
        return self.channel(channel_id)

    def replace_line(self, channel_id: str, updated: CartLine) -> Channel:
        self._commit(replace_line(self._state, channel_id, updated))
        return self.channel(channel_id)

    def clear(self, channel_id: str) -> Channel:
        self._commit(clear(self._state, channel_id))
        return self.channel(channel_id)

    def load_into(
        self,
        channel_id: str,
        lines: tuple[CartLine, ...],
        customer: Customer | None,
        discount: Discount | None,
    ) -> Channel:
        self._commit(load_into(self._state, channel_id, lines, customer, discount))
        return self.channel(channel_id)

    def add_channel(self) -> Channel:
        self._commit(add_channel(self._state))
        return self.active

    def close_channel(self, channel_id: str, confirmed: bool = False) -> Channel:
        self._commit(close_channel(self._state, channel_id, confirmed))
        return self.active

    def switch_active(self, channel_id: str) -> Channel:
        self._commit(switch_active(self._state, channel_id))
        return self.active

    def assign_customer(self, channel_id: str, customer: Customer | None) -> Channel:
        self._commit(assign_customer(self._state, channel_id, customer))
        return self.channel(channel_id)

    def apply_discount(self, channel_id: str, discount: Discount) -> Channel:
        self._commit(apply_discount(self._state, channel_id, discount))
        return self.channel(channel_id)

    def remove_discount(self, channel_id: str) -> Channel:
        self._commit(remove_discount(self._state, channel_id))
        return self.channel(channel_id)

    def _commit(self, state: CheckoutState) -> None:
        self._state = state
        if self.store is not None:
            self.store.save(CHANNELS_KEY, CHANNELS_VERSION, state.model_dump(mode="json"))

    def _load(self) -> CheckoutState | None:
        if self.store is None:
            return None
        data = self.store.load(CHANNELS_KEY, CHANNELS_VERSION)
        if data is None:
            return None
        try:
            state = CheckoutState.model_validate(data)
        except PydanticValidationError:
            logger.warning("channels_state_discarded", extra={"store_key": CHANNELS_KEY})
            self.store.clear(CHANNELS_KEY)
            return None
        if not state.channels:
            return None
        return state
