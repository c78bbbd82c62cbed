from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from pydantic import ValidationError as PydanticValidationError

from tillpoint_sdk import LocalStore, Product

from ..domain.calculator import compute_totals
from ..domain.errors import EmptyCartError, UnknownHeldSaleError
from ..domain.models import HeldSale, StockWarning
from .channel_store import ChannelStore
from .stock_guard import StockGuard

logger = logging.getLogger(__name__)

HELD_SALES_KEY = "held_sales"
HELD_SALES_VERSION = 1

BarcodeLookup = Callable[[str], Product | None]


@dataclass(frozen=True)
class RestoreOutcome:
    held: HeldSale
    warnings: list[StockWarning] = field(default_factory=list)


class HoldService:
    """Parks channel carts and brings them back later.

    Held sales are kept most-recent-first and written to the local store after
    every change, so they survive a restart until restored or deleted.
    """

    def __init__(
        self,
        channels: ChannelStore,
        store: LocalStore | None = None,
        stock_guard: StockGuard | None = None,
        lookup: BarcodeLookup | None = None,
    ) -> None:
        self.channels = channels
        self.store = store
        self.stock_guard = stock_guard or StockGuard()
        self.lookup = lookup
        self._held: list[HeldSale] = self._load()

    def list_held(self) -> list[HeldSale]:
        return list(self._held)

    def get(self, held_id: str) -> HeldSale:
        for held in self._held:
            if held.id == held_id:
                return held
        raise UnknownHeldSaleError(held_id)

    def hold(self, channel_id: str) -> HeldSale:
        channel = self.channels.channel(channel_id)
        if channel.is_empty:
            raise EmptyCartError("Cannot hold an empty cart")
        totals = compute_totals(channel.lines, channel.discount)
        held = HeldSale(
            id=uuid.uuid4().hex,
            channel_name=channel.display_name,
            lines=channel.lines,
            customer=channel.customer,
            discount=channel.discount,
            total=totals.total,
            parked_at=datetime.now(timezone.utc),
        )
        self._held.insert(0, held)
        self._save()
        self.channels.clear(channel_id)
        logger.info("sale_held", extra={"held_id": held.id, "line_count": len(held.lines)})
        return held

    def restore(self, held_id: str, channel_id: str) -> RestoreOutcome:
        """Overwrite ``channel_id`` with the held cart and drop it from the list.

        Whether the target channel may be overwritten is the caller's decision.
        Catalog lines are re-checked against current stock; resulting warnings
        are returned and never block the restore.
        """
        held = self.get(held_id)
        self.channels.load_into(channel_id, held.lines, held.customer, held.discount)
        self._held = [entry for entry in self._held if entry.id != held_id]
        self._save()
        logger.info("sale_restored", extra={"held_id": held_id})
        return RestoreOutcome(held=held, warnings=self._recheck_stock(held))

    def delete_held(self, held_id: str) -> HeldSale:
        held = self.get(held_id)
        self._held = [entry for entry in self._held if entry.id != held_id]
        self._save()
        logger.info("held_sale_deleted", extra={"held_id": held_id})
        return held

    def _recheck_stock(self, held: HeldSale) -> list[StockWarning]:
        if self.lookup is None:
            return []
        warnings: list[StockWarning] = []
        for line in held.lines:
            if line.is_ad_hoc or not line.barcode:
                continue
            try:
                product = self.lookup(line.barcode)
            except Exception as exc:
                logger.warning("restore_stock_check_failed", extra={"barcode": line.barcode, "error": str(exc)})
                continue
            if product is None:
                continue
            warning = self.stock_guard.evaluate(product)
            if warning is not None:
                warnings.append(warning)
        return warnings

    def _save(self) -> None:
        if self.store is None:
            return
        self.store.save(HELD_SALES_KEY, HELD_SALES_VERSION, [held.model_dump(mode="json") for held in self._held])

    def _load(self) -> list[HeldSale]:
        if self.store is None:
            return []
        rows = self.store.load(HELD_SALES_KEY, HELD_SALES_VERSION) or []
        try:
            return [HeldSale.model_validate(row) for row in rows]
        except (PydanticValidationError, TypeError):
            logger.warning("held_sales_discarded", extra={"store_key": HELD_SALES_KEY})
            self.store.clear(HELD_SALES_KEY)
            return []
