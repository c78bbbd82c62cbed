from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from pydantic import ValidationError as PydanticValidationError

from tillpoint_sdk import (
    MONEY_EPSILON,
    LocalStore,
    ShiftValidationResult,
    validate_close_shift,
    validate_open_shift,
    validate_refund_amount,
)

from ..domain.errors import ShiftAlreadyOpenError, ShiftNotOpenError, ValidationError
from ..domain.models import LedgerSale, Shift, ZReport

logger = logging.getLogger(__name__)

CURRENT_SHIFT_KEY = "current_shift"
SHIFT_HISTORY_KEY = "shift_history"
SHIFT_STORE_VERSION = 1
SHIFT_HISTORY_LIMIT = 50


def _raise_on_issues(result: ShiftValidationResult) -> None:
    if result.ok:
        return
    issue = result.issues[0]
    raise ValidationError(code=issue.code, message=f"{issue.field} {issue.reason}")


class ShiftLedger:
    """Cash-drawer session bookkeeping: at most one shift open at a time."""

    def __init__(
        self,
        store: LocalStore | None = None,
        epsilon: Decimal = MONEY_EPSILON,
        history_limit: int = SHIFT_HISTORY_LIMIT,
    ) -> None:
        self.store = store
        self.epsilon = epsilon
        self.history_limit = history_limit
        self._current: Shift | None = self._load_current()

    @property
    def current(self) -> Shift | None:
        return self._current

    @property
    def is_open(self) -> bool:
        return self._current is not None

    def start(self, opening_float: Decimal) -> Shift:
        if self._current is not None:
            raise ShiftAlreadyOpenError()
        _raise_on_issues(validate_open_shift(opening_float))
        shift = Shift(
            id=uuid.uuid4().hex,
            opened_at=datetime.now(timezone.utc),
            opening_float=opening_float,
        )
        self._set_current(shift)
        logger.info("shift_opened", extra={"shift_id": shift.id})
        return shift

    def record_sale(self, sale: LedgerSale) -> Shift | None:
        shift = self._current
        if shift is None:
            logger.info("sale_outside_shift", extra={"sale_id": sale.sale_id})
            return None
        update: dict[str, object] = {
            "sales_count": shift.sales_count + 1,
            "total_revenue": shift.total_revenue + sale.total,
            "total_discounts": shift.total_discounts + sale.discount_amount,
        }
        if sale.method == "CASH":
            update["cash_revenue"] = shift.cash_revenue + sale.total
        elif sale.method == "CARD":
            update["card_revenue"] = shift.card_revenue + sale.total
        elif sale.method == "CREDIT":
            update["credit_revenue"] = shift.credit_revenue + sale.total
        else:
            # cash absorbs the split rounding gap
            card_part = min(sale.split_card or Decimal("0"), sale.total)
            update["cash_revenue"] = shift.cash_revenue + (sale.total - card_part)
            update["card_revenue"] = shift.card_revenue + card_part
        updated = shift.model_copy(update=update)
        self._set_current(updated)
        return updated

    def record_return(self, amount: Decimal) -> Shift | None:
        _raise_on_issues(validate_refund_amount(amount))
        shift = self._current
        if shift is None:
            logger.info("return_outside_shift")
            return None
        updated = shift.model_copy(
            update={
                "return_count": shift.return_count + 1,
                "total_refunds": shift.total_refunds + amount,
            }
        )
        self._set_current(updated)
        return updated

    def end(self, closing_count: Decimal) -> ZReport:
        shift = self._current
        if shift is None:
            raise ShiftNotOpenError()
        _raise_on_issues(validate_close_shift(closing_count))
        closed = shift.model_copy(update={"closed_at": datetime.now(timezone.utc), "closing_count": closing_count})
        expected_cash = closed.expected_cash
        variance = closing_count - expected_cash
        report = ZReport(
            shift=closed,
            expected_cash=expected_cash,
            variance=variance,
            is_balanced=abs(variance) <= self.epsilon,
            generated_at=datetime.now(timezone.utc),
        )
        self._archive(closed)
        self._current = None
        if self.store is not None:
            self.store.clear(CURRENT_SHIFT_KEY)
        logger.info(
            "shift_closed",
            extra={"shift_id": closed.id, "variance": str(variance), "is_balanced": report.is_balanced},
        )
        return report

    def history(self) -> list[Shift]:
        if self.store is None:
            return []
        rows = self.store.load(SHIFT_HISTORY_KEY, SHIFT_STORE_VERSION) or []
        try:
            return [Shift.model_validate(row) for row in rows]
        except (PydanticValidationError, TypeError):
            logger.warning("shift_history_discarded", extra={"store_key": SHIFT_HISTORY_KEY})
            self.store.clear(SHIFT_HISTORY_KEY)
            return []

    def _archive(self, closed: Shift) -> None:
        if self.store is None:
            return
        entries = [closed, *self.history()][: self.history_limit]
        self.store.save(SHIFT_HISTORY_KEY, SHIFT_STORE_VERSION, [entry.model_dump(mode="json") for entry in entries])

    def _set_current(self, shift: Shift) -> None:
        self._current = shift
        if self.store is not None:
            self.store.save(CURRENT_SHIFT_KEY, SHIFT_STORE_VERSION, shift.model_dump(mode="json"))

    def _load_current(self) -> Shift | None:
        if self.store is None:
            return None
        data = self.store.load(CURRENT_SHIFT_KEY, SHIFT_STORE_VERSION)
        if data is None:
            return None
        try:
            shift = Shift.model_validate(data)
        except PydanticValidationError:
            logger.warning("current_shift_discarded", extra={"store_key": CURRENT_SHIFT_KEY})
            self.store.clear(CURRENT_SHIFT_KEY)
            return None
        return shift if shift.is_open else None
