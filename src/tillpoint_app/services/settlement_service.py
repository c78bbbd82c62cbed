from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError

from tillpoint_sdk import (
    MONEY_EPSILON,
    ApiSession,
    PaymentIntent,
    PaymentValidationResult,
    SaleCommitRequest,
    SaleCommitResponse,
    SaleItemCreate,
    SplitPayment,
    new_submission_keys,
    to_user_facing_error,
    validate_payment_intent,
)
from tillpoint_sdk.exceptions import ApiError

from ..domain.calculator import CartTotals, compute_totals, to_display
from ..domain.errors import (
    CustomerRequiredError,
    EmptyCartError,
    NetworkError,
    SplitMismatchError,
    SubmissionInProgressError,
    ValidationError,
)
from ..domain.models import Channel, LedgerSale, Receipt, ReceiptLine, SaleAttemptStatus, Shift
from .channel_store import ChannelStore
from .shift_ledger import ShiftLedger

logger = logging.getLogger(__name__)

_ISSUE_ERRORS = {
    "EMPTY_CART": EmptyCartError,
    "CUSTOMER_REQUIRED": CustomerRequiredError,
    "SPLIT_MISMATCH": SplitMismatchError,
}


@dataclass(frozen=True)
class SettlementOutcome:
    receipt: Receipt
    response: SaleCommitResponse
    shift: Shift | None
    attempt_id: str
    warnings: tuple[str, ...] = ()


class SettlementService:
    """Validate, commit and book a channel's sale.

    A failed commit leaves the channel exactly as it was. Only one submission
    per channel may be in flight; nothing is retried automatically.
    """

    def __init__(
        self,
        session: ApiSession,
        channels: ChannelStore,
        ledger: ShiftLedger,
        epsilon: Decimal = MONEY_EPSILON,
    ) -> None:
        self.session = session
        self.channels = channels
        self.ledger = ledger
        self.epsilon = epsilon
        self._status: dict[str, SaleAttemptStatus] = {}
        self._in_flight: set[str] = set()

    def status_of(self, channel_id: str) -> SaleAttemptStatus:
        return self._status.get(channel_id, SaleAttemptStatus.IDLE)

    def is_submitting(self, channel_id: str) -> bool:
        return channel_id in self._in_flight

    def validate(self, channel: Channel, intent: PaymentIntent | Mapping[str, Any]) -> PaymentValidationResult:
        totals = compute_totals(channel.lines, channel.discount)
        return validate_payment_intent(
            line_count=len(channel.lines),
            has_customer=channel.customer is not None,
            total_due=to_display(totals.total),
            intent=intent,
            epsilon=self.epsilon,
        )

    def submit(self, channel_id: str, intent: PaymentIntent | Mapping[str, Any]) -> SettlementOutcome:
        if channel_id in self._in_flight:
            raise SubmissionInProgressError(channel_id)
        channel = self.channels.channel(channel_id)

        self._status[channel_id] = SaleAttemptStatus.VALIDATING
        try:
            validation = self.validate(channel, intent)
        except PydanticValidationError as exc:
            self._status[channel_id] = SaleAttemptStatus.REJECTED
            raise ValidationError(
                code="INVALID_PAYMENT",
                message="Payment details are not valid",
                details=[{"field": ".".join(str(part) for part in error["loc"]), "reason": error["msg"]} for error in exc.errors()],
            ) from exc
        if not validation.ok:
            self._status[channel_id] = SaleAttemptStatus.REJECTED
            raise self._validation_error(validation)
        normalized = validation.intent
        totals = compute_totals(channel.lines, channel.discount)
        request = self.build_request(channel, normalized, totals)
        keys = new_submission_keys()

        self._status[channel_id] = SaleAttemptStatus.SUBMITTING
        self._in_flight.add(channel_id)
        logger.info(
            "sale_commit_attempt",
            extra={"attempt_id": keys.attempt_id, "payment_method": normalized.method, "line_count": len(channel.lines)},
        )
        try:
            response = self.session.sales_client().commit_sale(request, keys=keys)
        except ApiError as exc:
            self._status[channel_id] = SaleAttemptStatus.FAILED
            friendly = to_user_facing_error(exc)
            logger.warning(
                "sale_commit_failed",
                extra={"attempt_id": keys.attempt_id, "error_code": exc.code, "trace_id": exc.trace_id},
            )
            raise NetworkError(
                code=exc.code,
                message=friendly.message,
                details=friendly.details,
                trace_id=exc.trace_id,
            ) from exc
        finally:
            self._in_flight.discard(channel_id)

        self._status[channel_id] = SaleAttemptStatus.COMMITTED
        # committed remotely; local save failures become warnings
        warnings: list[str] = []
        try:
            self.ledger.record_sale(
                LedgerSale(
                    sale_id=response.id,
                    total=to_display(totals.total),
                    discount_amount=to_display(totals.discount_amount),
                    method=normalized.method,
                    split_cash=normalized.split_cash,
                    split_card=normalized.split_card,
                )
            )
        except OSError:
            logger.exception("sale_ledger_save_failed", extra={"attempt_id": keys.attempt_id, "sale_id": response.id})
            warnings.append("Sale completed, but the shift totals could not be saved")
        try:
            self.channels.clear(channel_id)
        except OSError:
            logger.exception("sale_cart_save_failed", extra={"attempt_id": keys.attempt_id, "sale_id": response.id})
            warnings.append("Sale completed, but the cleared cart could not be saved")
        logger.info("sale_committed", extra={"attempt_id": keys.attempt_id, "sale_id": response.id})
        return SettlementOutcome(
            receipt=self.build_receipt(channel, normalized, totals, response),
            response=response,
            shift=self.ledger.current,
            attempt_id=keys.attempt_id,
            warnings=tuple(warnings),
        )

    def quick_cash_sale(self, channel_id: str) -> SettlementOutcome:
        return self.submit(channel_id, PaymentIntent(method="CASH"))

    @staticmethod
    def build_request(channel: Channel, intent: PaymentIntent, totals: CartTotals) -> SaleCommitRequest:
        items = [
            SaleItemCreate(
                product_id=None if line.is_ad_hoc else line.product_id,
                quantity=line.quantity,
                unit_price=line.unit_price,
                tax_rate=line.tax_rate,
                name=line.name if line.is_ad_hoc else None,
            )
            for line in channel.lines
        ]
        split_payment = None
        payment_method = intent.method
        if intent.method == "SPLIT":
            # the backend has no SPLIT method; the breakdown rides along as metadata
            payment_method = "CASH"
            split_payment = SplitPayment(
                cash=intent.split_cash or Decimal("0"),
                card=intent.split_card or Decimal("0"),
            )
        return SaleCommitRequest(
            customer_id=channel.customer.id if channel.customer else None,
            items=items,
            payment_method=payment_method,
            subtotal=to_display(totals.subtotal),
            discount_amount=to_display(totals.discount_amount),
            tax_amount=to_display(totals.tax_amount),
            total=to_display(totals.total),
            split_payment=split_payment,
        )

    @staticmethod
    def build_receipt(
        channel: Channel,
        intent: PaymentIntent,
        totals: CartTotals,
        response: SaleCommitResponse,
    ) -> Receipt:
        return Receipt(
            sale_id=response.id,
            sale_number=response.sale_number,
            channel_name=channel.display_name,
            customer_name=channel.customer.name if channel.customer else None,
            lines=tuple(
                ReceiptLine(
                    name=line.name,
                    quantity=line.quantity,
                    unit_price=to_display(line.unit_price),
                    line_total=to_display(line.line_total),
                    price_overridden=line.is_overridden,
                )
                for line in channel.lines
            ),
            subtotal=to_display(totals.subtotal),
            tax_amount=to_display(totals.tax_amount),
            discount_amount=to_display(totals.discount_amount),
            discount_label=totals.discount_label,
            total=to_display(totals.total),
            payment_method=intent.method,
            split_cash=intent.split_cash,
            split_card=intent.split_card,
            issued_at=datetime.now(timezone.utc),
        )

    @staticmethod
    def _validation_error(result: PaymentValidationResult) -> ValidationError:
        issue = result.issues[0]
        error_type = _ISSUE_ERRORS.get(issue.code)
        if error_type is None:
            return ValidationError(code=issue.code, message=issue.reason)
        error = error_type()
        error.details = [{"field": item.field, "reason": item.reason, "code": item.code} for item in result.issues]
        return error
