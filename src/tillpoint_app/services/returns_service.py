from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping, Sequence

from pydantic import ValidationError as PydanticValidationError

from tillpoint_sdk import ApiSession, ReturnItem, ReturnRequest, ReturnResponse, to_user_facing_error
from tillpoint_sdk.exceptions import ApiError

from ..domain.errors import NetworkError, ValidationError
from ..domain.models import Shift
from .shift_ledger import ShiftLedger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReturnOutcome:
    response: ReturnResponse
    refund_amount: Decimal
    shift: Shift | None
    warnings: tuple[str, ...] = ()


class ReturnsService:
    def __init__(self, session: ApiSession, ledger: ShiftLedger) -> None:
        self.session = session
        self.ledger = ledger

    def submit_return(
        self,
        sale_id: str,
        items: Sequence[ReturnItem | Mapping[str, Any]],
        refund_amount: Decimal,
    ) -> ReturnOutcome:
        if not items:
            raise ValidationError(code="EMPTY_RETURN", message="Select at least one item to return")
        if not refund_amount.is_finite() or refund_amount <= 0:
            raise ValidationError(code="INVALID_AMOUNT", message="Refund amount must be greater than 0")
        try:
            request = ReturnRequest(
                sale_id=sale_id,
                items=[item if isinstance(item, ReturnItem) else ReturnItem.model_validate(item) for item in items],
            )
        except PydanticValidationError as exc:
            raise ValidationError(
                code="INVALID_RETURN",
                message="Return items are not valid",
                details=[{"field": ".".join(str(part) for part in error["loc"]), "reason": error["msg"]} for error in exc.errors()],
            ) from exc
        try:
            response = self.session.returns_client().submit_return(request)
        except ApiError as exc:
            friendly = to_user_facing_error(exc)
            raise NetworkError(code=exc.code, message=friendly.message, details=friendly.details, trace_id=exc.trace_id) from exc
        refund = response.refund_total if response.refund_total and response.refund_total > 0 else refund_amount
        logger.info("return_submitted", extra={"sale_id": sale_id, "item_count": len(request.items)})
        warnings: tuple[str, ...] = ()
        try:
            self.ledger.record_return(refund)
        except OSError:
            logger.exception("return_ledger_save_failed", extra={"sale_id": sale_id, "return_id": response.id})
            warnings = ("Return completed, but the shift totals could not be saved",)
        return ReturnOutcome(response=response, refund_amount=refund, shift=self.ledger.current, warnings=warnings)
