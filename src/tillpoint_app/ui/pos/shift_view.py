from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

from ...domain.calculator import to_display
from ...domain.errors import CheckoutError, ValidationError
from ...domain.models import ZReport
from ...services.shift_ledger import ShiftLedger
from ...telemetry.events import build_event
from ...telemetry.logger import TelemetryLogger
from ..shared.error_presenter import ErrorPresenter
from .components.z_report import ZReportPanel


def _parse_amount(raw: Decimal | str | int | float | None, field_name: str) -> Decimal:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise ValidationError(code="REQUIRED", message=f"{field_name} is required")
    try:
        value = Decimal(str(raw).strip())
    except InvalidOperation as exc:
        raise ValidationError(code="INVALID_AMOUNT", message=f"{field_name} must be a number") from exc
    if not value.is_finite():
        raise ValidationError(code="INVALID_AMOUNT", message=f"{field_name} must be a number")
    return value


@dataclass
class ShiftView:
    ledger: ShiftLedger
    telemetry: TelemetryLogger | None = None
    presenter: ErrorPresenter = field(default_factory=ErrorPresenter)
    last_report: ZReport | None = None
    error_message: str | None = None

    def open(self, opening_float: Decimal | str | int | float | None) -> dict[str, Any]:
        try:
            shift = self.ledger.start(_parse_amount(opening_float, "opening_float"))
        except CheckoutError as exc:
            return self._failure(exc, "open")
        self.error_message = None
        self._emit("shift_opened", "open", success=True, context={"shift_id": shift.id})
        return {"ok": True, "shift": self._shift_payload()}

    def close(self, closing_count: Decimal | str | int | float | None) -> dict[str, Any]:
        try:
            report = self.ledger.end(_parse_amount(closing_count, "closing_count"))
        except CheckoutError as exc:
            return self._failure(exc, "close")
        self.last_report = report
        self.error_message = None
        self._emit(
            "shift_closed",
            "close",
            success=True,
            context={"shift_id": report.shift.id, "is_balanced": report.is_balanced},
        )
        return {"ok": True, "z_report": ZReportPanel(report).render()}

    def history(self) -> list[dict[str, Any]]:
        return [
            {
                "id": shift.id,
                "opened_at": shift.opened_at.isoformat(),
                "closed_at": shift.closed_at.isoformat() if shift.closed_at else None,
                "sales_count": shift.sales_count,
                "total_revenue": to_display(shift.total_revenue),
            }
            for shift in self.ledger.history()
        ]

    def render(self) -> dict[str, Any]:
        return {
            "is_open": self.ledger.is_open,
            "shift": self._shift_payload(),
            "action_enabled": {"open": not self.ledger.is_open, "close": self.ledger.is_open},
            "last_report": ZReportPanel(self.last_report).render() if self.last_report else None,
            "error": self.error_message,
        }

    def _shift_payload(self) -> dict[str, Any] | None:
        shift = self.ledger.current
        if shift is None:
            return None
        return {
            "id": shift.id,
            "opened_at": shift.opened_at.isoformat(),
            "opening_float": to_display(shift.opening_float),
            "sales_count": shift.sales_count,
            "total_revenue": to_display(shift.total_revenue),
            "cash_revenue": to_display(shift.cash_revenue),
            "card_revenue": to_display(shift.card_revenue),
            "credit_revenue": to_display(shift.credit_revenue),
            "total_discounts": to_display(shift.total_discounts),
            "return_count": shift.return_count,
            "total_refunds": to_display(shift.total_refunds),
            "expected_cash": to_display(shift.expected_cash),
        }

    def _failure(self, exc: CheckoutError, action: str) -> dict[str, Any]:
        presented = self.presenter.present_exception(exc, action=action)
        self.error_message = exc.message
        self._emit("shift_action_failed", action, success=False, error_code=exc.code)
        return {"ok": False, "error": exc.message, "code": exc.code, "category": presented.category}

    def _emit(
        self,
        name: str,
        action: str,
        *,
        success: bool,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        if self.telemetry is None:
            return
        self.telemetry.emit(
            build_event(
                category="shift",
                name=name,
                module="shift",
                action=action,
                success=success,
                error_code=error_code,
                context=context,
            )
        )
