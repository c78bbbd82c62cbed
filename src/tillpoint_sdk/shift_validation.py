from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class ShiftValidationIssue:
    field: str
    reason: str
    code: str = "INVALID_AMOUNT"


@dataclass(frozen=True)
class ShiftValidationResult:
    ok: bool
    issues: list[ShiftValidationIssue]


def _require_non_negative(value: Decimal | None, field: str, issues: list[ShiftValidationIssue]) -> None:
    if value is None:
        issues.append(ShiftValidationIssue(field=field, reason="is required", code="REQUIRED"))
        return
    if not value.is_finite():
        issues.append(ShiftValidationIssue(field=field, reason="must be a finite number"))
    elif value < 0:
        issues.append(ShiftValidationIssue(field=field, reason="must be >= 0"))


def validate_open_shift(opening_float: Decimal | None) -> ShiftValidationResult:
    issues: list[ShiftValidationIssue] = []
    _require_non_negative(opening_float, "opening_float", issues)
    return ShiftValidationResult(ok=not issues, issues=issues)


def validate_close_shift(closing_count: Decimal | None) -> ShiftValidationResult:
    issues: list[ShiftValidationIssue] = []
    _require_non_negative(closing_count, "closing_count", issues)
    return ShiftValidationResult(ok=not issues, issues=issues)


def validate_refund_amount(amount: Decimal | None) -> ShiftValidationResult:
    issues: list[ShiftValidationIssue] = []
    if amount is None:
        issues.append(ShiftValidationIssue(field="amount", reason="is required", code="REQUIRED"))
    elif not amount.is_finite():
        issues.append(ShiftValidationIssue(field="amount", reason="must be a finite number"))
    elif amount <= 0:
        issues.append(ShiftValidationIssue(field="amount", reason="must be greater than 0"))
    return ShiftValidationResult(ok=not issues, issues=issues)
