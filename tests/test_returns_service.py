from __future__ import annotations

from decimal import Decimal

import pytest

from checkout_fakes import FakeReturnsClient, FakeSession
from tillpoint_app.domain.errors import NetworkError, ValidationError
from tillpoint_app.services.returns_service import ReturnsService
from tillpoint_app.services.shift_ledger import ShiftLedger
from tillpoint_sdk.exceptions import ReturnRejectedError
from tillpoint_sdk.local_store import LocalStore


def test_return_updates_shift_refunds() -> None:
    session = FakeSession()
    ledger = ShiftLedger()
    ledger.start(Decimal("100"))

    outcome = ReturnsService(session, ledger).submit_return("sale-1", [{"saleItemId": "si-1", "quantity": 1}], Decimal("12.00"))

    assert outcome.refund_amount == Decimal("12.00")
    assert ledger.current is not None
    assert ledger.current.total_refunds == Decimal("12.00")
    assert ledger.current.return_count == 1
    assert session.returns.calls[0].sale_id == "sale-1"


def test_backend_refund_total_wins() -> None:
    session = FakeSession(returns=FakeReturnsClient(refund_total=Decimal("10.50")))
    ledger = ShiftLedger()
    ledger.start(Decimal("0"))

    outcome = ReturnsService(session, ledger).submit_return("sale-1", [{"saleItemId": "si-1", "quantity": 1}], Decimal("12.00"))

    assert outcome.refund_amount == Decimal("10.50")


def test_rejected_return_does_not_touch_shift() -> None:
    failure = ReturnRejectedError(code="HTTP_ERROR", message="Too many", details=None, trace_id=None, status_code=400)
    ledger = ShiftLedger()
    ledger.start(Decimal("0"))

    with pytest.raises(NetworkError):
        ReturnsService(FakeSession(returns=FakeReturnsClient(fail=failure)), ledger).submit_return(
            "sale-1", [{"saleItemId": "si-1", "quantity": 5}], Decimal("50")
        )
    assert ledger.current is not None
    assert ledger.current.return_count == 0


def test_return_input_is_validated() -> None:
    service = ReturnsService(FakeSession(), ShiftLedger())
    with pytest.raises(ValidationError):
        service.submit_return("sale-1", [], Decimal("1"))
    with pytest.raises(ValidationError):
        service.submit_return("sale-1", [{"saleItemId": "si-1", "quantity": 1}], Decimal("0"))


def test_invalid_return_items_become_validation_errors() -> None:
    session = FakeSession()
    with pytest.raises(ValidationError) as excinfo:
        ReturnsService(session, ShiftLedger()).submit_return("sale-1", [{"saleItemId": "si-1", "quantity": 0}], Decimal("5"))
    assert excinfo.value.code == "INVALID_RETURN"
    assert session.returns.calls == []


def test_ledger_save_failure_after_return_is_a_warning(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    store = LocalStore(base_dir=tmp_path)
    ledger = ShiftLedger(store=store)
    ledger.start(Decimal("50"))

    def failing_save(key: str, version: int, data: object) -> None:
        raise OSError("read-only file system")

    monkeypatch.setattr(store, "save", failing_save)

    outcome = ReturnsService(FakeSession(), ledger).submit_return("sale-1", [{"saleItemId": "si-1", "quantity": 1}], Decimal("5"))

    assert outcome.warnings
    assert outcome.shift is not None
    assert outcome.shift.total_refunds == Decimal("5")
