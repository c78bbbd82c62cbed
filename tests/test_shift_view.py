from __future__ import annotations

import json
from decimal import Decimal

from checkout_fakes import build_engine, make_product
from tillpoint_app.telemetry.logger import TelemetryLogger
from tillpoint_app.ui.pos.shift_view import ShiftView


def test_open_sell_and_close_produces_z_report(tmp_path) -> None:
    telemetry = TelemetryLogger(app_name="tillpoint", enabled=True, log_file=tmp_path / "events.jsonl")
    engine = build_engine(tmp_path)
    view = ShiftView(ledger=engine.ledger, telemetry=telemetry)

    assert view.open("100.00")["ok"] is True
    engine.view.add_product(make_product(price="10.00"), quantity=2)
    engine.view.quick_cash()

    rendered = view.render()
    assert rendered["shift"]["cash_revenue"] == Decimal("20.00")
    assert rendered["action_enabled"] == {"open": False, "close": True}

    closed = view.close("115.00")
    report = closed["z_report"]
    assert report["expected_cash"] == Decimal("120.00")
    assert report["variance"] == Decimal("-5.00")
    assert report["status"] == "SHORT"
    assert report["is_balanced"] is False
    assert view.render()["is_open"] is False
    assert view.history()[0]["sales_count"] == 1

    categories = [json.loads(line)["category"] for line in (tmp_path / "events.jsonl").read_text().splitlines()]
    assert categories == ["shift", "shift"]


def test_invalid_amounts_are_inline_errors(tmp_path) -> None:
    view = ShiftView(ledger=build_engine(tmp_path).ledger)

    assert view.open("")["code"] == "REQUIRED"
    assert view.open("ten")["code"] == "INVALID_AMOUNT"
    assert view.open("-5")["category"] == "validation"
    assert view.close("10")["code"] == "SHIFT_NOT_OPEN"


def test_double_open_is_conflict(tmp_path) -> None:
    view = ShiftView(ledger=build_engine(tmp_path).ledger)
    view.open(0)
    result = view.open(0)
    assert result["ok"] is False
    assert result["code"] == "SHIFT_ALREADY_OPEN"
    assert result["category"] == "conflict"


def test_non_finite_amounts_are_inline_errors(tmp_path) -> None:
    view = ShiftView(ledger=build_engine(tmp_path).ledger)

    for raw in ("NaN", "Infinity", "-inf"):
        result = view.open(raw)
        assert result["ok"] is False
        assert result["code"] == "INVALID_AMOUNT"
    assert view.render()["is_open"] is False
