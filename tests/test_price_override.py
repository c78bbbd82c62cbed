from __future__ import annotations

from decimal import Decimal

import pytest

from checkout_fakes import make_product, make_user
from tillpoint_app.domain.errors import ForbiddenError, NoChangeError, ValidationError
from tillpoint_app.domain.models import CartLine
from tillpoint_app.services.price_override import PriceOverrideAuthority


def _line() -> CartLine:
    return CartLine.from_product(make_product(price="10.00"), 2)


def test_cashier_is_forbidden_and_line_unchanged() -> None:
    line = _line()
    records: list = []
    authority = PriceOverrideAuthority(audit_sink=records.append)

    with pytest.raises(ForbiddenError):
        authority.apply(make_user("CASHIER"), line, Decimal("8.00"), "damaged")

    assert line.unit_price == Decimal("10.00")
    assert records == []


def test_missing_user_is_forbidden() -> None:
    with pytest.raises(ForbiddenError):
        PriceOverrideAuthority().authorize(None)


@pytest.mark.parametrize("role", ["MANAGER", "ADMIN", "manager"])
def test_manager_and_admin_reprice_and_audit(role: str) -> None:
    records: list = []
    authority = PriceOverrideAuthority(audit_sink=records.append)

    result = authority.apply(make_user(role), _line(), Decimal("8.00"), "  damaged box ")

    assert result.line.unit_price == Decimal("8.00")
    assert result.line.line_total == Decimal("16.00")
    assert result.line.catalog_price == Decimal("10.00")
    assert result.line.is_overridden
    assert result.warning is None
    assert records == [result.audit]
    assert result.audit.old_price == Decimal("10.00")
    assert result.audit.new_price == Decimal("8.00")
    assert result.audit.reason == "damaged box"


@pytest.mark.parametrize(
    ("price", "reason", "error"),
    [
        (Decimal("-1"), "reason", ValidationError),
        (Decimal("5"), "   ", ValidationError),
        (Decimal("10.00"), "reason", NoChangeError),
    ],
)
def test_invalid_overrides(price: Decimal, reason: str, error: type[Exception]) -> None:
    with pytest.raises(error):
        PriceOverrideAuthority().apply(make_user("ADMIN"), _line(), price, reason)


def test_zero_price_is_allowed() -> None:
    result = PriceOverrideAuthority().apply(make_user("ADMIN"), _line(), Decimal("0"), "giveaway")
    assert result.line.line_total == Decimal("0")


def test_audit_failure_surfaces_warning_but_keeps_price() -> None:
    def failing_sink(record) -> None:
        raise RuntimeError("audit endpoint down")

    result = PriceOverrideAuthority(audit_sink=failing_sink).apply(make_user("MANAGER"), _line(), Decimal("9"), "match competitor")

    assert result.line.unit_price == Decimal("9")
    assert result.warning is not None
