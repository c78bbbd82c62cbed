from __future__ import annotations

import pytest

from checkout_fakes import FakeCustomersClient, FakeProductsClient, FakeSession, make_product
from tillpoint_app.domain.errors import NetworkError, ProductInactiveError
from tillpoint_app.services.lookup_service import LookupService
from tillpoint_sdk import Customer
from tillpoint_sdk.exceptions import ServerError


def test_barcode_lookup_found_and_not_found() -> None:
    products = FakeProductsClient(catalog={"111": make_product("p-1", barcode="111")})
    service = LookupService(FakeSession(products=products))

    found = service.by_barcode(" 111 ")
    assert found is not None and found.id == "p-1"
    assert service.by_barcode("222") is None
    assert service.by_barcode("   ") is None


def test_barcode_lookup_rejects_inactive_product() -> None:
    products = FakeProductsClient(catalog={"111": make_product("p-1", barcode="111", active=False)})
    with pytest.raises(ProductInactiveError):
        LookupService(FakeSession(products=products)).by_barcode("111")


def test_backend_failure_becomes_network_error() -> None:
    failure = ServerError(code="DOWN", message="Service unavailable", details=None, trace_id="t-9", status_code=503)
    service = LookupService(FakeSession(products=FakeProductsClient(fail=failure)))
    with pytest.raises(NetworkError) as exc:
        service.by_barcode("111")
    assert exc.value.trace_id == "t-9"


def test_search_needs_two_characters_and_filters_inactive() -> None:
    products = FakeProductsClient(
        search_rows=[make_product("p-1"), make_product("p-2", active=False), make_product("p-3")],
    )
    service = LookupService(FakeSession(products=products))

    assert service.search("t") == []
    assert products.search_calls == []
    assert [product.id for product in service.search("te")] == ["p-1", "p-3"]
    assert products.search_calls == [("te", 10)]


def test_customers_fetched_once_and_filtered_locally() -> None:
    customers = FakeCustomersClient(
        rows=[
            Customer(id="c-1", name="Ada Lovelace", phone="5550001", email="ada@example.com"),
            Customer(id="c-2", name="Alan Turing", phone="5550002", email=None),
        ]
    )
    service = LookupService(FakeSession(customers=customers))

    assert [c.id for c in service.customers("LOVE")] == ["c-1"]
    assert [c.id for c in service.customers("0002")] == ["c-2"]
    assert [c.id for c in service.customers("example.com")] == ["c-1"]
    assert len(service.customers()) == 2
    assert customers.calls == 1

    service.customers(refresh=True)
    assert customers.calls == 2
