from __future__ import annotations

import pytest

from tillpoint_app.domain.errors import ConfirmationRequired, EmptyCartError, ForbiddenError, LastChannelError, NetworkError
from tillpoint_app.ui.shared.error_presenter import ErrorPresenter
from tillpoint_app.ui.shared.notification_center import NotificationCenter


@pytest.mark.parametrize(
    ("error", "category"),
    [
        (EmptyCartError(), "validation"),
        (ForbiddenError(), "permission_denied"),
        (LastChannelError(), "conflict"),
        (ConfirmationRequired(code="LOW_STOCK", message="Only 2 left"), "confirmation"),
        (NetworkError(code="TRANSPORT_ERROR", message="timed out", details="TRANSPORT_ERROR (HTTP 0)"), "transport"),
        (NetworkError(code="HTTP_ERROR", message="Insufficient stock", details="HTTP_ERROR (HTTP 400)"), "validation"),
    ],
)
def test_present_exception_categories(error, category: str) -> None:
    presented = ErrorPresenter().present_exception(error, action="pay")
    assert presented.category == category
    assert presented.details["action"] == "pay"


def test_only_network_failures_are_retryable() -> None:
    presenter = ErrorPresenter()
    assert presenter.present_exception(NetworkError(code="TRANSPORT_ERROR", message="timed out"), action="pay").safe_to_retry
    assert not presenter.present_exception(EmptyCartError(), action="pay").safe_to_retry


def test_notification_center_bounds_queue() -> None:
    center = NotificationCenter(limit=2)
    for index in range(3):
        center.push(level="info", title="t", message=str(index))
    assert [message["message"] for message in center.render()["messages"]] == ["1", "2"]
    assert center.latest()["message"] == "2"
    with pytest.raises(ValueError):
        center.push(level="debug", title="t", message="m")
