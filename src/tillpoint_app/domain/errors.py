from __future__ import annotations

from dataclasses import dataclass


@dataclass
class CheckoutError(Exception):
    code: str
    message: str
    details: object | None = None
    trace_id: str | None = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class ValidationError(CheckoutError):
    """Bad operator input; shown inline and never fatal."""


class PermissionDeniedError(CheckoutError):
    """Role check failed; the operation is aborted."""


class InvariantViolation(CheckoutError):
    """The operation would break an engine invariant."""


class NetworkError(CheckoutError):
    """Backend call failed; in-memory state is unchanged."""


class ConfirmationRequired(CheckoutError):
    """A human-in-the-loop gate must be passed before the operation proceeds."""


class StorageError(CheckoutError):
    """Local persistence failed; the in-memory state is still authoritative."""

    def __init__(self, message: str = "Local data could not be saved", details: object | None = None) -> None:
        super().__init__(code="STORAGE_ERROR", message=message, details=details)


class EmptyCartError(ValidationError):
    def __init__(self, message: str = "Cart is empty") -> None:
        super().__init__(code="EMPTY_CART", message=message)


class CustomerRequiredError(ValidationError):
    def __init__(self, message: str = "A customer must be selected for this payment method") -> None:
        super().__init__(code="CUSTOMER_REQUIRED", message=message)


class SplitMismatchError(ValidationError):
    def __init__(self, message: str = "Split payment does not match the total") -> None:
        super().__init__(code="SPLIT_MISMATCH", message=message)


class NoChangeError(ValidationError):
    def __init__(self, message: str = "New price is the same as the current price") -> None:
        super().__init__(code="NO_CHANGE", message=message)


class ProductInactiveError(ValidationError):
    def __init__(self, message: str = "Product is inactive") -> None:
        super().__init__(code="PRODUCT_INACTIVE", message=message)


class ForbiddenError(PermissionDeniedError):
    def __init__(self, message: str = "Only ADMIN or MANAGER may override prices") -> None:
        super().__init__(code="FORBIDDEN", message=message)


class LastChannelError(InvariantViolation):
    def __init__(self, message: str = "At least one channel must stay open") -> None:
        super().__init__(code="LAST_CHANNEL", message=message)


class UnknownChannelError(InvariantViolation):
    def __init__(self, channel_id: str) -> None:
        super().__init__(code="UNKNOWN_CHANNEL", message=f"Channel {channel_id} does not exist")


class UnknownLineError(InvariantViolation):
    def __init__(self, line_id: str) -> None:
        super().__init__(code="UNKNOWN_LINE", message=f"Cart line {line_id} does not exist")


class UnknownHeldSaleError(InvariantViolation):
    def __init__(self, held_id: str) -> None:
        super().__init__(code="UNKNOWN_HELD_SALE", message=f"Held sale {held_id} does not exist")


class ShiftAlreadyOpenError(InvariantViolation):
    def __init__(self, message: str = "A shift is already open") -> None:
        super().__init__(code="SHIFT_ALREADY_OPEN", message=message)


class ShiftNotOpenError(InvariantViolation):
    def __init__(self, message: str = "No shift is open") -> None:
        super().__init__(code="SHIFT_NOT_OPEN", message=message)


class SubmissionInProgressError(InvariantViolation):
    def __init__(self, channel_id: str) -> None:
        super().__init__(
            code="SUBMIT_IN_PROGRESS",
            message=f"A sale is already being submitted for channel {channel_id}",
        )
