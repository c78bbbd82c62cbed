from .checkout_view import CheckoutView
from .payment_dialog import PaymentDialog
from .shift_view import ShiftView

__all__ = ["CheckoutView", "PaymentDialog", "ShiftView"]
