from .calculator import CartTotals, compute_totals, discount_amount, subtotal, tax_portion, to_display
from .models import (
    AD_HOC_BARCODE,
    CampaignDiscount,
    CartLine,
    Channel,
    CheckoutState,
    FixedDiscount,
    HeldSale,
    LedgerSale,
    PercentageDiscount,
    Receipt,
    ReceiptLine,
    SaleAttemptStatus,
    Shift,
    StockWarning,
    ZReport,
)

__all__ = [
    "AD_HOC_BARCODE",
    "CampaignDiscount",
    "CartLine",
    "CartTotals",
    "Channel",
    "CheckoutState",
    "FixedDiscount",
    "HeldSale",
    "LedgerSale",
    "PercentageDiscount",
    "Receipt",
    "ReceiptLine",
    "SaleAttemptStatus",
    "Shift",
    "StockWarning",
    "ZReport",
    "compute_totals",
    "discount_amount",
    "subtotal",
    "tax_portion",
    "to_display",
]
