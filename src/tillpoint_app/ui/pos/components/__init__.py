from .cart_table import CartTable
from .payment_summary_bar import PaymentSummaryBar
from .z_report import ZReportPanel

__all__ = ["CartTable", "PaymentSummaryBar", "ZReportPanel"]
