from .channel_store import ChannelStore
from .frequent_products import FrequentProducts
from .hold_service import HoldService, RestoreOutcome
from .lookup_service import LookupService
from .price_override import PriceOverrideAuthority, PriceOverrideResult
from .returns_service import ReturnOutcome, ReturnsService
from .settlement_service import SettlementOutcome, SettlementService
from .shift_ledger import ShiftLedger
from .stock_guard import StockGuard

__all__ = [
    "ChannelStore",
    "FrequentProducts",
    "HoldService",
    "LookupService",
    "PriceOverrideAuthority",
    "PriceOverrideResult",
    "RestoreOutcome",
    "ReturnOutcome",
    "ReturnsService",
    "SettlementOutcome",
    "SettlementService",
    "ShiftLedger",
    "StockGuard",
]
