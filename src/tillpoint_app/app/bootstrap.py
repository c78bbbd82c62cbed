from __future__ import annotations

import logging

from tillpoint_sdk import ApiSession, ClientConfig, LocalStore, PriceOverrideAudit, UserResponse, load_config

from ..config import TerminalConfig, load_terminal_config
from ..services.channel_store import ChannelStore
from ..services.frequent_products import FrequentProducts
from ..services.hold_service import HoldService
from ..services.lookup_service import LookupService
from ..services.price_override import PriceOverrideAuthority
from ..services.returns_service import ReturnsService
from ..services.settlement_service import SettlementService
from ..services.shift_ledger import ShiftLedger
from ..services.stock_guard import StockGuard
from ..telemetry.logger import TelemetryLogger
from ..ui.pos.checkout_view import CheckoutView
from ..ui.pos.shift_view import ShiftView

logger = logging.getLogger(__name__)


class TerminalBootstrap:
    """Builds one terminal's engine from configuration.

    Everything durable (channels, held sales, shift, frequent products) is
    reloaded from the local store, so constructing a bootstrap after a crash
    resumes where the terminal left off.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        terminal_config: TerminalConfig | None = None,
        session: ApiSession | None = None,
        store: LocalStore | None = None,
    ) -> None:
        self.terminal_config = terminal_config or load_terminal_config()
        self.session = session or ApiSession(config or load_config(), terminal_id=self.terminal_config.terminal_id)
        self.store = store or LocalStore(base_dir=self.terminal_config.data_dir)
        self.telemetry = TelemetryLogger(
            app_name="tillpoint",
            enabled=self.terminal_config.telemetry_enabled,
            log_file=self.store.root() / "telemetry.jsonl" if self.terminal_config.telemetry_enabled else None,
        )

        self.stock_guard = StockGuard(threshold=self.terminal_config.low_stock_threshold)
        self.frequent = FrequentProducts(store=self.store, limit=self.terminal_config.frequent_products_limit)
        self.channels = ChannelStore(store=self.store, frequent=self.frequent)
        self.ledger = ShiftLedger(store=self.store, epsilon=self.terminal_config.money_epsilon)
        self.lookup = LookupService(self.session)
        self.holds = HoldService(
            self.channels,
            store=self.store,
            stock_guard=self.stock_guard,
            lookup=self.lookup.by_barcode,
        )
        self.price_override = PriceOverrideAuthority(audit_sink=self._record_audit)
        self.settlement = SettlementService(
            self.session,
            self.channels,
            self.ledger,
            epsilon=self.terminal_config.money_epsilon,
        )
        self.returns = ReturnsService(self.session, self.ledger)

        self.checkout_view = CheckoutView(
            channels=self.channels,
            holds=self.holds,
            settlement=self.settlement,
            lookup=self.lookup,
            price_override=self.price_override,
            returns=self.returns,
            stock_guard=self.stock_guard,
            user=self.session.user,
            telemetry=self.telemetry,
        )
        self.shift_view = ShiftView(ledger=self.ledger, telemetry=self.telemetry)
        logger.info(
            "terminal_ready",
            extra={
                "terminal_id": self.terminal_config.terminal_id,
                "channel_count": len(self.channels.state.channels),
                "held_count": len(self.holds.list_held()),
                "shift_open": self.ledger.is_open,
            },
        )

    def sign_in(self, token: str, user: UserResponse) -> None:
        self.session.establish(token=token, user=user)
        self.checkout_view.user = user
        logger.info("operator_signed_in", extra={"user_id": user.id, "role": user.role})

    def sign_out(self) -> None:
        self.session.clear()
        self.checkout_view.user = None

    def _record_audit(self, record: PriceOverrideAudit) -> None:
        self.session.audit_client().record_price_override(record)
