from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from dotenv import load_dotenv


class TerminalConfigError(ValueError):
    """Raised when terminal engine configuration is invalid."""


@dataclass(frozen=True)
class TerminalConfig:
    terminal_id: str | None = None
    low_stock_threshold: int = 10
    frequent_products_limit: int = 6
    data_dir: str | None = None
    telemetry_enabled: bool = False
    money_epsilon: Decimal = Decimal("0.01")


def _read_int(name: str, default: int, minimum: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise TerminalConfigError(f"Invalid {name}: expected an integer, got {raw!r}") from exc
    if value < minimum:
        raise TerminalConfigError(f"Invalid {name}: expected >= {minimum}, got {value}")
    return value


def load_terminal_config(env_file: str | None = None) -> TerminalConfig:
    load_dotenv(env_file)

    raw_epsilon = os.getenv("TILLPOINT_MONEY_EPSILON", "0.01")
    try:
        money_epsilon = Decimal(raw_epsilon)
    except InvalidOperation as exc:
        raise TerminalConfigError(f"Invalid TILLPOINT_MONEY_EPSILON: expected a number, got {raw_epsilon!r}") from exc
    if money_epsilon < 0:
        raise TerminalConfigError(f"Invalid TILLPOINT_MONEY_EPSILON: expected >= 0, got {money_epsilon}")

    return TerminalConfig(
        terminal_id=(os.getenv("TILLPOINT_TERMINAL_ID") or "").strip() or None,
        low_stock_threshold=_read_int("TILLPOINT_LOW_STOCK_THRESHOLD", 10, 0),
        frequent_products_limit=_read_int("TILLPOINT_FREQUENT_PRODUCTS_LIMIT", 6, 1),
        data_dir=(os.getenv("TILLPOINT_DATA_DIR") or "").strip() or None,
        telemetry_enabled=os.getenv("TILLPOINT_TELEMETRY_ENABLED", "0").strip().lower() in {"1", "true", "yes", "on"},
        money_epsilon=money_epsilon,
    )
