from __future__ import annotations

from decimal import Decimal

import pytest

from tillpoint_sdk.config import ConfigError, load_config
from tillpoint_app.config import TerminalConfigError, load_terminal_config


def test_load_config_requires_base_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TILLPOINT_API_BASE_URL", raising=False)
    monkeypatch.delenv("TILLPOINT_API_BASE_URL_DEV", raising=False)
    monkeypatch.delenv("TILLPOINT_ENV", raising=False)
    with pytest.raises(ConfigError):
        load_config()


def test_load_config_profile(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TILLPOINT_ENV", "staging")
    monkeypatch.setenv("TILLPOINT_API_BASE_URL_STAGING", "https://staging.example.com/")
    cfg = load_config()
    assert cfg.api_base_url == "https://staging.example.com"
    assert cfg.env_name == "staging"


@pytest.mark.parametrize(
    ("key", "value"),
    [
        ("TILLPOINT_TIMEOUT_SECONDS", "0"),
        ("TILLPOINT_CONNECT_TIMEOUT_SECONDS", "0"),
        ("TILLPOINT_READ_TIMEOUT_SECONDS", "0"),
        ("TILLPOINT_RETRIES", "-1"),
        ("TILLPOINT_RETRY_BACKOFF_SECONDS", "-0.1"),
        ("TILLPOINT_MAX_CONNECTIONS", "0"),
        ("TILLPOINT_RETRIES", "many"),
    ],
)
def test_load_config_rejects_invalid_values(monkeypatch: pytest.MonkeyPatch, key: str, value: str) -> None:
    monkeypatch.setenv("TILLPOINT_API_BASE_URL", "https://api.example.com")
    monkeypatch.setenv(key, value)
    with pytest.raises(ConfigError) as exc:
        load_config()
    assert key in str(exc.value)


def test_terminal_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in (
        "TILLPOINT_LOW_STOCK_THRESHOLD",
        "TILLPOINT_FREQUENT_PRODUCTS_LIMIT",
        "TILLPOINT_DATA_DIR",
        "TILLPOINT_TERMINAL_ID",
        "TILLPOINT_TELEMETRY_ENABLED",
        "TILLPOINT_MONEY_EPSILON",
    ):
        monkeypatch.delenv(key, raising=False)
    cfg = load_terminal_config()
    assert cfg.low_stock_threshold == 10
    assert cfg.frequent_products_limit == 6
    assert cfg.money_epsilon == Decimal("0.01")
    assert cfg.telemetry_enabled is False
    assert cfg.data_dir is None


def test_terminal_config_reads_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TILLPOINT_LOW_STOCK_THRESHOLD", "3")
    monkeypatch.setenv("TILLPOINT_TERMINAL_ID", "till-7")
    monkeypatch.setenv("TILLPOINT_TELEMETRY_ENABLED", "yes")
    cfg = load_terminal_config()
    assert cfg.low_stock_threshold == 3
    assert cfg.terminal_id == "till-7"
    assert cfg.telemetry_enabled is True


@pytest.mark.parametrize(
    ("key", "value"),
    [
        ("TILLPOINT_LOW_STOCK_THRESHOLD", "-1"),
        ("TILLPOINT_FREQUENT_PRODUCTS_LIMIT", "0"),
        ("TILLPOINT_FREQUENT_PRODUCTS_LIMIT", "six"),
        ("TILLPOINT_MONEY_EPSILON", "abc"),
        ("TILLPOINT_MONEY_EPSILON", "-0.5"),
    ],
)
def test_terminal_config_rejects_invalid_values(monkeypatch: pytest.MonkeyPatch, key: str, value: str) -> None:
    monkeypatch.setenv(key, value)
    with pytest.raises(TerminalConfigError) as exc:
        load_terminal_config()
    assert key in str(exc.value)
