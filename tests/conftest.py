"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from portfolio_engine.config import (
    AppConfig,
    DashboardConfig,
    DataConfig,
    NotificationsConfig,
    SnapshotConfig,
    TelegramConfig,
)
from portfolio_engine.models import FxRates, Holding, Quote, SymbolProfile


# ---------------------------------------------------------------------------
# Holding / market data fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def aapl() -> Holding:
    return Holding(
        symbol="AAPL",
        name="Apple Inc.",
        market="US",
        category="US Stocks",
        qty=25,
        avg_price=145.50,
        currency="USD",
    )


@pytest.fixture()
def shell() -> Holding:
    return Holding(
        symbol="SHEL.L",
        name="Shell plc",
        market="UK",
        category="UK Stocks",
        qty=150,
        avg_price=24.50,
        currency="GBP",
    )


@pytest.fixture()
def fx() -> FxRates:
    return FxRates(rates={"USD": 1.08, "GBP": 0.87, "INR": 90.0}, fetched_at=0.0, source="test")


@pytest.fixture()
def quotes() -> dict[str, Quote]:
    return {
        "AAPL": Quote(
            symbol="AAPL",
            price=190.00,
            previous_close=188.00,
            change=2.00,
            change_percent=1.06,
            currency="USD",
        ),
        "SHEL.L": Quote(
            symbol="SHEL.L",
            price=26.00,
            previous_close=26.50,
            change=-0.50,
            change_percent=-1.89,
            currency="GBP",
        ),
    }


@pytest.fixture()
def profiles() -> dict[str, SymbolProfile]:
    return {
        "AAPL": SymbolProfile(sector="Technology", volatility=0.25, beta=1.2, dividend_yield=0.5),
        "SHEL.L": SymbolProfile(
            sector="Energy", region="United Kingdom", volatility=0.25, beta=1.0, dividend_yield=5.8
        ),
    }


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_snapshot() -> SnapshotConfig:
    return SnapshotConfig(as_of_total_eur=54762.25, initial_deposit_eur=12184.06, initial_year=2021)


@pytest.fixture()
def sample_app_config(
    aapl: Holding,
    shell: Holding,
    profiles: dict[str, SymbolProfile],
    sample_snapshot: SnapshotConfig,
    tmp_path: Path,
) -> AppConfig:
    return AppConfig(
        dashboard=DashboardConfig(name="Test Portfolio", refresh_interval_sec=5),
        data=DataConfig(cache_dir=str(tmp_path / "cache")),
        snapshot=sample_snapshot,
        holdings=(aapl, shell),
        symbols=profiles,
        notifications=NotificationsConfig(
            telegram=TelegramConfig(
                enabled=True,
                alert_bot_token="fake-alert-token",
                log_bot_token="fake-log-token",
                chat_id="12345",
            ),
        ),
    )


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    dashboard:
      name: Test Portfolio
      refresh_interval_sec: 30
    data:
      provider: yahoo
      fmp_key: demo
      request_timeout: 5
      cache_dir: .test-cache
    risk:
      risk_free_rate: 0.03
    snapshot:
      as_of_total_eur: 54762.25
      initial_deposit_eur: 12184.06
      initial_year: 2021
    holdings:
      - symbol: AAPL
        name: Apple Inc.
        market: US
        category: US Stocks
        qty: 25
        avg_price: 145.50
        currency: USD
      - symbol: XAUUSD=X
        name: Gold Spot
        market: Commodity
        category: Gold
        qty: 0.4
        avg_price: 1950
        currency: USD
        unit: oz
    default_profile:
      volatility: 0.3
    symbols:
      AAPL: {sector: Technology, beta: 1.2}
      XAUUSD=X: {sector: Commodities, region: Commodities}
    notifications:
      telegram:
        enabled: true
        alert_bot_token: "tok1"
        log_bot_token: "tok2"
        chat_id: "999"
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
