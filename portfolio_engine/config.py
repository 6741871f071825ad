"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, get_args

import yaml
from dotenv import load_dotenv

from .models import Category, Currency, Holding, Market, SymbolProfile

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DashboardConfig:
    name: str = "Pinnacle Investment Partners"
    reporting_currency: str = "EUR"
    refresh_interval_sec: int = 15


@dataclass(frozen=True)
class DataConfig:
    provider: str = "yahoo"
    alphavantage_key: str = ""
    fmp_key: str = "demo"
    currencyapi_key: str = "cur_live_demo"
    request_timeout: int = 8
    cache_dir: str = ".cache"
    fx_cache_ttl_hours: float = 4.0


@dataclass(frozen=True)
class RiskConfig:
    risk_free_rate: float = 0.04
    benchmark_return: float = 0.10


@dataclass(frozen=True)
class SnapshotConfig:
    as_of_total_eur: float = 0.0
    initial_deposit_eur: float = 0.0
    initial_year: int = 0


@dataclass(frozen=True)
class TelegramConfig:
    enabled: bool = False
    alert_bot_token: str = ""
    log_bot_token: str = ""
    chat_id: str = ""


@dataclass(frozen=True)
class NotificationsConfig:
    telegram: TelegramConfig = field(default_factory=TelegramConfig)


@dataclass(frozen=True)
class AppConfig:
    dashboard: DashboardConfig = field(default_factory=DashboardConfig)
    data: DataConfig = field(default_factory=DataConfig)
    risk: RiskConfig = field(default_factory=RiskConfig)
    snapshot: SnapshotConfig = field(default_factory=SnapshotConfig)
    holdings: tuple[Holding, ...] = ()
    symbols: dict[str, SymbolProfile] = field(default_factory=dict)
    default_profile: SymbolProfile = field(default_factory=SymbolProfile)
    notifications: NotificationsConfig = field(default_factory=NotificationsConfig)


DATA_PROVIDERS = ("yahoo", "alphavantage")

# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_dashboard(raw: dict[str, Any]) -> DashboardConfig:
    return DashboardConfig(
        name=raw.get("name", DashboardConfig.name),
        reporting_currency=raw.get("reporting_currency", "EUR"),
        refresh_interval_sec=int(raw.get("refresh_interval_sec", 15)),
    )


def _build_data(raw: dict[str, Any]) -> DataConfig:
    return DataConfig(
        provider=raw.get("provider", "yahoo"),
        alphavantage_key=raw.get("alphavantage_key", "") or "",
        fmp_key=raw.get("fmp_key", "demo") or "demo",
        currencyapi_key=raw.get("currencyapi_key", "cur_live_demo") or "cur_live_demo",
        request_timeout=int(raw.get("request_timeout", 8)),
        cache_dir=raw.get("cache_dir", ".cache"),
        fx_cache_ttl_hours=float(raw.get("fx_cache_ttl_hours", 4.0)),
    )


def _build_risk(raw: dict[str, Any]) -> RiskConfig:
    return RiskConfig(
        risk_free_rate=float(raw.get("risk_free_rate", 0.04)),
        benchmark_return=float(raw.get("benchmark_return", 0.10)),
    )


def _build_snapshot(raw: dict[str, Any]) -> SnapshotConfig:
    return SnapshotConfig(
        as_of_total_eur=float(raw.get("as_of_total_eur", 0.0)),
        initial_deposit_eur=float(raw.get("initial_deposit_eur", 0.0)),
        initial_year=int(raw.get("initial_year", 0)),
    )


def _build_holdings(raw: list[dict[str, Any]]) -> tuple[Holding, ...]:
    holdings: list[Holding] = []
    for h in raw:
        holdings.append(
            Holding(
                symbol=str(h.get("symbol", "")),
                name=h.get("name", ""),
                market=h.get("market", ""),
                category=h.get("category", ""),
                qty=float(h.get("qty", 0.0)),
                avg_price=float(h.get("avg_price", 0.0)),
                currency=h.get("currency", ""),
                unit=h.get("unit"),
            )
        )
    return tuple(holdings)


def _build_profile(raw: dict[str, Any], default: SymbolProfile) -> SymbolProfile:
    return SymbolProfile(
        sector=raw.get("sector", default.sector),
        region=raw.get("region", default.region),
        volatility=float(raw.get("volatility", default.volatility)),
        beta=float(raw.get("beta", default.beta)),
        dividend_yield=float(raw.get("dividend_yield", default.dividend_yield)),
    )


def _build_symbols(raw: dict[str, Any], default: SymbolProfile) -> dict[str, SymbolProfile]:
    return {str(symbol): _build_profile(cfg or {}, default) for symbol, cfg in raw.items()}


def _build_notifications(raw: dict[str, Any]) -> NotificationsConfig:
    tg = raw.get("telegram", {})
    return NotificationsConfig(
        telegram=TelegramConfig(
            enabled=bool(tg.get("enabled", False)),
            alert_bot_token=tg.get("alert_bot_token", ""),
            log_bot_token=tg.get("log_bot_token", ""),
            chat_id=str(tg.get("chat_id", "")),
        ),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    default_profile = _build_profile(raw.get("default_profile", {}), SymbolProfile())
    cfg = AppConfig(
        dashboard=_build_dashboard(raw.get("dashboard", {})),
        data=_build_data(raw.get("data", {})),
        risk=_build_risk(raw.get("risk", {})),
        snapshot=_build_snapshot(raw.get("snapshot", {})),
        holdings=_build_holdings(raw.get("holdings", [])),
        symbols=_build_symbols(raw.get("symbols", {}), default_profile),
        default_profile=default_profile,
        notifications=_build_notifications(raw.get("notifications", {})),
    )

    _validate(cfg)
    logger.info(
        "Configuration loaded from %s (%d holdings)", config_path, len(cfg.holdings)
    )
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.holdings:
        raise ValueError("At least one holding must be configured")

    if cfg.dashboard.reporting_currency != "EUR":
        raise ValueError(
            f"Unsupported reporting currency '{cfg.dashboard.reporting_currency}'"
        )

    if cfg.data.provider not in DATA_PROVIDERS:
        raise ValueError(f"Unknown data provider '{cfg.data.provider}'")

    seen: set[str] = set()
    for holding in cfg.holdings:
        if not holding.symbol:
            raise ValueError(f"Holding '{holding.name}' has no symbol")
        if holding.symbol in seen:
            raise ValueError(f"Duplicate holding symbol '{holding.symbol}'")
        seen.add(holding.symbol)

        if holding.market not in get_args(Market):
            raise ValueError(
                f"Holding '{holding.symbol}' has unknown market '{holding.market}'"
            )
        if holding.category not in get_args(Category):
            raise ValueError(
                f"Holding '{holding.symbol}' has unknown category '{holding.category}'"
            )
        if holding.currency not in get_args(Currency):
            raise ValueError(
                f"Holding '{holding.symbol}' has unsupported currency '{holding.currency}'"
            )
        if not holding.avg_price >= 0:
            raise ValueError(f"Holding '{holding.symbol}' has a negative or invalid avg_price")
