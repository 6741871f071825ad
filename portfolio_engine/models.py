"""Data models — all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Mapping, Optional

Market = Literal["US", "UK", "Commodity", "REIT"]
Category = Literal["US Stocks", "UK Stocks", "Real Estate", "Gold", "Crypto"]
Currency = Literal["USD", "GBP"]
AlertType = Literal["price_above", "price_below", "volume_spike", "news"]
Timeframe = Literal["1D", "1W", "1M", "3M", "6M", "1Y", "ALL"]


@dataclass(frozen=True)
class Holding:
    """A configured position, valued in its native currency."""

    symbol: str
    name: str
    market: Market
    category: Category
    qty: float
    avg_price: float
    currency: Currency
    unit: Optional[str] = None


@dataclass(frozen=True)
class Quote:
    """Live (or synthetic) price observation. ``price <= 0`` means no data."""

    symbol: str
    price: float
    name: Optional[str] = None
    previous_close: Optional[float] = None
    change: Optional[float] = None
    change_percent: Optional[float] = None
    currency: Optional[str] = None
    exchange: Optional[str] = None
    market_state: Optional[str] = None


@dataclass(frozen=True)
class FxRates:
    """Units of foreign currency per 1 unit of ``base``."""

    rates: Mapping[str, float]
    fetched_at: float
    base: str = "EUR"
    source: str = ""


@dataclass(frozen=True)
class HoldingComputed:
    """Per-holding valuation row in the reporting currency."""

    symbol: str
    name: str
    category: str
    currency: str
    qty: float
    avg_price: float
    last_price: float
    value_eur: float
    cost_eur: float
    pnl_eur: float
    pnl_pct: float
    unit: Optional[str] = None
    change_pct: Optional[float] = None


@dataclass(frozen=True)
class PortfolioTotals:
    value_eur: float
    cost_eur: float
    pnl_eur: float
    pnl_pct: float


@dataclass(frozen=True)
class Valuation:
    rows: tuple[HoldingComputed, ...]
    totals: PortfolioTotals


@dataclass(frozen=True)
class SymbolProfile:
    """Static classification and risk inputs for one symbol."""

    sector: str = "Other"
    region: str = "United States"
    volatility: float = 0.25
    beta: float = 1.0
    dividend_yield: float = 0.0


@dataclass(frozen=True)
class AssetMetrics:
    symbol: str
    name: str
    current_value: float
    cost_basis: float
    unrealized_pnl: float
    unrealized_pnl_percent: float
    day_change: float
    day_change_percent: float
    weight: float
    volatility: float
    beta: float
    sharpe_ratio: float
    dividend_yield: float


@dataclass(frozen=True)
class PortfolioMetrics:
    total_value: float
    total_cost: float
    total_pnl: float
    total_pnl_percent: float
    day_change: float
    day_change_percent: float
    volatility: float
    sharpe_ratio: float
    max_drawdown: float
    beta: float
    asset_weights: dict[str, float] = field(default_factory=dict)
    sector_weights: dict[str, float] = field(default_factory=dict)
    geographic_weights: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class GrowthMetrics:
    initial_value: float
    current_value: float
    total_return: float
    total_return_percent: float
    annualized_return: float
    cagr: float
    time_horizon_years: float
    average_annual_growth: float


@dataclass(frozen=True)
class DashboardSummary:
    """Headline figures shown above the holdings table."""

    has_valid_data: bool
    current_value_eur: float
    current_value_inr: float
    total_growth_eur: float
    total_growth_percent: float
    valid_holdings: int
    top_performers: tuple[HoldingComputed, ...] = ()
    category_allocation: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class PriceAlert:
    id: str
    symbol: str
    type: AlertType
    condition: float
    message: str
    created_at: float
    triggered: bool = False


@dataclass(frozen=True)
class PricePoint:
    """One bar of a historical price series; ``timestamp`` in epoch seconds."""

    timestamp: float
    price: float
    volume: float = 0.0


@dataclass(frozen=True)
class WatchlistItem:
    symbol: str
    added_at: float


@dataclass(frozen=True)
class PortfolioSnapshot:
    """Everything derived in one refresh tick."""

    taken_at: float
    fx: FxRates
    quotes: dict[str, Quote]
    valuation: Valuation
    metrics: PortfolioMetrics
    summary: DashboardSummary
    triggered_alerts: tuple[PriceAlert, ...] = ()
