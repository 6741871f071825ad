"""Risk and allocation metrics over the configured holdings.

The per-symbol inputs (sector, region, volatility, beta, dividend yield) come
from a static profile table rather than historical prices, so the portfolio
statistics here are approximations:

    Portfolio volatility = sqrt(sum((w_i/100)^2 * vol_i^2))
        variance-only, correlations between assets are ignored

    Sharpe ratio = (R_p - R_f) / vol_p

    Max drawdown = |min(0, worst unrealized P&L %)| / 100
        worst single-asset return, not a peak-to-trough series

    Beta = sum(w_i/100 * beta_i)
"""
from __future__ import annotations

import math
from typing import Mapping, Sequence

from ..models import (
    AssetMetrics,
    FxRates,
    GrowthMetrics,
    Holding,
    PortfolioMetrics,
    Quote,
    SymbolProfile,
)
from .currency import convert_to_eur
from .holdings import pnl_percent

DEFAULT_RISK_FREE_RATE = 0.04
DEFAULT_BENCHMARK_RETURN = 0.10


def sharpe_ratio(return_rate: float, volatility: float, risk_free_rate: float) -> float:
    if volatility == 0:
        return 0.0
    return (return_rate - risk_free_rate) / volatility


def portfolio_volatility(assets: Sequence[AssetMetrics]) -> float:
    variance = sum((a.weight / 100) ** 2 * a.volatility**2 for a in assets)
    return math.sqrt(variance)


def max_drawdown(assets: Sequence[AssetMetrics]) -> float:
    if not assets:
        return 0.0
    worst = min(a.unrealized_pnl_percent for a in assets)
    return abs(min(worst, 0.0)) / 100


def portfolio_beta(assets: Sequence[AssetMetrics]) -> float:
    return sum(a.weight / 100 * a.beta for a in assets)


def annualized_return(current_value: float, initial_value: float, years: float) -> float:
    """Geometric annual return as a fraction; 0 when it is undefined."""
    if years <= 0 or initial_value <= 0:
        return 0.0
    ratio = current_value / initial_value
    if ratio < 0:
        return 0.0
    return ratio ** (1 / years) - 1


def series_return(prices: Sequence[float]) -> float:
    """Percent change from the first to the last price of a series."""
    if len(prices) < 2 or prices[0] <= 0:
        return 0.0
    return (prices[-1] - prices[0]) / prices[0] * 100


def realized_volatility(prices: Sequence[float], periods_per_year: int = 252) -> float:
    """Annualised standard deviation of simple period returns.

    Bars with a non-positive price are skipped; fewer than two returns give 0.
    """
    valid = [p for p in prices if p > 0]
    returns = [b / a - 1 for a, b in zip(valid, valid[1:])]
    if len(returns) < 2:
        return 0.0
    mean = sum(returns) / len(returns)
    variance = sum((r - mean) ** 2 for r in returns) / (len(returns) - 1)
    return math.sqrt(variance) * math.sqrt(periods_per_year)


class PortfolioCalculator:
    """Compute per-asset and portfolio-level statistics for one snapshot."""

    def __init__(
        self,
        holdings: Sequence[Holding],
        quotes: Mapping[str, Quote],
        fx: FxRates,
        profiles: Mapping[str, SymbolProfile] | None = None,
        default_profile: SymbolProfile | None = None,
        risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
        benchmark_return: float = DEFAULT_BENCHMARK_RETURN,
    ) -> None:
        self._holdings = tuple(holdings)
        self._quotes = quotes
        self._fx = fx
        self._profiles = dict(profiles or {})
        self._default_profile = default_profile or SymbolProfile()
        self.risk_free_rate = risk_free_rate
        # Reserved: no formula consumes the benchmark yet.
        self.benchmark_return = benchmark_return

    def profile(self, symbol: str) -> SymbolProfile:
        return self._profiles.get(symbol, self._default_profile)

    def _current_price(self, symbol: str) -> float:
        quote = self._quotes.get(symbol)
        return quote.price if quote is not None and quote.price > 0 else 0.0

    def total_value(self) -> float:
        return sum(
            convert_to_eur(self._current_price(h.symbol) * h.qty, h.currency, self._fx)
            for h in self._holdings
        )

    def asset_metrics(self) -> list[AssetMetrics]:
        total_value = self.total_value()
        assets: list[AssetMetrics] = []

        for holding in self._holdings:
            quote = self._quotes.get(holding.symbol)
            current_price = self._current_price(holding.symbol)
            previous_close = current_price
            if quote is not None and current_price > 0 and quote.previous_close:
                previous_close = quote.previous_close

            current_value = convert_to_eur(current_price * holding.qty, holding.currency, self._fx)
            cost_basis = convert_to_eur(holding.avg_price * holding.qty, holding.currency, self._fx)
            unrealized_pnl = current_value - cost_basis
            unrealized_pnl_percent = pnl_percent(unrealized_pnl, cost_basis)

            change_per_unit = current_price - previous_close
            day_change = convert_to_eur(change_per_unit * holding.qty, holding.currency, self._fx)
            day_change_percent = (
                change_per_unit / previous_close * 100 if previous_close > 0 else 0.0
            )

            profile = self.profile(holding.symbol)
            assets.append(
                AssetMetrics(
                    symbol=holding.symbol,
                    name=holding.name,
                    current_value=current_value,
                    cost_basis=cost_basis,
                    unrealized_pnl=unrealized_pnl,
                    unrealized_pnl_percent=unrealized_pnl_percent,
                    day_change=day_change,
                    day_change_percent=day_change_percent,
                    weight=current_value / total_value * 100 if total_value > 0 else 0.0,
                    volatility=profile.volatility,
                    beta=profile.beta,
                    sharpe_ratio=sharpe_ratio(
                        unrealized_pnl_percent / 100, profile.volatility, self.risk_free_rate
                    ),
                    dividend_yield=profile.dividend_yield,
                )
            )

        return assets

    def portfolio_metrics(self) -> PortfolioMetrics:
        assets = self.asset_metrics()
        total_value = sum(a.current_value for a in assets)
        total_cost = sum(a.cost_basis for a in assets)
        total_pnl = total_value - total_cost
        total_pnl_percent = pnl_percent(total_pnl, total_cost)

        day_change = sum(a.day_change for a in assets)
        opening_value = total_value - day_change
        day_change_percent = (
            day_change / opening_value * 100
            if total_value > 0 and opening_value != 0
            else 0.0
        )

        asset_weights: dict[str, float] = {}
        sector_weights: dict[str, float] = {}
        geographic_weights: dict[str, float] = {}
        for asset in assets:
            profile = self.profile(asset.symbol)
            asset_weights[asset.symbol] = asset.weight
            sector_weights[profile.sector] = sector_weights.get(profile.sector, 0.0) + asset.weight
            geographic_weights[profile.region] = (
                geographic_weights.get(profile.region, 0.0) + asset.weight
            )

        volatility = portfolio_volatility(assets)
        return PortfolioMetrics(
            total_value=total_value,
            total_cost=total_cost,
            total_pnl=total_pnl,
            total_pnl_percent=total_pnl_percent,
            day_change=day_change,
            day_change_percent=day_change_percent,
            volatility=volatility,
            sharpe_ratio=sharpe_ratio(total_pnl_percent / 100, volatility, self.risk_free_rate),
            max_drawdown=max_drawdown(assets),
            beta=portfolio_beta(assets),
            asset_weights=asset_weights,
            sector_weights=sector_weights,
            geographic_weights=geographic_weights,
        )

    def growth_metrics(self, initial_value: float, time_horizon_years: float) -> GrowthMetrics:
        """Compare the current portfolio value against ``initial_value``.

        Returns are expressed in percent.
        """
        current_value = self.total_value()
        total_return = current_value - initial_value
        total_return_percent = total_return / initial_value * 100 if initial_value > 0 else 0.0
        annualized = annualized_return(current_value, initial_value, time_horizon_years) * 100

        return GrowthMetrics(
            initial_value=initial_value,
            current_value=current_value,
            total_return=total_return,
            total_return_percent=total_return_percent,
            annualized_return=annualized,
            cagr=annualized,
            time_horizon_years=time_horizon_years,
            average_annual_growth=total_return_percent / max(time_horizon_years, 1),
        )
