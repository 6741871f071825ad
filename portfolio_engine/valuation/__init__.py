"""Pure valuation core: currency conversion, holdings, metrics, summary."""
from .currency import (
    BASE_CURRENCY,
    FALLBACK_RATES,
    SUPPORTED_CURRENCIES,
    UnsupportedCurrencyError,
    convert_to_eur,
    fallback_rate,
)
from .holdings import aggregate, compute_holdings, value_holding
from .metrics import PortfolioCalculator, realized_volatility, series_return
from .summary import summarize

__all__ = [
    "BASE_CURRENCY",
    "FALLBACK_RATES",
    "SUPPORTED_CURRENCIES",
    "UnsupportedCurrencyError",
    "convert_to_eur",
    "fallback_rate",
    "aggregate",
    "compute_holdings",
    "value_holding",
    "PortfolioCalculator",
    "realized_volatility",
    "series_return",
    "summarize",
]
