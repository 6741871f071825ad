"""Market data providers (quotes and FX)."""
from .alphavantage import AlphaVantageQuoteProvider
from .fmp import FmpQuoteProvider
from .forex import CurrencyApiFxProvider, ExchangeRateApiProvider, FixerFxProvider
from .history import SyntheticHistoryProvider, YahooHistoryProvider
from .http import ProviderError
from .synthetic import SyntheticFxProvider, SyntheticQuoteProvider
from .yahoo import YahooQuoteProvider

__all__ = [
    "AlphaVantageQuoteProvider",
    "CurrencyApiFxProvider",
    "ExchangeRateApiProvider",
    "FixerFxProvider",
    "FmpQuoteProvider",
    "ProviderError",
    "SyntheticFxProvider",
    "SyntheticHistoryProvider",
    "SyntheticQuoteProvider",
    "YahooHistoryProvider",
    "YahooQuoteProvider",
]
